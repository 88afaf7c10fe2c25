"""Asynchronous reading of picked image files into data URIs."""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Callable, Optional

from wiki_editor.errors import ImageReadError
from wiki_editor.events import EventLoop


logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024


class FileInput:
    """The hidden file input the image picker writes its selection into."""

    def __init__(self) -> None:
        self.value: Optional[Path] = None

    def select(self, path: Path) -> None:
        self.value = Path(path)

    def clear(self) -> None:
        self.value = None


class ImageLoader:
    """Read image files off the main flow and report the result as a later event."""

    def __init__(
        self,
        loop: EventLoop,
        *,
        max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        mime_prefix: str = "image/",
    ) -> None:
        self.loop = loop
        self.max_bytes = max_bytes
        self.mime_prefix = mime_prefix

    def read_as_data_uri(
        self,
        path: Path,
        on_load: Callable[[str], None],
        on_error: Optional[Callable[[ImageReadError], None]] = None,
    ) -> None:
        """Schedule the read of ``path``.

        ``on_load`` receives the complete data URI in a separate event once the
        file has been fully read; ``on_error`` receives the failure instead.
        """

        self.loop.post(self._read, Path(path), on_load, on_error)

    def _read(
        self,
        path: Path,
        on_load: Callable[[str], None],
        on_error: Optional[Callable[[ImageReadError], None]],
    ) -> None:
        try:
            data_uri = self.to_data_uri(path)
        except ImageReadError as exc:
            if on_error is None:
                logger.warning("%s", exc)
            else:
                self.loop.post(on_error, exc)
            return
        self.loop.post(on_load, data_uri)

    def to_data_uri(self, path: Path) -> str:
        mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type or not mime_type.startswith(self.mime_prefix):
            raise ImageReadError(path, f"unsupported file type {mime_type or 'unknown'}")
        try:
            size = path.stat().st_size
            if size > self.max_bytes:
                raise ImageReadError(path, f"file is {size} bytes, limit is {self.max_bytes}")
            payload = path.read_bytes()
        except OSError as exc:
            raise ImageReadError(path, exc.strerror or str(exc)) from exc
        encoded = base64.b64encode(payload).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"
