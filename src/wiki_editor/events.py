"""Sequential event loop used to order UI events and file-read completions."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable


logger = logging.getLogger(__name__)


class EventLoop:
    """FIFO of pending callbacks executed one at a time on the caller's thread."""

    def __init__(self) -> None:
        self._queue: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.append((callback, args))

    def run_pending(self) -> int:
        """Run queued callbacks, including ones posted while draining.

        Returns the number of callbacks executed.
        """

        executed = 0
        while self._queue:
            callback, args = self._queue.popleft()
            callback(*args)
            executed += 1
        if executed:
            logger.debug("Processed %d event(s)", executed)
        return executed

    def __len__(self) -> int:
        return len(self._queue)
