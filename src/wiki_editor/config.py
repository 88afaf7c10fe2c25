"""Configuration helpers for the wiki editor."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, PositiveInt, ValidationError

from .editor.images import DEFAULT_MAX_IMAGE_BYTES
from .errors import ConfigError
from .pages.store import DEFAULT_ROOT_CONTENT, DEFAULT_ROOT_TITLE


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class RootPageSettings(BaseModel):
    """Seed values for the reserved root page."""

    title: str = Field(DEFAULT_ROOT_TITLE, description="Title of the page seeded as root")
    content: str = Field(DEFAULT_ROOT_CONTENT, description="HTML content of the root page")


class EditorSettings(BaseModel):
    """Limits applied by the editor when inserting content."""

    max_image_bytes: PositiveInt = Field(
        DEFAULT_MAX_IMAGE_BYTES, description="Largest image file accepted for embedding"
    )
    image_mime_prefix: str = Field("image/", description="Mime type prefix accepted by the image picker")


class WikiConfig(BaseModel):
    """Aggregate configuration for the editor."""

    root: RootPageSettings = Field(default_factory=RootPageSettings)
    editor: EditorSettings = Field(default_factory=EditorSettings)
    log_level: LogLevel = "WARNING"


ENV_PREFIX = "WIKI_EDITOR"
DEFAULT_CONFIG_PATHS = (
    Path.cwd() / "wiki-editor.toml",
    Path.home() / ".config" / "wiki-editor" / "config.toml",
)


@dataclasses.dataclass
class ConfigSource:
    """Result of attempting to resolve configuration data."""

    config: Optional[WikiConfig]
    path: Optional[Path]
    error: Optional[Exception]


def _load_from_env() -> dict[str, object]:
    """Return configuration values extracted from ``WIKI_EDITOR_*`` variables."""

    def _get(name: str) -> Optional[str]:
        return os.getenv(f"{ENV_PREFIX}_{name}")

    data: dict[str, object] = {}
    root: dict[str, str] = {}
    for key in ("TITLE", "CONTENT"):
        value = _get(f"ROOT_{key}")
        if value:
            root[key.lower()] = value
    if root:
        data["root"] = root

    max_bytes = _get("MAX_IMAGE_BYTES")
    if max_bytes:
        data["editor"] = {"max_image_bytes": max_bytes}

    log_level = _get("LOG_LEVEL")
    if log_level:
        data["log_level"] = log_level.upper()

    return data


def _load_toml(path: Path) -> Optional[dict]:
    if not path.exists():
        return None

    try:  # Python 3.11+
        import tomllib  # type: ignore
    except ModuleNotFoundError:  # pragma: no cover - Python <3.11 fallback
        import tomli as tomllib  # type: ignore

    with path.open("rb") as handle:
        return tomllib.load(handle)


def resolve_config(
    explicit_path: Optional[Path] = None,
    *,
    search_paths: Optional[tuple[Path, ...]] = None,
) -> ConfigSource:
    """Discover configuration using the first available source.

    The priority order is:
    1. Explicit path provided via CLI argument.
    2. Default configuration files in the working directory or the user's config directory.
    3. Environment variables with the `WIKI_EDITOR_` prefix.
    4. Built-in defaults.
    """

    errors: list[Exception] = []
    sources: list[tuple[Optional[Path], dict]] = []

    if explicit_path:
        try:
            data = _load_toml(explicit_path)
            if data is None:
                errors.append(FileNotFoundError(f"Configuration file {explicit_path} does not exist"))
            else:
                sources.append((explicit_path, data))
        except Exception as exc:
            errors.append(exc)
        if errors:
            return ConfigSource(config=None, path=explicit_path, error=errors[0])

    if not sources:
        for path in DEFAULT_CONFIG_PATHS if search_paths is None else search_paths:
            try:
                data = _load_toml(path)
            except Exception as exc:
                errors.append(exc)
                continue
            if data is not None:
                sources.append((path, data))
                break

    if not sources:
        env_data = _load_from_env()
        if env_data:
            sources.append((None, env_data))

    for path, data in sources:
        try:
            config = WikiConfig.model_validate(data)
            return ConfigSource(config=config, path=path, error=None)
        except ValidationError as exc:
            errors.append(exc)

    if errors:
        return ConfigSource(config=None, path=None, error=errors[0])
    return ConfigSource(config=WikiConfig(), path=None, error=None)


def load_config(
    config_path: Optional[Path] = None,
    *,
    root_title: Optional[str] = None,
    log_level: Optional[str] = None,
) -> WikiConfig:
    """Resolve configuration and apply explicit overrides on top of it."""

    source = resolve_config(config_path)
    if source.config is None:
        raise ConfigError(f"Invalid configuration: {source.error}") from source.error

    config = source.config.model_copy(deep=True)
    if root_title:
        config.root.title = root_title
    if log_level:
        config.log_level = log_level.upper()
    return config
