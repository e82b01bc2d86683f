from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml


logger = logging.getLogger(__name__)

CONFIG_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml")


def is_config_file(path: Path) -> bool:
    return path.suffix.lower() in CONFIG_EXTENSIONS


def find_source(directory: Path, stem: str) -> Path | None:
    """Return the first existing `<directory>/<stem><ext>` config file."""

    for ext in CONFIG_EXTENSIONS:
        candidate = directory / f"{stem}{ext}"
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    return yaml.safe_load(text)


def load_source(path: Path | None) -> dict[str, Any]:
    """Load one YAML config source.

    A missing source contributes nothing. Unreadable or malformed sources are
    reported at warning level and also contribute nothing; they never abort
    resolution.
    """

    if path is None or not path.is_file():
        return {}

    try:
        fragment = _load_yaml(path)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        logger.warning("Skipping unreadable config source %s: %s", path, exc)
        return {}

    if fragment is None:
        return {}
    if not isinstance(fragment, dict):
        logger.warning(
            "Skipping config source %s: top-level YAML must be a mapping, got %s",
            path,
            type(fragment).__name__,
        )
        return {}
    return fragment


def list_topic_sources(directory: Path, *, exclude: str = "default") -> list[Path]:
    """Config files directly inside `directory`, sorted by name.

    Subdirectories (such as `env/`) are not descended into.
    """

    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except FileNotFoundError:
        return []
    except OSError as exc:
        logger.warning("Cannot list config directory %s: %s", directory, exc)
        return []

    return [p for p in entries if p.is_file() and is_config_file(p) and p.stem != exclude]
