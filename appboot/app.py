"""Application assembly.

`create_app(__file__)` locates the application directory from any file inside
it and returns an unstarted `Application`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from appboot.errors import RootNotFoundError
from appboot.runtime.application import Application, ComponentFactory


API_DIR_NAME = "api"


def resolve_root(entry: str | Path) -> Path:
    """Find the application directory for `entry`.

    - `entry`'s directory contains `api/` -> that directory
    - `entry` lies somewhere under an `api/` directory -> the part before it
    - otherwise -> RootNotFoundError
    """

    path = Path(entry).expanduser().resolve()
    directory = path if path.is_dir() else path.parent

    if (directory / API_DIR_NAME).is_dir():
        return directory

    parts = directory.parts
    if API_DIR_NAME in parts:
        idx = len(parts) - 1 - parts[::-1].index(API_DIR_NAME)
        return Path(*parts[:idx])

    raise RootNotFoundError(f"Cannot determine the application directory for {path}")


def create_app(
    entry: str | Path,
    components: Iterable[ComponentFactory] = (),
    overrides: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> Application:
    """Build an `Application` rooted at the directory that owns `entry`."""

    return Application(resolve_root(entry), components=components, overrides=overrides, **kwargs)
