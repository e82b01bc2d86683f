from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from appboot.errors import MetadataError


DESCRIPTOR_NAME = "pyproject.toml"


def read_metadata(root: str | Path) -> dict[str, Any]:
    """Read the `[project]` table of `<root>/pyproject.toml`.

    Raises:
        MetadataError: If the file is missing, unparsable, or has no name.
    """

    path = Path(root) / DESCRIPTOR_NAME
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise MetadataError("application descriptor not found", path=str(path)) from exc
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise MetadataError(f"cannot parse application descriptor: {exc}", path=str(path)) from exc

    project = data.get("project")
    if not isinstance(project, dict):
        raise MetadataError("missing [project] table", path=str(path))

    name = project.get("name")
    if not isinstance(name, str) or not name.strip():
        raise MetadataError("[project].name must be a non-empty string", path=str(path))

    return dict(project)
