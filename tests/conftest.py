from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest


_ISOLATED_VARS = ("APP_ENV", "HOST", "PORT")


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for var in _ISOLATED_VARS:
        # setenv first so that values set later (e.g. by load_dotenv) are undone too
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    home = tmp_path / "_home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    # the argv config layer defaults to sys.argv[1:]
    monkeypatch.setattr(sys, "argv", ["pytest"])


AppFactory = Callable[..., Path]


@pytest.fixture
def make_app(tmp_path: Path) -> AppFactory:
    """Write an application tree under tmp_path and return its root.

    `files` maps relative paths to file contents (dedented).
    """

    def _make(name: str = "demo", files: dict[str, str] | None = None, *, api: bool = True) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        (root / "pyproject.toml").write_text(f'[project]\nname = "{name}"\nversion = "1.0.0"\n', encoding="utf-8")
        if api:
            (root / "api").mkdir(exist_ok=True)
        for rel, content in (files or {}).items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return root

    return _make
