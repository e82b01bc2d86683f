from __future__ import annotations

import asyncio
import io
import shutil
from pathlib import Path

import pytest

from appboot import LifecycleState, create_app


EXAMPLE_DIR = Path(__file__).resolve().parents[1] / "example"


@pytest.fixture
def example_root(tmp_path: Path) -> Path:
    root = tmp_path / "example"
    shutil.copytree(EXAMPLE_DIR, root)
    return root


def test_just_start_and_stop_the_example(example_root: Path) -> None:
    app = create_app(example_root / "main.py", environ={}, cwd=example_root, log_stream=io.StringIO())

    async def run() -> None:
        await app.start()
        await app.stop()

    asyncio.run(run())

    assert app.state is LifecycleState.STOPPED
    assert app.name == "shop"


def test_example_wiring(example_root: Path) -> None:
    app = create_app(
        example_root / "api" / "modules" / "users" / "service.py",
        environ={"APP_ENV": "test", "PORT": "8080", "SHOP_DB__HOST": "db.internal"},
        cwd=example_root,
        log_stream=io.StringIO(),
    )
    asyncio.run(app.start())

    cfg = app.config
    assert cfg.environment == "test"
    assert cfg["port"] == 8080
    assert cfg["greeting"] == "hello from test"
    assert cfg["db"] == {"host": "db.internal", "port": 5432, "pool": {"size": 1}}

    assert set(app.modules) == {"orders", "users"}
    assert set(app.modules["users"]) == {"schemas", "service"}
    assert list(app.services) == ["users"]

    users = app.services["users"]
    assert users.find(1).name == "admin"
    assert users.logger.fields["scope"] == "users"
    assert app.models["user"].app is app
