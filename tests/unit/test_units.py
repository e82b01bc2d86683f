from __future__ import annotations

import asyncio
import sys
import textwrap
from pathlib import Path
from types import ModuleType, SimpleNamespace

import pytest

from appboot.errors import UnitLoadError
from appboot.observability.logging import get_logger
from appboot.units import Service, Unit, init_unit, load_unit


def _unit_file(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / f"{name}.py"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_module_with_init_is_its_own_unit(tmp_path: Path) -> None:
    path = _unit_file(
        tmp_path,
        "plain",
        """
        calls = []

        def init(app):
            calls.append(app)
        """,
    )

    unit = load_unit(path, module_name="appboot_units.test.plain")

    assert isinstance(unit, ModuleType)
    assert isinstance(unit, Unit)
    asyncio.run(init_unit(unit, "APP"))
    assert unit.calls == ["APP"]


def test_exports_attribute_is_preferred(tmp_path: Path) -> None:
    path = _unit_file(
        tmp_path,
        "exported",
        """
        from dataclasses import dataclass, field

        @dataclass
        class Thing:
            seen: list = field(default_factory=list)

            async def init(self, app):
                self.seen.append(app)

        exports = Thing()
        """,
    )

    unit = load_unit(path, module_name="appboot_units.test.exported")
    asyncio.run(init_unit(unit, "APP"))

    assert type(unit).__name__ == "Thing"
    assert unit.seen == ["APP"]
    assert "appboot_units.test.exported" in sys.modules


def test_missing_init_is_rejected(tmp_path: Path) -> None:
    path = _unit_file(tmp_path, "noinit", "VALUE = 1\n")

    with pytest.raises(UnitLoadError) as ei:
        load_unit(path, module_name="appboot_units.test.noinit")

    assert "init" in str(ei.value)
    assert ei.value.location == str(path)


def test_import_error_is_wrapped_and_unregistered(tmp_path: Path) -> None:
    path = _unit_file(tmp_path, "broken", "raise RuntimeError('boom')\n")

    with pytest.raises(UnitLoadError) as ei:
        load_unit(path, module_name="appboot_units.test.broken")

    assert isinstance(ei.value.__cause__, RuntimeError)
    assert "appboot_units.test.broken" not in sys.modules


def test_not_a_python_file(tmp_path: Path) -> None:
    path = tmp_path / "data.txt"
    path.write_text("x", encoding="utf-8")

    with pytest.raises(UnitLoadError):
        load_unit(path, module_name="appboot_units.test.data")


def test_service_init_attaches_scoped_logger() -> None:
    class BillingService(Service):
        pass

    app = SimpleNamespace(logger=get_logger("app"))
    service = BillingService()
    asyncio.run(service.init(app))

    assert service.short_name == "billing"
    assert service.logger is not None
    assert service.logger.fields["scope"] == "billing"
