"""Loading of discovered units (models and services).

Discovery only yields locations. This module turns a location into a unit:
the file is imported, the unit is the module's `exports` attribute when it
defines one (otherwise the module itself), and it must expose `init(app)`.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from appboot.errors import UnitLoadError

if TYPE_CHECKING:
    from appboot.observability.logging import ScopedLogger


logger = logging.getLogger(__name__)

EXPORTS_ATTR = "exports"


@runtime_checkable
class Unit(Protocol):
    """Anything with an `init(app)` hook; the hook may be a coroutine."""

    def init(self, app: Any) -> Any: ...


def load_unit(location: str | Path, *, module_name: str) -> Unit:
    """Import the file at `location` and return its unit.

    The module is registered in `sys.modules` under `module_name` (replacing a
    previous registration) so that dataclasses, pickling and typing inside the
    unit behave like a normal import.
    """

    path = Path(location)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise UnitLoadError("not an importable Python file", location=str(path))

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise UnitLoadError(f"import failed: {exc}", location=str(path)) from exc

    unit = getattr(module, EXPORTS_ATTR, module)
    if not callable(getattr(unit, "init", None)):
        raise UnitLoadError("unit does not define an init(app) hook", location=str(path))

    logger.debug("Loaded unit %s from %s", module_name, path)
    return unit


async def init_unit(unit: Unit, app: Any) -> None:
    result = unit.init(app)
    if inspect.isawaitable(result):
        await result


def _short_name(cls_name: str, suffix: str) -> str:
    if cls_name.endswith(suffix) and cls_name != suffix:
        cls_name = cls_name[: -len(suffix)]
    return cls_name.lower()


class Service:
    """Base class for services found at `api/modules/<name>/service.py`.

    `init()` attaches a logger scoped to the service's short name
    (`UsersService` -> `users`).
    """

    logger: "ScopedLogger | None" = None

    @property
    def short_name(self) -> str:
        return _short_name(type(self).__name__, "Service")

    async def init(self, app: Any) -> None:
        self.logger = app.logger.child(scope=self.short_name)
