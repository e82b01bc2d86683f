"""Application lifecycle.

`Application` owns the state machine of one application run:

    CREATED -> STARTING -> RUNNING -> STOPPING -> STOPPED
                   \\                      \\
                    FAILED                  FAILED

`start()` resolves configuration, configures logging, discovers modules,
starts components one by one and loads models and services. Repeated calls
while a transition is in progress (or already done) are no-ops.
"""

from __future__ import annotations

import inspect
import re
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import IO, Any, Awaitable, Callable, Iterable, Mapping, Protocol, Sequence

from appboot.config.model import ConfigBag
from appboot.config.resolver import ConfigResolver
from appboot.discovery import ModuleTree, iter_leaves, scan
from appboot.errors import ConfigError, LifecycleError
from appboot.metadata import read_metadata
from appboot.observability.logging import SILENT, ScopedLogger, configure_logging, get_logger, parse_level
from appboot.units import Unit, init_unit, load_unit


DEFAULT_LOG_LEVEL = "error"
UNIT_NAMESPACE = "appboot_units"


class LifecycleState(str, Enum):
    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


class ComponentLike(Protocol):
    def start(self) -> Any: ...

    def stop(self) -> Any: ...


ComponentFactory = Callable[["Application"], ComponentLike]
StopCallback = Callable[[], Awaitable[None]]
ShutdownTrigger = Callable[[StopCallback], Any]


def component_name(component: Any) -> str:
    """The name used to enable/disable a component from config.

    An explicit `name` attribute wins; otherwise the class name with a trailing
    `Component` removed, lower-cased (`DatabaseComponent` -> `database`).
    """

    name = getattr(component, "name", None)
    if isinstance(name, str) and name:
        return name
    cls_name = type(component).__name__
    if cls_name.endswith("Component") and cls_name != "Component":
        cls_name = cls_name[: -len("Component")]
    return cls_name.lower()


class Component:
    """Optional base class for components.

    Subclasses override `start()`/`stop()`; both may be plain methods or
    coroutines.
    """

    name: str | None = None

    def __init__(self, app: "Application") -> None:
        self.app = app

    @property
    def settings(self) -> Any:
        """This component's top-level config section, `{}` when absent."""

        return self.app.config.lookup(component_name(self), {})

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass


def normalize_logs(value: Any) -> dict[str, Any] | bool:
    """Normalize the `logs` option.

    - absent / None / True -> `{"level": "error"}`
    - False -> False (silent)
    - "debug" -> `{"level": "debug"}`
    - mapping -> copied, `level` defaulted to "error"
    """

    if value is False:
        return False
    if value is None or value is True:
        return {"level": DEFAULT_LOG_LEVEL}
    if isinstance(value, str):
        return {"level": value}
    if isinstance(value, Mapping):
        out = dict(value)
        if out.get("level") is None:
            out["level"] = DEFAULT_LOG_LEVEL
        return out
    raise ConfigError("must be false, a level name or a mapping", path="logs")


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


def _namespace(name: str) -> str:
    return re.sub(r"\W", "_", name) or "app"


class Application:
    """Bootstraps one application rooted at `root`.

    Args:
        root: Application directory (holds `pyproject.toml`, `config/`, `api/`).
        components: Constructors called once with the application, in order.
        overrides: Runtime overrides; highest precedence except HOST/PORT.
        shutdown_trigger: Called with `stop` at the end of `start()` so the
            host can wire it to signals (see `appboot.runtime.signals`).
        reverse_stop: Stop components in reverse start order (default) or in
            registration order.
        environ, argv, cwd: Sources for the layered config; default to the
            process environment, `sys.argv[1:]` and the current directory.
        log_stream: Stream for the process-wide log handler (stdout by default).
    """

    def __init__(
        self,
        root: str | Path,
        *,
        components: Iterable[ComponentFactory] = (),
        overrides: Mapping[str, Any] | None = None,
        shutdown_trigger: ShutdownTrigger | None = None,
        reverse_stop: bool = True,
        environ: Mapping[str, str] | None = None,
        argv: Sequence[str] | None = None,
        cwd: Path | None = None,
        log_stream: IO[str] | None = None,
    ) -> None:
        self._root = Path(root).resolve()
        self._overrides: dict[str, Any] = dict(overrides or {})
        self._shutdown_trigger = shutdown_trigger
        self._reverse_stop = reverse_stop
        self._environ = environ
        self._argv = list(argv) if argv is not None else None
        self._cwd = cwd
        self._log_stream = log_stream

        self._state = LifecycleState.CREATED
        self._start_failed = False
        self._info: dict[str, Any] = {}
        self._name = ""
        self._config = ConfigBag()
        self._logger: ScopedLogger = get_logger("app")
        self._modules: ModuleTree = {}
        self._models: dict[str, Unit] = {}
        self._services: dict[str, Unit] = {}
        self._started: list[ComponentLike] = []

        self._components: list[ComponentLike] = [factory(self) for factory in components]

    # Read accessors ------------------------------------------------------
    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_dir(self) -> Path:
        return self._root / "config"

    @property
    def api_dir(self) -> Path:
        return self._root / "api"

    @property
    def models_dir(self) -> Path:
        return self.api_dir / "models"

    @property
    def modules_dir(self) -> Path:
        return self.api_dir / "modules"

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def info(self) -> Mapping[str, Any]:
        return MappingProxyType(self._info)

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> ConfigBag:
        return self._config

    @property
    def logger(self) -> ScopedLogger:
        return self._logger

    @property
    def modules(self) -> Mapping[str, Any]:
        return MappingProxyType(self._modules)

    @property
    def models(self) -> Mapping[str, Unit]:
        return MappingProxyType(self._models)

    @property
    def services(self) -> Mapping[str, Unit]:
        return MappingProxyType(self._services)

    @property
    def components(self) -> tuple[ComponentLike, ...]:
        return tuple(self._components)

    @property
    def api_enabled(self) -> bool:
        return not self._config.is_disabled("api") and self._config.get("mode") != "worker"

    def __repr__(self) -> str:
        return f"Application(name={self._name!r}, root={str(self._root)!r}, state={self._state.value})"

    # Lifecycle -----------------------------------------------------------
    async def start(self) -> None:
        if self._state in (LifecycleState.STARTING, LifecycleState.RUNNING, LifecycleState.STOPPING):
            self._logger.info("start() ignored: application is %s", self._state.value)
            return
        if self._state is LifecycleState.FAILED or self._start_failed:
            raise LifecycleError("application failed to start earlier; restart the process instead of start()")

        self._state = LifecycleState.STARTING
        try:
            await self._startup()
        except BaseException:
            self._state = LifecycleState.FAILED
            self._start_failed = True
            raise
        self._state = LifecycleState.RUNNING

        self._logger.always(
            "Application %s started in %s mode, environment %s",
            self._name,
            self._config.get("mode", "default"),
            self._config.environment,
        )

    async def stop(self) -> None:
        if self._state in (LifecycleState.CREATED, LifecycleState.STOPPING, LifecycleState.STOPPED):
            self._logger.info("stop() ignored: application is %s", self._state.value)
            return
        if self._state is LifecycleState.STARTING:
            self._logger.warning("stop() ignored: application is still starting")
            return

        self._state = LifecycleState.STOPPING
        order = list(reversed(self._started)) if self._reverse_stop else list(self._started)
        try:
            for component in order:
                await _maybe_await(component.stop())
                self._started.remove(component)
                self._logger.debug("Component %s stopped", component_name(component))
        except BaseException:
            self._state = LifecycleState.FAILED
            raise
        self._state = LifecycleState.STOPPED

        self._logger.always("Application %s stopped", self._name)

    async def __aenter__(self) -> "Application":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    # Startup steps -------------------------------------------------------
    async def _startup(self) -> None:
        self._info = read_metadata(self._root)
        self._name = str(self._info["name"])

        resolver = ConfigResolver(
            self.config_dir,
            name=self._name,
            environ=self._environ,
            argv=self._argv,
            cwd=self._cwd,
        )
        config = resolver.resolve(self._overrides)
        config["logs"] = normalize_logs(config.get("logs"))
        self._config = config

        self._configure_logger(config["logs"])

        self._modules = scan(self.modules_dir)
        self._models = {}
        self._services = {}
        self._started = []

        for component in self._components:
            name = component_name(component)
            if config.is_disabled(name):
                self._logger.debug("Component %s disabled by config", name)
                continue
            await _maybe_await(component.start())
            self._started.append(component)
            self._logger.debug("Component %s started", name)

        if self.api_enabled:
            await self.load_models()
            await self.load_services()
        else:
            self._logger.debug("API disabled: models and services not loaded")

        if self._shutdown_trigger is not None:
            self._shutdown_trigger(self.stop)

    def _configure_logger(self, logs: dict[str, Any] | bool) -> None:
        if logs is False:
            configure_logging(level=SILENT, stream=self._log_stream)
        else:
            try:
                level = parse_level(logs.get("level"))
            except ValueError as exc:
                raise ConfigError(str(exc), path="logs.level") from exc
            configure_logging(level=level, fmt=str(logs.get("format", "json")), stream=self._log_stream)
        self._logger = get_logger("app")

    def _unit_module_name(self, *parts: str) -> str:
        return ".".join([UNIT_NAMESPACE, _namespace(self._name), *(_namespace(p) for p in parts)])

    async def load_models(self) -> None:
        """Import every file in `api/models/` and call its `init(app)`."""

        tree = scan(self.models_dir)
        for name, location in iter_leaves(tree):
            self._models[name] = load_unit(location, module_name=self._unit_module_name("models", name))

        for name, model in self._models.items():
            await init_unit(model, self)
            self._logger.debug("Model %s ready", name)

    async def load_services(self) -> None:
        """Import `api/modules/<name>/service.py` for each module and init it."""

        for module_name, node in self._modules.items():
            if not isinstance(node, dict):
                continue
            location = node.get("service")
            if isinstance(location, Path):
                self._services[module_name] = load_unit(
                    location,
                    module_name=self._unit_module_name("modules", module_name, "service"),
                )

        for name, service in self._services.items():
            await init_unit(service, self)
            self._logger.debug("Service %s ready", name)
