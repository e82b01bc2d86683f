"""Configuration resolution.

Sources, in order of increasing precedence:
1. `<path>/default.yaml`
2. every other `<path>/<topic>.yaml`, merged under the `<topic>` key
3. `<path>/env/<environment>.yaml`
4. layered external config (dotfiles < `<NAME>_*` env vars < argv)
5. runtime overrides passed by the embedding code
6. the reserved `HOST` / `PORT` environment variables (numeric only)

Every step is merged with `deep_merge`, so later steps win per leaf. Missing
or unreadable sources contribute nothing.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Mapping, Sequence

from dotenv import load_dotenv

from appboot.config.layered import load_layered_config
from appboot.config.loader import find_source, list_topic_sources, load_source
from appboot.config.merge import deep_merge
from appboot.config.model import ConfigBag


logger = logging.getLogger(__name__)

ENVIRONMENT_VAR = "APP_ENV"
DEFAULT_ENVIRONMENT = "development"
RESERVED_NUMERIC_VARS: tuple[tuple[str, str], ...] = (("HOST", "host"), ("PORT", "port"))


def _to_number(raw: str) -> int | float | None:
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


def _load_dotenv_if_present(root: Path) -> None:
    env_path = root / ".env"
    if env_path.is_file():
        # Do not override already-set environment variables.
        load_dotenv(env_path, override=False)


class ConfigResolver:
    """Builds a `ConfigBag` from the sources under one config directory.

    The environment name is captured once, at construction. Without an
    explicit `argv` the process arguments (`sys.argv[1:]`) feed the argv layer.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        name: str = "app",
        environ: Mapping[str, str] | None = None,
        argv: Sequence[str] | None = None,
        cwd: Path | None = None,
        home: Path | None = None,
        load_env_file: bool = True,
    ) -> None:
        self.path = Path(path)
        self.name = name

        if environ is None:
            if load_env_file:
                _load_dotenv_if_present(self.path.parent)
            environ = os.environ
        self._environ = environ
        self._argv = list(argv) if argv is not None else sys.argv[1:]
        self._cwd = cwd
        self._home = home

        self.environment = environ.get(ENVIRONMENT_VAR) or DEFAULT_ENVIRONMENT

    def resolve(self, runtime_overrides: Mapping[str, Any] | None = None) -> ConfigBag:
        bag = ConfigBag(environment=self.environment)

        deep_merge(bag, self._default_source())
        for topic, fragment in self._topic_sources():
            deep_merge(bag, {topic: fragment})
        deep_merge(bag, self._environment_source())
        deep_merge(bag, self._layered_source())
        deep_merge(bag, runtime_overrides)
        self._apply_reserved_vars(bag)

        logger.debug(
            "Configuration resolved for %s (environment=%s, keys=%s)",
            self.name,
            self.environment,
            sorted(bag.keys()),
        )
        return bag

    def _default_source(self) -> dict[str, Any]:
        return load_source(find_source(self.path, "default"))

    def _topic_sources(self) -> list[tuple[str, dict[str, Any]]]:
        return [(p.stem, load_source(p)) for p in list_topic_sources(self.path, exclude="default")]

    def _environment_source(self) -> dict[str, Any]:
        return load_source(find_source(self.path / "env", self.environment))

    def _layered_source(self) -> dict[str, Any]:
        return load_layered_config(
            self.name,
            argv=self._argv,
            environ=self._environ,
            cwd=self._cwd,
            home=self._home,
        )

    def _apply_reserved_vars(self, bag: ConfigBag) -> None:
        # Short names used by hosting platforms; these win over every other source.
        for var, key in RESERVED_NUMERIC_VARS:
            raw = self._environ.get(var)
            if not raw:
                continue
            value = _to_number(raw)
            if value is None:
                logger.warning("Ignoring %s=%r: not a number", var, raw)
                continue
            bag[key] = value


def resolve_config(
    runtime_overrides: Mapping[str, Any] | None,
    *,
    name: str = "app",
    path: str | Path,
    **kwargs: Any,
) -> ConfigBag:
    """One-shot `ConfigResolver(path, name=name, **kwargs).resolve(runtime_overrides)`."""

    return ConfigResolver(path, name=name, **kwargs).resolve(runtime_overrides)
