"""appboot: application bootstrap runtime.

Resolves layered configuration, discovers models and services on disk and
runs registered components through a start/stop lifecycle.
"""

from __future__ import annotations

from appboot.app import create_app, resolve_root
from appboot.config import ConfigBag, ConfigResolver, deep_merge, resolve_config
from appboot.discovery import scan
from appboot.errors import (
    AppbootError,
    ConfigError,
    LifecycleError,
    MetadataError,
    RootNotFoundError,
    UnitLoadError,
)
from appboot.runtime import Application, Component, LifecycleState, SignalShutdown
from appboot.units import Service

__all__ = [
    "__version__",
    "AppbootError",
    "Application",
    "Component",
    "ConfigBag",
    "ConfigError",
    "ConfigResolver",
    "LifecycleError",
    "LifecycleState",
    "MetadataError",
    "RootNotFoundError",
    "Service",
    "SignalShutdown",
    "UnitLoadError",
    "create_app",
    "deep_merge",
    "resolve_config",
    "resolve_root",
    "scan",
]

__version__ = "0.1.0"
