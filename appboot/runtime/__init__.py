"""Application lifecycle, signal wiring and the console entrypoint."""

from __future__ import annotations

from appboot.runtime.application import Application, Component, LifecycleState, component_name
from appboot.runtime.signals import SignalShutdown

__all__ = ["Application", "Component", "LifecycleState", "SignalShutdown", "component_name"]
