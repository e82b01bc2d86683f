"""Process lifecycle and console entrypoint (`appboot`).

Commands:
- `appboot run [ROOT]`: start the application and block until SIGINT/SIGTERM
- `appboot print-config [ROOT]`: resolve and print the configuration

Arguments the parser does not know (`--db.port=5432`) are forwarded to the
layered configuration.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from appboot.app import resolve_root
from appboot.config.resolver import ConfigResolver
from appboot.errors import ConfigError, MetadataError, RootNotFoundError
from appboot.metadata import read_metadata
from appboot.observability.logging import configure_logging
from appboot.runtime.application import Application, ComponentFactory
from appboot.runtime.signals import SignalShutdown


logger = logging.getLogger(__name__)

_SECRET_MARKERS = ("api_key", "token", "secret", "password")


def _redact_secrets(obj: Any) -> Any:
    """Best-effort redaction for human-facing config dumps."""

    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if isinstance(k, str) and any(p in k.lower() for p in _SECRET_MARKERS):
                out[k] = "<redacted>"
            else:
                out[k] = _redact_secrets(v)
        return out
    if isinstance(obj, list):
        return [_redact_secrets(x) for x in obj]
    return obj


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appboot",
        description="Bootstrap an application: layered config, components, models and services.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for the launcher itself (e.g. DEBUG, INFO, WARNING)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run_p = sub.add_parser("run", help="Start the application and wait for a termination signal")
    run_p.add_argument("root", nargs="?", default=".", help="Any path inside the application directory")
    run_p.add_argument(
        "--component",
        action="append",
        default=[],
        metavar="MODULE:ATTR",
        help="Component constructor to register (repeatable, registration order is kept)",
    )

    print_p = sub.add_parser("print-config", help="Resolve and print the configuration as JSON")
    print_p.add_argument("root", nargs="?", default=".", help="Any path inside the application directory")

    return parser


def load_component_factory(ref: str) -> ComponentFactory:
    """Import `package.module:Attr`."""

    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Component reference must look like 'module:Attr', got {ref!r}")
    module = importlib.import_module(module_name)
    factory = getattr(module, attr)
    if not callable(factory):
        raise ValueError(f"Component reference {ref!r} is not callable")
    return factory


async def serve(app: Application, shutdown: SignalShutdown) -> int:
    """Start `app` and wait until a signal-driven stop completes."""

    await app.start()
    try:
        return await shutdown.wait()
    finally:
        shutdown.uninstall()


def _print_config(root: Path, argv: Sequence[str]) -> int:
    info = read_metadata(root)
    resolver = ConfigResolver(root / "config", name=str(info["name"]), argv=argv)
    cfg = resolver.resolve({})
    sys.stdout.write(json.dumps(_redact_secrets(dict(cfg)), ensure_ascii=False, indent=2, default=str))
    sys.stdout.write("\n")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint referenced by pyproject.toml."""

    argv_list = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()

    try:
        ns, extra = parser.parse_known_args(argv_list)
    except SystemExit as e:
        # argparse has already printed help/usage to stdout/stderr.
        code = e.code
        return int(code) if isinstance(code, int) else 1

    configure_logging(level=ns.log_level, fmt="text", stream=sys.stderr)

    try:
        root = resolve_root(ns.root)

        if ns.command == "print-config":
            return _print_config(root, extra)

        components = [load_component_factory(ref) for ref in ns.component]
        shutdown = SignalShutdown()
        app = Application(root, components=components, shutdown_trigger=shutdown, argv=extra)
        return asyncio.run(serve(app, shutdown))

    except (RootNotFoundError, MetadataError, ConfigError) as e:
        logger.error("bootstrap_error: %s", e)
        sys.stderr.write(f"{type(e).__name__}: {e}\n")
        return 2
    except Exception as e:  # noqa: BLE001
        logger.exception("fatal_error")
        sys.stderr.write(f"Fatal error: {e}\n")
        return 1
