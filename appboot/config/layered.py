"""External layered configuration.

Three sources, merged with increasing precedence:
- dotfiles: `~/.<name>rc`, then the nearest `.<name>rc` walking up from cwd
- environment variables prefixed with `<NAME>_` (`__` separates nesting)
- command-line arguments (`--key=value`, `--key value`, `--flag`, `--no-flag`)

Dotfiles are YAML (JSON documents are accepted as well).
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

from appboot.config.loader import load_source
from appboot.config.merge import deep_merge


_NON_WORD_RE = re.compile(r"\W")
_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


def coerce_value(raw: str) -> Any:
    """Coerce a string from the environment or argv into bool/int/float."""

    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_RE.match(raw.strip()):
        return int(raw)
    if _FLOAT_RE.match(raw.strip()):
        return float(raw)
    return raw


def _looks_numeric(raw: str) -> bool:
    return bool(_INT_RE.match(raw) or _FLOAT_RE.match(raw))


def _set_path(target: MutableMapping[str, Any], keys: Sequence[str], value: Any) -> None:
    cur = target
    for key in keys[:-1]:
        nxt = cur.get(key)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[key] = nxt
        cur = nxt
    cur[keys[-1]] = value


def env_prefix(name: str) -> str:
    return _NON_WORD_RE.sub("_", name) + "_"


def parse_env(name: str, environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect `<NAME>_*` variables into a nested mapping.

    `MYAPP_DB__HOST=x` becomes `{"db": {"host": "x"}}`. The prefix match is
    case-insensitive and keys are lower-cased.
    """

    prefix = env_prefix(name).lower()
    out: dict[str, Any] = {}
    for var in sorted(environ):
        if not var.lower().startswith(prefix):
            continue
        rest = var[len(prefix):].lower()
        keys = [k for k in rest.split("__") if k]
        if not keys:
            continue
        _set_path(out, keys, coerce_value(environ[var]))
    return out


def parse_argv(argv: Sequence[str]) -> dict[str, Any]:
    """Parse `--key=value` style arguments into a nested mapping.

    Dotted keys nest (`--db.port=5432`). Positional arguments are ignored and
    parsing stops at `--`.
    """

    out: dict[str, Any] = {}
    args = list(argv)
    i = 0
    while i < len(args):
        arg = args[i]
        i += 1
        if arg == "--":
            break
        if not arg.startswith("--") or len(arg) == 2:
            continue

        body = arg[2:]
        if "=" in body:
            key, raw = body.split("=", 1)
            value: Any = coerce_value(raw)
        elif body.startswith("no-"):
            key, value = body[3:], False
        elif i < len(args) and (not args[i].startswith("-") or _looks_numeric(args[i])):
            key, value = body, coerce_value(args[i])
            i += 1
        else:
            key, value = body, True

        keys = [k for k in key.split(".") if k]
        if keys:
            _set_path(out, keys, value)
    return out


def find_project_dotfile(name: str, cwd: Path) -> Path | None:
    filename = f".{name}rc"
    for directory in [cwd, *cwd.parents]:
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


def load_layered_config(
    name: str,
    *,
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    home: Path | None = None,
) -> dict[str, Any]:
    """Merge dotfiles, prefixed env vars and argv (argv wins).

    `argv=None` reads the process arguments (`sys.argv[1:]`).
    """

    environ = os.environ if environ is None else environ
    cwd = Path.cwd() if cwd is None else cwd
    home = Path.home() if home is None else home

    merged: dict[str, Any] = {}

    user_rc = home / f".{name}rc"
    project_rc = find_project_dotfile(name, cwd)
    deep_merge(merged, load_source(user_rc))
    if project_rc is not None and project_rc != user_rc:
        deep_merge(merged, load_source(project_rc))

    deep_merge(merged, parse_env(name, environ))
    deep_merge(merged, parse_argv(sys.argv[1:] if argv is None else argv))
    return merged
