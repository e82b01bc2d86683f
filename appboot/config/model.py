from __future__ import annotations

from typing import Any, Mapping


_MISSING = object()


class ConfigBag(dict):
    """The resolved, merged settings of one application run.

    A plain dict with a few read helpers. It is built once per start and
    treated as read-only afterwards.
    """

    @property
    def environment(self) -> str:
        value = self.get("environment")
        return value if isinstance(value, str) else "development"

    def get_path(self, path: str, default: Any = None) -> Any:
        """Dotted lookup: `bag.get_path("db.pool.size", 5)`."""

        cur: Any = self
        for part in path.split("."):
            if not isinstance(cur, Mapping) or part not in cur:
                return default
            cur = cur[part]
        return cur

    def is_disabled(self, name: str) -> bool:
        """True when a top-level key matching `name` (any case) is exactly False."""

        wanted = name.lower()
        for key, value in self.items():
            if isinstance(key, str) and key.lower() == wanted and value is False:
                return True
        return False

    def lookup(self, name: str, default: Any = _MISSING) -> Any:
        """Case-insensitive top-level lookup."""

        if name in self:
            return self[name]
        wanted = name.lower()
        for key, value in self.items():
            if isinstance(key, str) and key.lower() == wanted:
                return value
        if default is _MISSING:
            raise KeyError(name)
        return default
