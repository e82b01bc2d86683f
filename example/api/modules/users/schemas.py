from __future__ import annotations

USER_FIELDS = ("id", "name")
