from __future__ import annotations


def list_orders() -> list[dict]:
    return []
