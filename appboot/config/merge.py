from __future__ import annotations

from typing import Any, Mapping, MutableMapping


def deep_merge(target: MutableMapping[str, Any], source: Mapping[str, Any] | None) -> None:
    """Deep-merge `source` into `target` in place.

    - Keys only in `source` are copied by reference.
    - `None` on either side replaces the target value with the source value.
    - Lists are replaced wholesale, never merged element-wise.
    - Mappings on both sides are merged recursively.
    - Anything else is replaced.

    The merge is last-writer-wins per leaf and therefore not commutative.
    """

    if target is None:
        raise TypeError("deep_merge() target must be a mapping, got None")
    if source is None:
        return

    for key, value in source.items():
        if key not in target:
            target[key] = value
            continue

        current = target[key]
        if current is None or value is None:
            target[key] = value
        elif isinstance(current, list) and isinstance(value, list):
            target[key] = value
        elif isinstance(current, MutableMapping) and isinstance(value, Mapping):
            deep_merge(current, value)
        else:
            target[key] = value
