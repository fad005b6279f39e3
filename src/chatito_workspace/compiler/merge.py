"""Deep merge for JSON-shaped datasets."""

from __future__ import annotations

import copy
from typing import Any, MutableMapping, Mapping

__all__ = ["merge_deep"]


def merge_deep(target: MutableMapping[str, Any], source: Mapping[str, Any] | None) -> MutableMapping[str, Any]:
    """Merge ``source`` into ``target`` in place and return ``target``.

    Mappings merge key by key. Every other value (scalars and lists alike)
    from ``source`` replaces what ``target`` held. Values copied from
    ``source`` are deep copies, so later mutation of ``source`` never leaks.
    """

    if not isinstance(source, Mapping):
        return target
    for key, value in source.items():
        if isinstance(value, Mapping):
            existing = target.get(key)
            if not isinstance(existing, MutableMapping):
                existing = {}
                target[key] = existing
            merge_deep(existing, value)
        else:
            target[key] = copy.deepcopy(value)
    return target
