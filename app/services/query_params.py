from __future__ import annotations

import re
from typing import Any, Iterable

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_PART_RE = re.compile(r"\[([^\[\]]*)\]")


def _split_key(key: str) -> list[str] | None:
    match = _KEY_RE.match(key)
    if not match:
        return None
    return [match.group(1)] + _PART_RE.findall(match.group(2))


def _listify(node: Any) -> Any:
    if isinstance(node, dict):
        converted = {k: _listify(v) for k, v in node.items()}
        if converted and all(k.isdigit() for k in converted):
            return [converted[k] for k in sorted(converted, key=int)]
        return converted
    if isinstance(node, list):
        return [_listify(v) for v in node]
    return node


def parse_nested_params(items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Decode ``a[b][c]=v`` style pairs into nested dicts.

    ``a[b][]=v`` appends to a list and ``a[b][0]=v`` builds a list from numeric
    indexes. Keys that are not in bracket form are kept as plain keys; a later
    duplicate of a plain key overwrites the earlier one.
    """
    root: dict[str, Any] = {}
    for key, value in items:
        parts = _split_key(key)
        if parts is None:
            root[key] = value
            continue
        node: Any = root
        for idx, part in enumerate(parts):
            last = idx == len(parts) - 1
            nxt = None if last else parts[idx + 1]
            if isinstance(node, list):
                if last:
                    node.append(value)
                    break
                child = {} if nxt != "" else []
                node.append(child)
                node = child
                continue
            if last:
                node[part] = value
                break
            existing = node.get(part)
            wanted_list = nxt == ""
            if wanted_list and not isinstance(existing, list):
                existing = []
                node[part] = existing
            elif not wanted_list and not isinstance(existing, dict):
                existing = {}
                node[part] = existing
            if wanted_list and idx + 1 == len(parts) - 1:
                existing.append(value)
                break
            node = existing
    return _listify(root)
