"""Dotted-path access to nested documents.

Paths are segmented with the escaped field path grammar of
:mod:`pydataapi._utils`. Reads accept an ``[n]`` index suffix on a
segment to step into a list. Reads never create anything and report a
broken path as ``None``/``False``; writes create missing intermediate
mappings, replacing any non-mapping value in the way.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from typing import Any

from pydataapi._utils import as_segments

_INDEXED_SEGMENT_RE = re.compile(r"^(.+)\[(\d+)\]$")

PathLike = str | Iterable[str]


def split_index(segment: str) -> tuple[str, int | None]:
    """Split ``name[3]`` into ``("name", 3)``; plain names get ``None``."""
    m = _INDEXED_SEGMENT_RE.match(segment)
    if m is None:
        return segment, None
    return m.group(1), int(m.group(2))


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _step(current: Any, segment: str) -> tuple[bool, Any]:
    """Follow one read segment. Returns ``(found, value)``."""
    if not isinstance(current, Mapping):
        return False, None
    name, index = split_index(segment)
    if name not in current:
        return False, None
    value = current[name]
    if index is None:
        return True, value
    if not _is_list(value) or index >= len(value):
        return False, None
    return True, value[index]


def find_path(root: Mapping[str, Any], path: PathLike) -> tuple[bool, Any]:
    """Resolve ``path`` against ``root``. Returns ``(found, value)``."""
    current: Any = root
    for segment in as_segments(path):
        found, current = _step(current, segment)
        if not found:
            return False, None
    return True, current


def get_path(root: Mapping[str, Any], path: PathLike) -> Any:
    """Resolve ``path`` against ``root``, or ``None`` if it cannot be followed."""
    return find_path(root, path)[1]


def contains_path(root: Mapping[str, Any], path: PathLike) -> bool:
    """Whether the last segment of ``path`` is a key of its parent mapping."""
    segments = as_segments(path)
    current: Any = root
    for segment in segments[:-1]:
        found, current = _step(current, segment)
        if not found:
            return False
    return isinstance(current, Mapping) and segments[-1] in current


def put_path(
    root: MutableMapping[str, Any], path: PathLike, value: Any
) -> MutableMapping[str, Any]:
    """Set ``value`` at ``path``, creating intermediate mappings."""
    segments = as_segments(path)
    current = root
    for segment in segments[:-1]:
        nested = current.get(segment)
        if not isinstance(nested, MutableMapping):
            nested = {}
            current[segment] = nested
        current = nested
    current[segments[-1]] = value
    return root


def remove_path(
    root: MutableMapping[str, Any], path: PathLike
) -> MutableMapping[str, Any] | None:
    """Delete the key at ``path``.

    Returns ``None`` without touching ``root`` when an intermediate segment
    is missing or not a mapping.
    """
    segments = as_segments(path)
    current: Any = root
    for segment in segments[:-1]:
        current = current.get(segment)
        if not isinstance(current, MutableMapping):
            return None
    current.pop(segments[-1], None)
    return root
