"""Safe path navigation over unstructured Kubernetes objects.

Records returned by the API client are plain JSON-like trees: dicts keyed by
string whose values may be dicts, lists, strings or other scalars.  The
helpers here walk such a tree by a sequence of field names and return the
typed leaf, or an absence sentinel, without ever raising:

    get_map    -- dict or None
    get_string -- str, "" when absent or not a string
    get_list   -- list, [] when absent or not a list

An empty string is indistinguishable from "present but empty"; callers treat
both as "not usable as a reference".
"""

from __future__ import annotations

from typing import Any


def get_map(doc: Any, *path: str) -> dict[str, Any] | None:
    """Walk *path* through nested dicts.

    Returns None as soon as a segment is missing or an intermediate value
    (including *doc* itself) is not a dict.
    """
    if not isinstance(doc, dict):
        return None
    current: dict[str, Any] = doc
    for segment in path:
        nxt = current.get(segment)
        if not isinstance(nxt, dict):
            return None
        current = nxt
    return current


def _leaf(doc: Any, path: tuple[str, ...]) -> Any:
    if not path:
        return None
    parent = get_map(doc, *path[:-1])
    if parent is None:
        return None
    return parent.get(path[-1])


def get_string(doc: Any, *path: str) -> str:
    """Return the string at *path*, or "" when missing or not a string."""
    value = _leaf(doc, path)
    return value if isinstance(value, str) else ""


def get_list(doc: Any, *path: str) -> list[Any]:
    """Return the list at *path*, or [] when missing or not a list."""
    value = _leaf(doc, path)
    return value if isinstance(value, list) else []


def get_owners(doc: Any) -> list[str]:
    """Return the owner uids from ``metadata.ownerReferences``.

    Entries that are not objects or carry no uid are skipped.
    """
    owners: list[str] = []
    for ref in get_list(doc, "metadata", "ownerReferences"):
        uid = get_string(ref, "uid")
        if uid:
            owners.append(uid)
    return owners
