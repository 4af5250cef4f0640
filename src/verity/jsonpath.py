"""Dotted-path descent into decoded JSON documents."""

from __future__ import annotations

from typing import Any


def descend(document: Any, path: str) -> Any:
    """Follow ``path`` (``"a.b.0.c"``) into ``document`` and return the node.

    Each segment is tried as an object key first, then as a list index.
    Raises ``KeyError`` naming the first segment that does not resolve.
    """

    node = document
    for segment in path.split("."):
        if isinstance(node, dict) and segment in node:
            node = node[segment]
            continue
        if isinstance(node, list) and segment.isascii() and segment.isdigit():
            index = int(segment)
            if index < len(node):
                node = node[index]
                continue
        raise KeyError(segment)
    return node


__all__ = ["descend"]
