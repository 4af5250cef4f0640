"""
verity — value rendering and structural diffs

File: src/verity/rendering.py

Purpose
- Pretty-print values into a deterministic, indented, sorted-key text form.
- Render a unified diff between two structurally comparable values.
- Stringify expected/actual pairs for failure evidence.

Functional requirements
- ``dump`` output is stable across calls for the same value: mapping entries and
  set members are sorted by their rendered form, record fields keep declaration
  order, memory addresses are stripped from fallback reprs.
- ``diff`` returns ``""`` for equal inputs, a 1-line-context unified diff for
  text/record/sequence/mapping pairs of the same type, and a two-line type/value
  contrast for everything else.
"""

from __future__ import annotations

import difflib
import re
from collections.abc import Mapping
from typing import Any, Final

from verity.classify import Classification, classify, deref, is_nil, record_fields, type_name
from verity.constants import DIFF_CONTEXT_LINES, DIFF_FROM_FILE, DIFF_TO_FILE
from verity.equality import strict_equal

_INDENT: Final[str] = " "
_ADDRESS_PATTERN: Final[re.Pattern[str]] = re.compile(r" at 0x[0-9a-fA-F]+")

_DIFFABLE_KINDS: Final[frozenset[Classification]] = frozenset(
    {
        Classification.TEXT,
        Classification.RECORD,
        Classification.SEQUENCE,
        Classification.MAPPING,
    }
)

_CONTAINER_KINDS: Final[frozenset[Classification]] = frozenset(
    {
        Classification.SEQUENCE,
        Classification.MAPPING,
        Classification.RECORD,
        Classification.REFERENCE,
    }
)


def safe_repr(value: object) -> str:
    """``repr`` with memory addresses stripped; never raises."""

    try:
        text = repr(value)
    except Exception:  # noqa: BLE001 - a broken __repr__ must not break reporting
        return f"<{type_name(value)} object>"
    return _ADDRESS_PATTERN.sub("", text)


class _Dumper:
    def __init__(self) -> None:
        self._active: set[int] = set()

    def dump(self, value: Any, depth: int) -> str:
        kind = classify(value)
        if kind not in _CONTAINER_KINDS:
            return self._dump_leaf(value, kind)

        marker = id(value)
        if marker in self._active:
            return f"({type_name(value)}) <already shown>"
        self._active.add(marker)
        try:
            return self._dump_container(value, kind, depth)
        finally:
            self._active.discard(marker)

    def _dump_leaf(self, value: Any, kind: Classification) -> str:
        name = type_name(value)
        if value is None:
            return "None"
        if kind is Classification.NIL:
            return f"({name}) None"
        if kind in (Classification.TEXT, Classification.BYTES):
            shown = bytes(value) if isinstance(value, memoryview) else value
            return f"({name}) (len={len(value)}) {shown!r}"
        if kind is Classification.CALLABLE:
            qualname = getattr(value, "__qualname__", None)
            return f"({name}) {qualname if isinstance(qualname, str) else safe_repr(value)}"
        return f"({name}) {safe_repr(value)}"

    def _dump_container(self, value: Any, kind: Classification, depth: int) -> str:
        name = type_name(value)
        if kind is Classification.REFERENCE:
            return f"({name}) &{self.dump(deref(value), depth)}"

        if kind is Classification.SEQUENCE:
            header = f"({name}) (len={len(value)})"
            entries = [self.dump(item, depth + 1) for item in value]
            return self._block(header, "[", "]", entries, depth)

        if kind is Classification.MAPPING:
            header = f"({name}) (len={len(value)})"
            if isinstance(value, Mapping):
                entries = [
                    f"{self.dump(key, depth + 1)}: {self.dump(item, depth + 1)}"
                    for key, item in value.items()
                ]
            else:
                entries = [self.dump(member, depth + 1) for member in value]
            return self._block(header, "{", "}", sorted(entries), depth)

        entries = [
            f"{field}: {self.dump(item, depth + 1)}" for field, item in record_fields(value).items()
        ]
        return self._block(f"({name})", "{", "}", entries, depth)

    @staticmethod
    def _block(header: str, opener: str, closer: str, entries: list[str], depth: int) -> str:
        if not entries:
            return f"{header} {opener}{closer}"
        inner = _INDENT * (depth + 1)
        body = ",\n".join(f"{inner}{entry}" for entry in entries)
        return f"{header} {opener}\n{body}\n{_INDENT * depth}{closer}"


def dump(value: object) -> str:
    """Render ``value`` as deterministic, indented multi-line text ending in a newline."""

    if isinstance(value, str) and "\n" in value:
        lines = [f"({type_name(value)}) (len={len(value)})"]
        lines.extend(f"{_INDENT}{line}" for line in value.split("\n"))
        return "\n".join(lines) + "\n"
    return _Dumper().dump(value, 0) + "\n"


def _contrast(expected: object, actual: object) -> str:
    return (
        f"--- {type_name(expected)}({safe_repr(expected)})\n"
        f"+++ {type_name(actual)}({safe_repr(actual)})\n\n"
    )


def diff(expected: object, actual: object) -> str:
    """Return a unified diff of two values, or ``""`` when they are equal."""

    if expected is None and actual is None:
        return ""
    if expected is None or actual is None or type(expected) is not type(actual):
        return _contrast(expected, actual)

    if strict_equal(expected, actual):
        return ""
    if classify(expected) not in _DIFFABLE_KINDS:
        return _contrast(expected, actual)

    lines = list(
        difflib.unified_diff(
            dump(expected).splitlines(keepends=True),
            dump(actual).splitlines(keepends=True),
            fromfile=DIFF_FROM_FILE,
            tofile=DIFF_TO_FILE,
            n=DIFF_CONTEXT_LINES,
        )
    )
    if not lines:
        # Unequal values with identical renderings (NaN members, opaque values).
        return _contrast(expected, actual)
    return "".join(lines)


def describe(value: object, *, typed: bool) -> str:
    """Stringify one side of a pair; ``typed`` wraps the repr in its type name."""

    if value is None:
        return "None"
    if is_nil(value):
        return type_name(value)
    if not typed:
        return safe_repr(value)
    return f"{type_name(value)}({safe_repr(value)})"


def describe_pair(expected: object, actual: object) -> tuple[str, str]:
    """Stringify an expected/actual pair for evidence labels.

    Values of the same type render as their reprs; values of different types are
    prefixed with their type names so ``1`` and ``1.0`` stay distinguishable.
    """

    typed = type(expected) is not type(actual)
    return describe(expected, typed=typed), describe(actual, typed=typed)


__all__ = ["describe", "describe_pair", "diff", "dump", "safe_repr"]
