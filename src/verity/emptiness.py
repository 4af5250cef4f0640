"""
verity — emptiness classification

File: src/verity/emptiness.py

Purpose
- Decide whether a value is the zero/empty representative of its kind.

Functional requirements
- Policy order: nil, ``False``, ``""``, countable kinds by length, references
  by their pointee, records field by field, everything else against the zero
  representative of its own type.
- ``not_empty`` is the exact negation of ``is_empty``.
- Zero representatives are only constructed for kinds whose no-argument
  constructor is side-effect free; other kinds have none.
"""

from __future__ import annotations

import copy
import dataclasses
from typing import Any, Final

import structlog

from verity.classify import Classification, classify, deref, is_nil, is_seekable, record_fields
from verity.equality import strict_equal

logger = structlog.get_logger(__name__)

NO_ZERO: Final[object] = object()

_CONSTRUCTIBLE_KINDS: Final[frozenset[Classification]] = frozenset(
    {
        Classification.BOOL,
        Classification.INTEGER,
        Classification.FLOAT,
        Classification.TEXT,
        Classification.BYTES,
        Classification.SEQUENCE,
        Classification.MAPPING,
        Classification.REFERENCE,
        Classification.STREAM,
        Classification.QUEUE,
    }
)

_COUNTABLE_KINDS: Final[frozenset[Classification]] = frozenset(
    {Classification.SEQUENCE, Classification.MAPPING, Classification.BYTES}
)


def zero_value(value: object) -> Any:
    """Return the zero representative of ``value``'s type, or ``NO_ZERO``."""

    if value is None:
        return None

    kind = classify(value)
    if kind is Classification.NIL:
        return value
    if kind is Classification.RECORD:
        return _zero_record(value)
    if kind not in _CONSTRUCTIBLE_KINDS:
        return NO_ZERO
    try:
        return type(value)()
    except Exception:  # noqa: BLE001 - no usable zero constructor
        return NO_ZERO


def _zero_record(value: Any) -> Any:
    fields = record_fields(value)
    zeros = {name: zero_value(field) for name, field in fields.items()}
    if any(zero is NO_ZERO for zero in zeros.values()):
        return NO_ZERO

    try:
        if dataclasses.is_dataclass(value):
            init_names = {field.name for field in dataclasses.fields(value) if field.init}
            return dataclasses.replace(
                value, **{name: zero for name, zero in zeros.items() if name in init_names}
            )
        if isinstance(value, tuple):
            return value._replace(**zeros)
        if isinstance(value, BaseException):
            return type(value)()
        clone = copy.copy(value)
        for name, zero in zeros.items():
            setattr(clone, name, zero)
        return clone
    except Exception:  # noqa: BLE001 - record type refuses a zeroed copy
        return NO_ZERO


def is_zero(value: object) -> bool:
    """True iff ``value`` equals the zero representative of its own type."""

    if is_nil(value):
        return True
    if classify(value) is Classification.RECORD:
        return all(is_zero(field) for field in record_fields(value).values())
    zero = zero_value(value)
    return zero is not NO_ZERO and strict_equal(value, zero)


def is_empty(value: object) -> bool:
    """True iff ``value`` is nil, ``False``, ``""``, has no items, or is zero."""

    if value is None or value is False:
        return True
    if isinstance(value, str) and value == "":
        return True

    kind = classify(value)
    if kind is Classification.NIL:
        return True
    if kind in _COUNTABLE_KINDS:
        return len(value) == 0  # type: ignore[arg-type]
    if kind is Classification.QUEUE:
        return value.qsize() == 0  # type: ignore[attr-defined]
    if kind is Classification.STREAM:
        return _stream_exhausted(value)
    if kind is Classification.REFERENCE:
        return is_empty(deref(value))
    return is_zero(value)


def not_empty(value: object) -> bool:
    return not is_empty(value)


def _stream_exhausted(stream: Any) -> bool:
    # Only seekable streams can be measured without consuming them.
    try:
        if not is_seekable(stream):
            return False
        position = stream.tell()
        end = stream.seek(0, 2)
        stream.seek(position)
    except (OSError, ValueError) as exc:
        logger.warning(
            "stream_length_unavailable", stream_type=type(stream).__qualname__, error=str(exc)
        )
        return False
    return end == position


__all__ = ["NO_ZERO", "is_empty", "is_zero", "not_empty", "zero_value"]
