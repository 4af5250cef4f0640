"""
verity — value classification

File: src/verity/classify.py

Purpose
- Sort an arbitrary runtime value into one closed ``Classification`` tag.
- Provide nil detection, reference dereferencing and record field access for
  the equality, emptiness, containment and rendering engines.

Functional requirements
- ``classify`` never raises; every value lands on exactly one tag.
- A reference holding nothing is nil for nil-checks but keeps its declared type
  when stringified.
- Values with no introspectable structure take the ``OPAQUE`` tag instead of a
  blind structural traversal.
- Declared records (dataclasses, named tuples, exceptions) win over the
  duck-typed queue and stream shapes, whatever methods they define.
"""

from __future__ import annotations

import dataclasses
import enum
import io
import numbers
import weakref
from collections.abc import Mapping, Sequence, Set
from decimal import Decimal
from enum import StrEnum
from typing import Any, Final, Generic, TypeVar

T = TypeVar("T")

_QUEUE_METHODS: Final[tuple[str, ...]] = ("qsize", "get_nowait", "put_nowait")
_BYTES_TYPES: Final[tuple[type, ...]] = (bytes, bytearray, memoryview)
_MISSING: Final[object] = object()


class Classification(StrEnum):
    """Semantic kind a value is dispatched on."""

    NIL = "nil"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BYTES = "bytes"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    RECORD = "record"
    REFERENCE = "reference"
    STREAM = "stream"
    QUEUE = "queue"
    CALLABLE = "callable"
    OPAQUE = "opaque"


class Ref(Generic[T]):
    """A boxed reference that may point at nothing.

    ``Ref(None)`` is nil for nil-checks but still reports ``Ref`` as its type.
    """

    __slots__ = ("target",)

    def __init__(self, target: T | None = None) -> None:
        self.target = target

    def __repr__(self) -> str:
        return f"Ref({self.target!r})"


def is_reference(value: object) -> bool:
    return isinstance(value, (Ref, weakref.ReferenceType))


def deref(value: object) -> Any:
    """Return the value a reference points at, ``None`` for an empty reference."""

    if isinstance(value, Ref):
        return value.target
    if isinstance(value, weakref.ReferenceType):
        return value()
    raise TypeError(f"{type_name(value)} is not a reference")


def is_nil(value: object) -> bool:
    """True for ``None`` and for reference-shaped values pointing at nothing."""

    if value is None:
        return True
    if is_reference(value):
        return deref(value) is None
    return False


def is_queue(value: object) -> bool:
    if isinstance(value, type):
        return False
    return all(callable(getattr(value, name, None)) for name in _QUEUE_METHODS)


def is_stream(value: object) -> bool:
    if isinstance(value, type):
        return False
    if isinstance(value, io.IOBase):
        return True
    return callable(getattr(value, "read", None))


def is_seekable(stream: object) -> bool:
    seekable = getattr(stream, "seekable", None)
    if callable(seekable):
        return bool(seekable())
    return callable(getattr(stream, "seek", None)) and callable(getattr(stream, "tell", None))


def is_writable(stream: object) -> bool:
    writable = getattr(stream, "writable", None)
    if callable(writable):
        return bool(writable())
    return callable(getattr(stream, "write", None))


def is_record(value: object) -> bool:
    if isinstance(value, type):
        return False
    if dataclasses.is_dataclass(value):
        return True
    if isinstance(value, tuple) and hasattr(type(value), "_fields"):
        return True
    return isinstance(value, BaseException)


def overrides_eq(value: object) -> bool:
    return type(value).__eq__ is not object.__eq__


def _is_plain_object(value: object) -> bool:
    if isinstance(value, (type, enum.Enum)) or overrides_eq(value):
        return False
    return hasattr(value, "__dict__") or bool(_slot_names(type(value)))


def classify(value: object) -> Classification:
    """Return the ``Classification`` of ``value``; unreadable values are ``OPAQUE``."""

    try:
        return _classify(value)
    except Exception:  # noqa: BLE001 - hostile __getattr__ or __eq__
        return Classification.OPAQUE


def _classify(value: object) -> Classification:
    if is_nil(value):
        return Classification.NIL
    if is_reference(value):
        return Classification.REFERENCE
    if isinstance(value, bool):
        return Classification.BOOL
    if isinstance(value, numbers.Integral):
        return Classification.INTEGER
    if isinstance(value, (numbers.Number, Decimal)):
        return Classification.FLOAT
    if isinstance(value, str):
        return Classification.TEXT
    if isinstance(value, _BYTES_TYPES):
        return Classification.BYTES
    if is_record(value):
        return Classification.RECORD
    if is_queue(value):
        return Classification.QUEUE
    if is_stream(value):
        return Classification.STREAM
    if isinstance(value, (Mapping, Set)):
        return Classification.MAPPING
    if isinstance(value, Sequence):
        return Classification.SEQUENCE
    if callable(value):
        return Classification.CALLABLE
    if _is_plain_object(value):
        return Classification.RECORD
    return Classification.OPAQUE


def type_name(value: object) -> str:
    return type(value).__qualname__


def _slot_names(cls: type) -> tuple[str, ...]:
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__") or name in names:
                continue
            names.append(name)
    return tuple(names)


def record_fields(value: object) -> dict[str, Any]:
    """Return the named fields of a record in declaration order."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {field.name: getattr(value, field.name) for field in dataclasses.fields(value)}
    if isinstance(value, tuple) and hasattr(type(value), "_fields"):
        return dict(zip(type(value)._fields, value, strict=True))

    fields: dict[str, Any] = {}
    if isinstance(value, BaseException):
        fields["args"] = value.args
    for name in _slot_names(type(value)):
        slot_value = getattr(value, name, _MISSING)
        if slot_value is not _MISSING:
            fields[name] = slot_value
    fields.update(getattr(value, "__dict__", {}))
    return fields


__all__ = [
    "Classification",
    "Ref",
    "classify",
    "deref",
    "is_nil",
    "is_queue",
    "is_record",
    "is_reference",
    "is_seekable",
    "is_stream",
    "is_writable",
    "overrides_eq",
    "record_fields",
    "type_name",
]
