"""
verity — unit tests for value classification

File: tests/unit/engine/test_classify.py

Purpose
- Validate the structural classification every engine dispatches on.

What this test file should cover
- One representative per classification tag.
- Nil references: classified NIL, still named by their declared type.
- Record field extraction order for dataclasses, named tuples, exceptions and
  plain objects.
- Hostile objects classify as OPAQUE instead of raising.
"""

from __future__ import annotations

import asyncio
import io
import queue
import uuid
import weakref
from collections import OrderedDict, deque, namedtuple
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from fractions import Fraction
from pathlib import Path

import pytest

from verity.classify import (
    Classification,
    Ref,
    classify,
    deref,
    is_nil,
    record_fields,
    type_name,
)

Point = namedtuple("Point", ["x", "y"])


@dataclass
class Account:
    owner: str
    balance: int = 0


class Plain:
    def __init__(self) -> None:
        self.name = "plain"
        self.size = 3


class Slotted:
    __slots__ = ("left", "right")

    def __init__(self) -> None:
        self.left = 1
        self.right = 2


class Versioned:
    def __init__(self, version: int) -> None:
        self.version = version

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Versioned) and other.version == self.version

    __hash__ = None  # type: ignore[assignment]


class Hostile:
    def __getattribute__(self, name: str) -> object:
        raise RuntimeError(f"no access to {name}")


class Target:
    pass


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, Classification.NIL),
        (Ref(None), Classification.NIL),
        (Ref(3), Classification.REFERENCE),
        (True, Classification.BOOL),
        (7, Classification.INTEGER),
        (1.5, Classification.FLOAT),
        (Decimal("1.5"), Classification.FLOAT),
        (Fraction(1, 3), Classification.FLOAT),
        (2j, Classification.FLOAT),
        ("text", Classification.TEXT),
        (b"raw", Classification.BYTES),
        (bytearray(b"raw"), Classification.BYTES),
        ([1, 2], Classification.SEQUENCE),
        ((1, 2), Classification.SEQUENCE),
        (range(3), Classification.SEQUENCE),
        (deque([1]), Classification.SEQUENCE),
        ({"a": 1}, Classification.MAPPING),
        (OrderedDict(a=1), Classification.MAPPING),
        ({1, 2}, Classification.MAPPING),
        (frozenset({1}), Classification.MAPPING),
        (Point(1, 2), Classification.RECORD),
        (Account("ann"), Classification.RECORD),
        (ValueError("boom"), Classification.RECORD),
        (Plain(), Classification.RECORD),
        (Slotted(), Classification.RECORD),
        (io.BytesIO(b"x"), Classification.STREAM),
        (io.StringIO("x"), Classification.STREAM),
        (queue.Queue(), Classification.QUEUE),
        (len, Classification.CALLABLE),
        (Plain, Classification.CALLABLE),
        (lambda: None, Classification.CALLABLE),
        (datetime(2024, 1, 1), Classification.OPAQUE),
        (uuid.UUID(int=1), Classification.OPAQUE),
        (Path("a"), Classification.OPAQUE),
        (Versioned(1), Classification.OPAQUE),
        (object(), Classification.OPAQUE),
    ],
)
def test_classify_representatives(value: object, expected: Classification) -> None:
    assert classify(value) is expected


@pytest.mark.unit
def test_asyncio_queue_is_a_queue() -> None:
    assert classify(asyncio.Queue()) is Classification.QUEUE


@pytest.mark.unit
def test_weak_references_follow_liveness() -> None:
    target = Target()
    reference = weakref.ref(target)

    assert classify(reference) is Classification.REFERENCE
    assert deref(reference) is target

    del target
    assert is_nil(reference)
    assert classify(reference) is Classification.NIL


@pytest.mark.unit
def test_nil_reference_keeps_its_declared_type() -> None:
    empty = Ref(None)

    assert is_nil(empty)
    assert is_nil(None)
    assert type_name(empty) == "Ref"
    assert not is_nil(Ref(0))
    assert not is_nil(0)


@pytest.mark.unit
def test_deref_rejects_non_references() -> None:
    with pytest.raises(TypeError, match="int is not a reference"):
        deref(1)


@pytest.mark.unit
def test_record_fields_keep_declaration_order() -> None:
    assert list(record_fields(Account("ann", 5))) == ["owner", "balance"]
    assert record_fields(Point(1, 2)) == {"x": 1, "y": 2}
    assert record_fields(Plain()) == {"name": "plain", "size": 3}
    assert record_fields(Slotted()) == {"left": 1, "right": 2}


@pytest.mark.unit
def test_exception_fields_start_with_args() -> None:
    exc = KeyError("missing")
    exc.detail = "extra"  # type: ignore[attr-defined]

    fields = record_fields(exc)

    assert list(fields) == ["args", "detail"]
    assert fields["args"] == ("missing",)


@dataclass
class Meter:
    reading: int

    def read(self) -> int:
        return self.reading


class Mailbox(namedtuple("Mailbox", ["items"])):
    def qsize(self) -> int:
        return len(self.items)

    def get_nowait(self) -> object:
        return self.items.pop(0)

    def put_nowait(self, item: object) -> None:
        self.items.append(item)


@pytest.mark.unit
def test_declared_records_win_over_stream_and_queue_methods() -> None:
    assert classify(Meter(1)) is Classification.RECORD
    assert classify(Mailbox([1])) is Classification.RECORD


@pytest.mark.unit
def test_hostile_objects_classify_as_opaque() -> None:
    assert classify(Hostile()) is Classification.OPAQUE


@pytest.mark.unit
def test_classification_values_are_lowercase_names() -> None:
    assert {member.value for member in Classification} == {
        member.name.lower() for member in Classification
    }
