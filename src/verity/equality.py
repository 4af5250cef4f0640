"""
verity — equality engine

File: src/verity/equality.py

Purpose
- Decide strict equality (same declared type and recursively the same value).
- Decide coercive equality (strict equality after an exact, lossless conversion
  of one side into the other side's type).

Functional requirements
- Dispatch is an explicit table keyed by ``Classification``; unknown shapes go
  through the opaque branch, never a blind traversal.
- Conversions never fabricate equality across magnitudes: every conversion in
  the matrix is exact or refused.
- Conversion failures mean "not equal", never an error.
"""

from __future__ import annotations

import inspect
import math
from collections.abc import Callable, Mapping
from decimal import Decimal
from fractions import Fraction
from typing import Any, Final

from verity.classify import Classification, classify, deref, is_nil, overrides_eq, record_fields

_Visiting = set[tuple[int, int]]
_StrictHandler = Callable[[Any, Any, _Visiting], bool]
_Converter = Callable[[Any], Any]

NOT_CONVERTIBLE: Final[object] = object()

_CONVERSION_ERRORS: Final[tuple[type[BaseException], ...]] = (
    ArithmeticError,
    TypeError,
    UnicodeError,
    ValueError,
)

_CONTAINER_KINDS: Final[frozenset[Classification]] = frozenset(
    {
        Classification.SEQUENCE,
        Classification.MAPPING,
        Classification.RECORD,
        Classification.REFERENCE,
    }
)


def strict_equal(expected: object, actual: object) -> bool:
    """Return True iff both values have the same declared type and the same value.

    ``None`` equals only ``None``. Composite values compare element by element,
    key by key or field by field; NaN never equals itself; callables compare by
    identity of the underlying function.
    """

    return _strict_equal(expected, actual, set())


def _strict_equal(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    if expected is None or actual is None:
        return expected is actual
    if type(expected) is not type(actual):
        return False

    kind = classify(expected)
    handler = _STRICT_HANDLERS.get(kind, _equal_opaque)
    if kind not in _CONTAINER_KINDS:
        return handler(expected, actual, visiting)

    pair = (id(expected), id(actual))
    if pair in visiting:
        return True
    visiting.add(pair)
    try:
        return handler(expected, actual, visiting)
    finally:
        visiting.discard(pair)


def _safe_eq(expected: Any, actual: Any) -> bool:
    try:
        return bool(expected == actual)
    except Exception:  # noqa: BLE001 - a raising __eq__ counts as unequal
        return False


def _equal_nil(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    return is_nil(actual)


def _equal_scalar(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    return _safe_eq(expected, actual)


def _equal_bytes(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    return bytes(expected) == bytes(actual)


def _equal_sequence(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    if len(expected) != len(actual):
        return False
    return all(
        _strict_equal(left, right, visiting) for left, right in zip(expected, actual, strict=True)
    )


def _equal_mapping(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    if len(expected) != len(actual):
        return False

    actual_keys = {key: key for key in actual}
    for key in expected:
        if key not in actual_keys:
            return False
        actual_key = actual_keys[key]
        if not _strict_equal(key, actual_key, visiting):
            return False
        if isinstance(expected, Mapping) and not _strict_equal(
            expected[key], actual[actual_key], visiting
        ):
            return False
    return True


def _equal_record(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    expected_fields = record_fields(expected)
    actual_fields = record_fields(actual)
    if expected_fields.keys() != actual_fields.keys():
        return False
    return all(
        _strict_equal(value, actual_fields[name], visiting)
        for name, value in expected_fields.items()
    )


def _equal_reference(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    return _strict_equal(deref(expected), deref(actual), visiting)


def _equal_callable(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    return same_callable(expected, actual)


def _equal_identity(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    return expected is actual


def _equal_opaque(expected: Any, actual: Any, visiting: _Visiting) -> bool:
    if overrides_eq(expected):
        return _safe_eq(expected, actual)
    return expected is actual


def same_callable(expected: object, actual: object) -> bool:
    """True iff both callables refer to the same underlying executable entity."""

    if expected is actual:
        return True
    if inspect.ismethod(expected) and inspect.ismethod(actual):
        return expected.__func__ is actual.__func__ and expected.__self__ is actual.__self__
    if inspect.isbuiltin(expected) and inspect.isbuiltin(actual):
        return (
            getattr(expected, "__self__", None) is getattr(actual, "__self__", None)
            and expected.__name__ == actual.__name__
        )
    return False


_STRICT_HANDLERS: Final[dict[Classification, _StrictHandler]] = {
    Classification.NIL: _equal_nil,
    Classification.BOOL: _equal_scalar,
    Classification.INTEGER: _equal_scalar,
    Classification.FLOAT: _equal_scalar,
    Classification.TEXT: _equal_scalar,
    Classification.BYTES: _equal_bytes,
    Classification.SEQUENCE: _equal_sequence,
    Classification.MAPPING: _equal_mapping,
    Classification.RECORD: _equal_record,
    Classification.REFERENCE: _equal_reference,
    Classification.STREAM: _equal_identity,
    Classification.QUEUE: _equal_identity,
    Classification.CALLABLE: _equal_callable,
    Classification.OPAQUE: _equal_opaque,
}


# --- Conversion matrix -------------------------------------------------------


def _int_to_float(value: int) -> float:
    converted = float(value)
    if int(converted) != value:
        raise ValueError("int is not exactly representable as float")
    return converted


def _float_to_int(value: float) -> int:
    if not value.is_integer():
        raise ValueError("float is not integral")
    return int(value)


def _float_to_decimal(value: float) -> Decimal:
    if not math.isfinite(value):
        raise ValueError("float is not finite")
    return Decimal(value)


def _decimal_to_int(value: Decimal) -> int:
    if not value.is_finite() or value != value.to_integral_value():
        raise ValueError("Decimal is not integral")
    return int(value)


def _decimal_to_float(value: Decimal) -> float:
    converted = float(value)
    if Decimal(converted) != value:
        raise ValueError("Decimal does not round-trip through float")
    return converted


def _decimal_to_fraction(value: Decimal) -> Fraction:
    if not value.is_finite():
        raise ValueError("Decimal is not finite")
    return Fraction(value)


def _fraction_to_int(value: Fraction) -> int:
    if value.denominator != 1:
        raise ValueError("Fraction is not integral")
    return int(value)


def _fraction_to_float(value: Fraction) -> float:
    converted = float(value)
    if Fraction(converted) != value:
        raise ValueError("Fraction does not round-trip through float")
    return converted


_CONVERSIONS: Final[dict[tuple[type, type], _Converter]] = {
    (int, float): _int_to_float,
    (int, Decimal): Decimal,
    (int, Fraction): Fraction,
    (float, int): _float_to_int,
    (float, Decimal): _float_to_decimal,
    (float, Fraction): Fraction,
    (Decimal, int): _decimal_to_int,
    (Decimal, float): _decimal_to_float,
    (Decimal, Fraction): _decimal_to_fraction,
    (Fraction, int): _fraction_to_int,
    (Fraction, float): _fraction_to_float,
    (str, bytes): lambda value: value.encode("utf-8"),
    (str, bytearray): lambda value: bytearray(value.encode("utf-8")),
    (bytes, str): lambda value: value.decode("utf-8"),
    (bytes, bytearray): bytearray,
    (bytearray, str): lambda value: bytes(value).decode("utf-8"),
    (bytearray, bytes): bytes,
}


def convert(value: object, target: type) -> Any:
    """Convert ``value`` exactly into ``target``; return ``NOT_CONVERTIBLE`` otherwise.

    Only pairings listed in the conversion matrix are attempted. The lookup uses
    exact types, so ``bool`` and other subclasses convert to nothing.
    """

    converter = _CONVERSIONS.get((type(value), target))
    if converter is None:
        return NOT_CONVERTIBLE
    try:
        return converter(value)
    except _CONVERSION_ERRORS:
        return NOT_CONVERTIBLE


def is_convertible(source: type, target: type) -> bool:
    return (source, target) in _CONVERSIONS


def coercive_equal(expected: object, actual: object) -> bool:
    """Return True if the values are strictly equal, or equal after an exact conversion.

    Conversion is tried both ways (``actual`` into ``type(expected)``, then
    ``expected`` into ``type(actual)``), which keeps the relation symmetric.
    """

    if strict_equal(expected, actual):
        return True
    if expected is None or actual is None:
        return False

    converted = convert(actual, type(expected))
    if converted is not NOT_CONVERTIBLE and strict_equal(expected, converted):
        return True

    converted = convert(expected, type(actual))
    return converted is not NOT_CONVERTIBLE and strict_equal(converted, actual)


__all__ = [
    "NOT_CONVERTIBLE",
    "coercive_equal",
    "convert",
    "is_convertible",
    "same_callable",
    "strict_equal",
]
