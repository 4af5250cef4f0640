"""
verity — predicate surface

File: src/verity/assertions.py

Purpose
- The flat set of predicates test code calls: each evaluates one expectation,
  reports a labeled failure to the sink on mismatch and returns the verdict.

Functional requirements
- Every predicate has the shape ``predicate(sink, *values, *extras) -> bool``.
- Trailing extras become the ``Message`` label through ``format_extras`` and are
  only rendered when non-empty.
- Predicates never raise for value-shape reasons: malformed JSON/YAML, invalid
  patterns, unsized values and non-numeric deltas are reported as failures.
- ``Assertion(sink)`` exposes every predicate as a method bound to ``sink``.
"""

from __future__ import annotations

import functools
import json
import math
import numbers
import re
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

import structlog
import yaml

from verity import containment, emptiness
from verity.classify import is_nil, is_queue, type_name
from verity.constants import LABEL_DIFF
from verity.equality import coercive_equal, strict_equal
from verity.jsonpath import descend
from verity.rendering import describe, describe_pair, diff, safe_repr
from verity.report import FailureSink, LabeledOutput, default_reporter, errorf, format_extras

logger = structlog.get_logger(__name__)


def _fail(
    sink: FailureSink, summary: str, extras: tuple[Any, ...], *evidence: LabeledOutput
) -> bool:
    outputs = list(evidence)
    message = format_extras(*extras)
    if message:
        outputs.insert(0, LabeledOutput(default_reporter().config.label_message, message))
    return errorf(sink, summary, outputs)


def _pair(
    expected_label: str, actual_label: str, expected: object, actual: object
) -> tuple[LabeledOutput, LabeledOutput]:
    exps, acts = describe_pair(expected, actual)
    return LabeledOutput(expected_label, exps), LabeledOutput(actual_label, acts)


def _expected_received(expected: object, actual: object) -> tuple[LabeledOutput, LabeledOutput]:
    return _pair("-expected", "+received", expected, actual)


def _typed(value: object) -> str:
    return describe(value, typed=True)


# Types and identity


def is_type(sink: FailureSink, expected: object, actual: object, *extras: Any) -> bool:
    """Assert ``expected`` and ``actual`` have the same declared type."""

    if type(expected) is not type(actual):
        return _fail(
            sink,
            "Expect to be of the same type",
            extras,
            *_pair("+expected", "-received", expected, actual),
        )
    return True


def implements(sink: FailureSink, interface: object, actual: object, *extras: Any) -> bool:
    """Assert ``actual`` is an instance of ``interface`` (a class, ABC or runtime protocol)."""

    satisfied = False
    if interface is not None and actual is not None:
        try:
            satisfied = isinstance(actual, interface)  # type: ignore[arg-type]
        except TypeError:
            satisfied = False

    if not satisfied:
        name = getattr(interface, "__qualname__", None)
        return _fail(
            sink,
            "Expect to implement interface",
            extras,
            LabeledOutput(
                "+interface", name if isinstance(name, str) else describe(interface, typed=False)
            ),
            LabeledOutput("+value", _typed(actual)),
        )
    return True


# Equality


def equal(sink: FailureSink, expected: object, actual: object, *extras: Any) -> bool:
    """Assert two values are strictly equal: same type, recursively same value."""

    if not strict_equal(expected, actual):
        return _fail(
            sink, "Expect to be equal", extras, LabeledOutput(LABEL_DIFF, diff(expected, actual))
        )
    return True


def not_equal(sink: FailureSink, expected: object, actual: object, *extras: Any) -> bool:
    if strict_equal(expected, actual):
        return _fail(
            sink,
            "Expect to be NOT equal",
            extras,
            *_expected_received(expected, actual),
        )
    return True


def equal_values(sink: FailureSink, expected: object, actual: object, *extras: Any) -> bool:
    """Assert two values are equal, or equal once one is exactly converted to the other's type.

    ``equal_values(sink, 123, 123.0)`` passes; ``equal(sink, 123, 123.0)`` does not.
    """

    if not coercive_equal(expected, actual):
        return _fail(
            sink,
            "Expect to be equal in values",
            extras,
            LabeledOutput(LABEL_DIFF, diff(expected, actual)),
        )
    return True


def exactly(sink: FailureSink, expected: object, actual: object, *extras: Any) -> bool:
    if not strict_equal(expected, actual):
        return _fail(
            sink,
            "Expect to be equal in deep, both types and values",
            extras,
            LabeledOutput(LABEL_DIFF, diff(expected, actual)),
        )
    return True


def _load_json(text: str | bytes) -> Any:
    # One numeric kind for every JSON number, so 1 and 1.0 decode alike.
    return json.loads(text, parse_int=float)


def equal_json(sink: FailureSink, expected: str | bytes, actual: str | bytes, *extras: Any) -> bool:
    """Assert two JSON documents decode to equal values, whatever their formatting."""

    try:
        expected_value = _load_json(expected)
    except (json.JSONDecodeError, TypeError) as exc:
        return _fail(
            sink,
            "Expect value should be valid json.",
            extras,
            LabeledOutput("+expected", _typed(expected)),
            LabeledOutput("+JSON Parse", str(exc)),
        )

    try:
        actual_value = _load_json(actual)
    except (json.JSONDecodeError, TypeError) as exc:
        return _fail(
            sink,
            "Actual value should be valid json.",
            extras,
            LabeledOutput("+actual", _typed(actual)),
            LabeledOutput("+JSON Parse", str(exc)),
        )

    return equal(sink, expected_value, actual_value, *extras)


def equal_yaml(sink: FailureSink, expected: str | bytes, actual: str | bytes, *extras: Any) -> bool:
    """Assert two YAML documents load (``yaml.safe_load``) to equal values."""

    try:
        expected_value = yaml.safe_load(expected)
    except yaml.YAMLError as exc:
        return _fail(
            sink,
            "Expect value should be valid yaml.",
            extras,
            LabeledOutput("+expected", _typed(expected)),
            LabeledOutput("+YAML Parse", str(exc)),
        )

    try:
        actual_value = yaml.safe_load(actual)
    except yaml.YAMLError as exc:
        return _fail(
            sink,
            "Actual value should be valid yaml.",
            extras,
            LabeledOutput("+actual", _typed(actual)),
            LabeledOutput("+YAML Parse", str(exc)),
        )

    return equal(sink, expected_value, actual_value, *extras)


# Nil, booleans, zero and emptiness


def nil(sink: FailureSink, value: object, *extras: Any) -> bool:
    """Assert ``value`` is ``None`` or a reference holding nothing."""

    if not is_nil(value):
        return _fail(sink, "Expect to be nil", extras, *_expected_received(None, value))
    return True


def not_nil(sink: FailureSink, value: object, *extras: Any) -> bool:
    if is_nil(value):
        return _fail(sink, "Expect to be NOT nil", extras, *_expected_received(None, value))
    return True


def true(sink: FailureSink, value: object, *extras: Any) -> bool:
    """Assert ``value is True``; truthy non-bools fail."""

    if value is not True:
        return _fail(sink, "Expect to be true", extras, *_expected_received(True, value))
    return True


def false(sink: FailureSink, value: object, *extras: Any) -> bool:
    """Assert ``value is False``; falsy non-bools fail."""

    if value is not False:
        return _fail(sink, "Expect to be false", extras, *_expected_received(False, value))
    return True


def _unknown_shape(value: object, suffix: str) -> str:
    return f"({type_name(value) if value is not None else 'None'})({suffix})"


def _received(value: object) -> str:
    if value is None:
        return "None"
    return describe_pair(emptiness.zero_value(value), value)[1]


def zero(sink: FailureSink, value: object, *extras: Any) -> bool:
    """Assert ``value`` equals the zero representative of its own type."""

    if not emptiness.is_zero(value):
        representative = emptiness.zero_value(value)
        if representative is emptiness.NO_ZERO:
            expected_text = _unknown_shape(value, "???")
            received_text = _typed(value)
        else:
            expected_text, received_text = describe_pair(representative, value)
        return _fail(
            sink,
            "Expect to be zero",
            extras,
            LabeledOutput("-expected", expected_text),
            LabeledOutput("+received", received_text),
        )
    return True


def not_zero(sink: FailureSink, value: object, *extras: Any) -> bool:
    if emptiness.is_zero(value):
        return _fail(
            sink,
            "Expect to be NOT zero",
            extras,
            LabeledOutput("-expected", _unknown_shape(value, "???")),
            LabeledOutput("+received", _received(value)),
        )
    return True


def empty(sink: FailureSink, value: object, *extras: Any) -> bool:
    """Assert ``value`` is empty: nil, ``False``, ``""``, zero, or a container with no items."""

    if not emptiness.is_empty(value):
        return _fail(
            sink,
            "Expect to be empty",
            extras,
            LabeledOutput("-expected", _unknown_shape(value, "")),
            LabeledOutput("+received", _received(value)),
        )
    return True


def not_empty(sink: FailureSink, value: object, *extras: Any) -> bool:
    if emptiness.is_empty(value):
        return _fail(
            sink,
            "Expect to be NOT empty",
            extras,
            LabeledOutput("-expected", _unknown_shape(value, "???")),
            LabeledOutput("+received", _received(value)),
        )
    return True


# Containment and patterns


def contains(sink: FailureSink, container: object, element: object, *extras: Any) -> bool:
    """Assert ``container`` holds ``element``.

    Strings are searched for substrings, sequences and queues for members,
    mappings for keys, streams for content; queues and streams are restored.
    """

    if not containment.contains(container, element):
        return _fail(
            sink,
            "Expect to include substring or element",
            extras,
            LabeledOutput(LABEL_DIFF, diff(container, element)),
        )
    return True


def not_contains(sink: FailureSink, container: object, element: object, *extras: Any) -> bool:
    if containment.contains(container, element):
        return _fail(
            sink,
            "Expect to NOT include substring or element",
            extras,
            *_pair("-value", "+element", container, element),
        )
    return True


def _compile(pattern: object) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        if isinstance(pattern.pattern, bytes):
            return re.compile(pattern.pattern.decode("utf-8"), pattern.flags & ~re.LOCALE)
        return pattern
    return re.compile(str(pattern))


def _match(
    sink: FailureSink, pattern: object, value: object, extras: tuple[Any, ...]
) -> tuple[re.Pattern[str] | None, bool]:
    try:
        compiled = _compile(pattern)
    except (re.error, UnicodeDecodeError) as exc:
        logger.warning("regexp_compile_failed", pattern=safe_repr(pattern), error=str(exc))
        _fail(
            sink,
            "Expect a valid regexp",
            extras,
            LabeledOutput("-regexp", safe_repr(pattern)),
            LabeledOutput("+regexp Parse", str(exc)),
        )
        return None, False
    return compiled, compiled.search(str(value)) is not None


def match(sink: FailureSink, pattern: object, value: object, *extras: Any) -> bool:
    """Assert the regular expression ``pattern`` finds a match in ``str(value)``.

    ``pattern`` is a compiled pattern or anything whose ``str`` is one.
    """

    compiled, matched = _match(sink, pattern, value, extras)
    if compiled is None:
        return False
    if not matched:
        return _fail(
            sink,
            "Expect to match regexp",
            extras,
            LabeledOutput("-regexp", repr(compiled.pattern)),
            LabeledOutput("+value", repr(str(value))),
        )
    return True


def not_match(sink: FailureSink, pattern: object, value: object, *extras: Any) -> bool:
    compiled, matched = _match(sink, pattern, value, extras)
    if compiled is None:
        return False
    if matched:
        return _fail(
            sink,
            "Expect to NOT match regexp",
            extras,
            LabeledOutput("-regexp", repr(compiled.pattern)),
            LabeledOutput("+value", repr(str(value))),
        )
    return True


# Custom conditions and sizes


def condition(sink: FailureSink, comparison: Callable[[], object], *extras: Any) -> bool:
    """Assert ``comparison()`` returns a truthy value."""

    outcome = bool(comparison())
    if not outcome:
        return _fail(sink, "Expect to return true", extras, *_expected_received(True, outcome))
    return True


def _measure(value: object) -> int | None:
    if is_queue(value):
        return int(value.qsize())  # type: ignore[attr-defined]
    try:
        return len(value)  # type: ignore[arg-type]
    except TypeError:
        return None


def length(sink: FailureSink, value: object, expected_length: int, *extras: Any) -> bool:
    """Assert ``value`` has ``expected_length`` items (``qsize()`` for queues)."""

    measured = _measure(value)
    if measured is None:
        return _fail(sink, f"Expect to apply builtin len() on {_typed(value)}", extras)

    if measured != expected_length:
        return _fail(
            sink,
            f"Expect {_typed(value)} to have {expected_length} item(s)",
            extras,
            LabeledOutput("-expected", str(expected_length)),
            LabeledOutput("+received", str(measured)),
        )
    return True


# Numeric and temporal tolerance


def _as_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real | Decimal):
        try:
            return float(value)
        except (OverflowError, ValueError):
            return None
    return None


def in_delta(
    sink: FailureSink, expected: object, actual: object, delta: float, *extras: Any
) -> bool:
    """Assert two real numbers differ by at most ``delta``.

    ``in_delta(sink, math.pi, 22 / 7, 0.01)`` passes.
    """

    expected_float, actual_float = _as_float(expected), _as_float(actual)
    if expected_float is None or actual_float is None:
        return _fail(
            sink,
            "Parameters must be numerical",
            extras,
            *_expected_received(expected, actual),
        )

    if math.isnan(expected_float) or math.isnan(actual_float):
        return _fail(
            sink,
            "Both expected and actual values must NOT be NaN",
            extras,
            *_expected_received(expected_float, actual_float),
        )

    deviation = expected_float - actual_float
    if not -delta <= deviation <= delta:
        exps, acts = describe_pair(expected, actual)
        return _fail(
            sink,
            f"Expect the delta between two numbers within {delta}",
            extras,
            LabeledOutput("+calculated", f"{exps} - {acts} = {deviation}"),
        )
    return True


def within_duration(
    sink: FailureSink, expected: datetime, actual: datetime, delta: timedelta, *extras: Any
) -> bool:
    """Assert two datetimes are at most ``delta`` apart."""

    try:
        deviation = expected - actual
    except TypeError:
        return _fail(
            sink,
            "Parameters must be comparable times",
            extras,
            *_expected_received(expected, actual),
        )

    if not -delta <= deviation <= delta:
        exps, acts = describe_pair(expected, actual)
        return _fail(
            sink,
            f"Expect the deviation between two times within {delta}",
            extras,
            LabeledOutput("+calculated", f"{exps} - {acts} = {deviation}"),
        )
    return True


# Errors and raising


def error(sink: FailureSink, value: object, *extras: Any) -> bool:
    """Assert ``value`` is an exception instance."""

    if not isinstance(value, BaseException):
        shown = _typed(value)
        return _fail(
            sink,
            "Expect to be an error",
            extras,
            LabeledOutput("-expected", f"isinstance({shown}, BaseException) is True"),
            LabeledOutput("+received", f"isinstance({shown}, BaseException) is False"),
        )
    return True


def not_error(sink: FailureSink, value: object, *extras: Any) -> bool:
    if isinstance(value, BaseException):
        shown = _typed(value)
        return _fail(
            sink,
            "Expect to be NOT an error",
            extras,
            LabeledOutput("-expected", f"isinstance({shown}, BaseException) is False"),
            LabeledOutput("+received", f"isinstance({shown}, BaseException) is True"),
        )
    return True


def _error_text(expected: object) -> str:
    if isinstance(expected, BaseException | str):
        return str(expected)
    if isinstance(expected, bytes | bytearray):
        return bytes(expected).decode("utf-8", errors="replace")
    return str(expected)


def equal_errors(sink: FailureSink, actual: object, expected: object, *extras: Any) -> bool:
    """Assert ``actual`` is an exception whose message equals ``expected``.

    ``expected`` may be another exception, a string or UTF-8 bytes.
    """

    if not error(sink, actual, *extras):
        return False

    expected_text = _error_text(expected)
    actual_text = str(actual)
    if expected_text != actual_text:
        return _fail(
            sink,
            "Expect to be error with the same message",
            extras,
            LabeledOutput(LABEL_DIFF, diff(expected_text, actual_text)),
        )
    return True


def recovery(fn: Callable[[], object]) -> tuple[bool, Exception | None]:
    """Call ``fn`` and return whether it raised, and what."""

    try:
        fn()
    except Exception as exc:  # noqa: BLE001 - the raised value is the result
        return True, exc
    return False, None


def raises(sink: FailureSink, fn: Callable[[], object], *extras: Any) -> bool:
    """Assert calling ``fn()`` raises an ``Exception``."""

    raised, _ = recovery(fn)
    if not raised:
        return _fail(sink, "Expect to raise with invocation", extras)
    return True


def not_raises(sink: FailureSink, fn: Callable[[], object], *extras: Any) -> bool:
    raised, exc = recovery(fn)
    if raised:
        return _fail(
            sink,
            "Expect to NOT raise with invocation",
            extras,
            LabeledOutput("Raised Value", safe_repr(exc)),
        )
    return True


# JSON paths


def _decode_document(
    sink: FailureSink, data: str | bytes, extras: tuple[Any, ...]
) -> tuple[bool, Any]:
    try:
        return True, json.loads(data)
    except (json.JSONDecodeError, TypeError) as exc:
        _fail(
            sink,
            "Expect data should be valid json",
            extras,
            LabeledOutput("+JSON", _typed(data)),
            LabeledOutput("+JSON Parse", str(exc)),
        )
        return False, None


def json_contains(sink: FailureSink, data: str | bytes, path: str, *extras: Any) -> bool:
    """Assert the JSON document ``data`` has a node at dotted ``path`` (``"items.0.id"``)."""

    decoded, document = _decode_document(sink, data, extras)
    if not decoded:
        return False

    try:
        descend(document, path)
    except KeyError:
        return _fail(
            sink,
            f"Expect data should contain json key {path}",
            extras,
            LabeledOutput("+JSON", _typed(data)),
        )
    return True


def _compact(node: Any) -> str:
    return json.dumps(node, separators=(",", ":"), ensure_ascii=False)


def _node_as(node: Any, expected: object) -> tuple[bool, Any]:
    if isinstance(expected, bool):
        return True, node is True
    if isinstance(expected, numbers.Integral):
        if isinstance(node, int) and not isinstance(node, bool):
            return True, node
        return False, None
    if isinstance(expected, numbers.Real | Decimal):
        if isinstance(node, int | float) and not isinstance(node, bool):
            return True, float(node)
        return False, None
    if isinstance(node, str):
        return True, node
    return True, _compact(node)


def json_equal_values(
    sink: FailureSink, data: str | bytes, path: str, expected: object, *extras: Any
) -> bool:
    """Assert the node at dotted ``path`` in ``data`` equals ``expected`` in value.

    The node is read as ``expected``'s kind: a number for numeric expectations,
    a boolean for boolean ones, text otherwise (compact JSON for non-string
    nodes).
    """

    decoded, document = _decode_document(sink, data, extras)
    if not decoded:
        return False

    try:
        node = descend(document, path)
    except KeyError:
        return _fail(
            sink,
            f"Expect data should contain json key {path}",
            extras,
            LabeledOutput("+JSON", _typed(data)),
        )

    converted, actual = _node_as(node, expected)
    if not converted or not coercive_equal(expected, actual):
        shown = node if isinstance(node, str) else _compact(node)
        return _fail(
            sink,
            f"Expect data should contain json key {path}",
            extras,
            LabeledOutput(LABEL_DIFF, diff(expected, shown)),
        )
    return True


PREDICATES: tuple[Callable[..., bool], ...] = (
    is_type,
    implements,
    equal,
    not_equal,
    equal_values,
    exactly,
    equal_json,
    equal_yaml,
    nil,
    not_nil,
    true,
    false,
    zero,
    not_zero,
    empty,
    not_empty,
    contains,
    not_contains,
    match,
    not_match,
    condition,
    length,
    in_delta,
    within_duration,
    error,
    not_error,
    equal_errors,
    raises,
    not_raises,
    json_contains,
    json_equal_values,
)


class _BoundPredicate:
    def __init__(self, predicate: Callable[..., bool]) -> None:
        self._predicate = predicate
        functools.update_wrapper(self, predicate)

    def __get__(self, instance: Assertion | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return functools.partial(self._predicate, instance.sink)


class Assertion:
    """Predicates bound to one sink: ``Assertion(sink).equal(expected, actual)``."""

    def __init__(self, sink: FailureSink) -> None:
        self.sink = sink

    def __repr__(self) -> str:
        return f"Assertion({self.sink!r})"


for _predicate in PREDICATES:
    setattr(Assertion, _predicate.__name__, _BoundPredicate(_predicate))
del _predicate


__all__ = [
    "PREDICATES",
    "Assertion",
    "condition",
    "contains",
    "empty",
    "equal",
    "equal_errors",
    "equal_json",
    "equal_values",
    "equal_yaml",
    "error",
    "exactly",
    "false",
    "implements",
    "in_delta",
    "is_type",
    "json_contains",
    "json_equal_values",
    "length",
    "match",
    "nil",
    "not_contains",
    "not_empty",
    "not_equal",
    "not_error",
    "not_match",
    "not_nil",
    "not_raises",
    "not_zero",
    "raises",
    "recovery",
    "true",
    "within_duration",
    "zero",
]
