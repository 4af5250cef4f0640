"""
verity — expectation predicates with precise failure reports

File: src/verity/__init__.py

Purpose
- Package root. Re-exports the predicate surface, the sinks and the engine
  entry points test code reaches for.

Functional requirements
- Must not have side effects at import time (no config loading, no logging
  configuration); the default reporter is built on first failure.
"""

from __future__ import annotations

from verity.assertions import (
    PREDICATES,
    Assertion,
    condition,
    contains,
    empty,
    equal,
    equal_errors,
    equal_json,
    equal_values,
    equal_yaml,
    error,
    exactly,
    false,
    implements,
    in_delta,
    is_type,
    json_contains,
    json_equal_values,
    length,
    match,
    nil,
    not_contains,
    not_empty,
    not_equal,
    not_error,
    not_match,
    not_nil,
    not_raises,
    not_zero,
    raises,
    recovery,
    true,
    within_duration,
    zero,
)
from verity.classify import Classification, Ref, classify, is_nil
from verity.config import ReporterConfig, load_config
from verity.equality import coercive_equal, strict_equal
from verity.errors import AN_ERROR, ConfigError, ExpectationFailed, VerityError
from verity.report import FailureReporter, FailureSink, LabeledOutput, errorf
from verity.sinks import AnnotatingSink, BufferSink, RaisingSink

__version__ = "0.1.0"

__all__ = [
    "AN_ERROR",
    "PREDICATES",
    "AnnotatingSink",
    "Assertion",
    "BufferSink",
    "Classification",
    "ConfigError",
    "ExpectationFailed",
    "FailureReporter",
    "FailureSink",
    "LabeledOutput",
    "RaisingSink",
    "Ref",
    "ReporterConfig",
    "VerityError",
    "__version__",
    "classify",
    "coercive_equal",
    "condition",
    "contains",
    "empty",
    "equal",
    "equal_errors",
    "equal_json",
    "equal_values",
    "equal_yaml",
    "errorf",
    "error",
    "exactly",
    "false",
    "implements",
    "in_delta",
    "is_nil",
    "is_type",
    "json_contains",
    "json_equal_values",
    "length",
    "load_config",
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
    "strict_equal",
    "true",
    "within_duration",
    "zero",
]
