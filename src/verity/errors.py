"""
verity — exception hierarchy

File: src/verity/errors.py

Purpose
- Exceptions the library raises on its own behalf.

Functional requirements
- Predicates never raise for value-shape reasons; only configuration problems
  and deliberate stop-on-failure sinks surface as exceptions.
"""

from __future__ import annotations

from typing import Final


class VerityError(Exception):
    """Base exception for all verity errors."""


class ConfigError(VerityError, ValueError):
    """Raised when reporter configuration cannot be loaded or coerced."""


class ExpectationFailed(VerityError, AssertionError):
    """Raised by stop-on-failure sinks; carries the rendered failure report."""

    def __init__(self, report: str) -> None:
        super().__init__(report)
        self.report = report


# An error instance for tests that only need "some error".
AN_ERROR: Final[RuntimeError] = RuntimeError("verity.AN_ERROR general error for testing")

__all__ = ["AN_ERROR", "ConfigError", "ExpectationFailed", "VerityError"]
