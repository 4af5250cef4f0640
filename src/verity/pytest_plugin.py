"""pytest integration: the ``assertion`` fixture.

Registered through the ``pytest11`` entry point. Failures recorded during a
test are collected and fail the test at fixture teardown, so one test can
report several broken expectations at once.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from verity.assertions import Assertion
from verity.sinks import BufferSink


@pytest.fixture
def assertion() -> Iterator[Assertion]:
    """An ``Assertion`` over a collecting sink; any recorded failure fails the test."""

    sink = BufferSink()
    yield Assertion(sink)
    if sink.failed:
        pytest.fail(f"{len(sink)} expectation(s) failed:\n{sink}", pytrace=False)
