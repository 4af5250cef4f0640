"""
verity — unit tests for call-site attribution

File: tests/unit/reporting/test_callsite.py

Purpose
- Validate the stack walk that attributes failures to user code.

What this test file should cover
- The walk records the test entry point and stops there.
- Library-internal frames are skipped; other frames are recorded and widen
  the file column.
- Driver and synthetic frames stop the walk without being recorded.
- The depth bound and entry-point naming rules.

Helper frames are compiled from source under chosen file and module names so
each boundary can be exercised without extra modules on disk.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from typing import Any

import pytest

from verity.callsite import CallChain, CallFrame, FrameFilter, looks_like_entry_point, resolve

_RELAY_SOURCE = """
def relay(callback):
    return callback()
"""


def _relay(filename: str, module: str) -> Callable[[Callable[[], Any]], Any]:
    namespace: dict[str, Any] = {"__name__": module}
    exec(compile(textwrap.dedent(_RELAY_SOURCE), filename, "exec"), namespace)
    return namespace["relay"]


@pytest.mark.unit
def test_resolve_stops_at_the_test_entry_point() -> None:
    chain = resolve()

    assert [frame.file for frame in chain] == ["test_callsite.py"]
    assert chain.frames[0].function == "test_resolve_stops_at_the_test_entry_point"
    assert chain.frames[0].path.endswith("test_callsite.py")
    assert chain.longest_file == 0


@pytest.mark.unit
def test_user_helper_frames_are_recorded() -> None:
    relay = _relay("/srv/app/helpers.py", "app.helpers")

    chain = relay(lambda: resolve())

    assert [frame.file for frame in chain] == ["test_callsite.py", "helpers.py", "test_callsite.py"]
    assert chain.frames[1].function == "relay"
    assert chain.frames[1].line == 3
    assert chain.longest_file == len("helpers.py")


@pytest.mark.unit
def test_internal_frames_are_skipped() -> None:
    relay = _relay("/site-packages/verity/relay.py", "verity.relay")

    chain = relay(lambda: resolve())

    assert [frame.file for frame in chain] == ["test_callsite.py", "test_callsite.py"]


@pytest.mark.unit
def test_custom_filter_marks_other_packages_internal() -> None:
    relay = _relay("/srv/app/helpers.py", "app.helpers")
    frame_filter = FrameFilter(internal_packages=("verity", "app"))

    chain = relay(lambda: resolve(frame_filter=frame_filter))

    assert [frame.file for frame in chain] == ["test_callsite.py", "test_callsite.py"]


@pytest.mark.unit
def test_driver_frames_stop_the_walk() -> None:
    relay = _relay("/site-packages/_pytest/runner.py", "_pytest.runner")

    chain = relay(lambda: resolve())

    assert [frame.file for frame in chain] == ["test_callsite.py"]


@pytest.mark.unit
def test_synthetic_frames_stop_the_walk() -> None:
    relay = _relay("<generated>", "generated")

    chain = relay(lambda: resolve())

    assert [frame.file for frame in chain] == ["test_callsite.py"]


@pytest.mark.unit
def test_max_depth_bounds_the_walk() -> None:
    relay = _relay("/srv/app/helpers.py", "app.helpers")

    chain = relay(lambda: resolve(max_depth=2))

    assert [frame.file for frame in chain] == ["test_callsite.py", "helpers.py"]


@pytest.mark.unit
def test_skip_frames_starts_further_out() -> None:
    relay = _relay("/srv/app/helpers.py", "app.helpers")

    chain = relay(lambda: resolve(1))

    assert [frame.file for frame in chain] == ["helpers.py", "test_callsite.py"]


@pytest.mark.unit
def test_chain_lines_right_align_file_names() -> None:
    chain = CallChain(
        frames=(CallFrame("a.py", 1, "f"), CallFrame("long_name.py", 22, "g")),
        longest_file=12,
    )

    assert chain.lines() == ["        a.py:1", "long_name.py:22"]
    assert str(chain.frames[0]) == "a.py:1"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "prefix", "expected"),
    [
        ("test", "test", True),
        ("test_parse", "test", True),
        ("TestParser", "Test", True),
        ("testimony", "test", False),
        ("bench", "bench", True),
        ("benchmark", "bench", False),
        ("Example", "example", False),
    ],
)
def test_entry_point_naming(name: str, prefix: str, expected: bool) -> None:
    assert looks_like_entry_point(name, prefix) is expected


@pytest.mark.unit
def test_frame_filter_rules() -> None:
    frame_filter = FrameFilter()

    assert frame_filter.is_entry_point("TestParser.test_tokens")
    assert not frame_filter.is_entry_point("helper")
    assert frame_filter.is_test_file("/x/test_parser.py")
    assert frame_filter.is_test_file("/x/parser_test.py")
    assert not frame_filter.is_test_file("/x/contest.py")
    assert not frame_filter.is_test_file("/x/test_data.json")
    assert frame_filter.is_synthetic("<frozen runpy>")
    assert frame_filter.is_driver("unittest.case")
    assert not frame_filter.is_internal("verityx")
    assert frame_filter.is_internal("verity.report")
