"""
verity — failure sinks

File: src/verity/sinks.py

Purpose
- Ready-made receivers for rendered failure reports: an in-memory buffer that
  decorates entries the way a test driver would, a stop-on-first-failure sink,
  and a wrapper that annotates failures with the offending source line.

Functional requirements
- ``BufferSink`` prefixes each failure with ``\\t<file>:<line>: `` of the caller
  and indents continuation lines by one extra tab.
- ``RaisingSink`` raises ``ExpectationFailed`` carrying the report text.
- ``AnnotatingSink`` looks the source line up with ``linecache`` and paints it
  with the configured ``Painter`` before forwarding.
"""

from __future__ import annotations

import linecache
from collections.abc import Iterator

from verity.callsite import CallFrame, FrameFilter, resolve
from verity.config import ReporterConfig
from verity.errors import ExpectationFailed
from verity.report import FailureSink, default_reporter

_UNKNOWN_LOCATION = "???:1"


def _caller(frame_filter: FrameFilter, max_depth: int) -> CallFrame | None:
    chain = resolve(1, frame_filter=frame_filter, max_depth=max_depth)
    return chain.frames[0] if chain.frames else None


def _config(config: ReporterConfig | None) -> ReporterConfig:
    return config if config is not None else default_reporter().config


class BufferSink:
    """Collects failures in memory, decorated with the caller's location."""

    def __init__(self, *, config: ReporterConfig | None = None) -> None:
        resolved = _config(config)
        self._frame_filter = resolved.frame_filter()
        self._max_depth = resolved.max_depth
        self._failures: list[str] = []
        self._entries: list[str] = []

    def record_failure(self, text: str) -> None:
        frame = _caller(self._frame_filter, self._max_depth)
        location = str(frame) if frame is not None else _UNKNOWN_LOCATION
        self._failures.append(text)
        self._entries.append(f"\t{location}: " + "\n\t\t".join(text.split("\n")) + "\n")

    @property
    def failures(self) -> list[str]:
        return list(self._failures)

    @property
    def failed(self) -> bool:
        return bool(self._failures)

    def reset(self) -> None:
        self._failures.clear()
        self._entries.clear()

    def __iter__(self) -> Iterator[str]:
        return iter(self._failures)

    def __len__(self) -> int:
        return len(self._failures)

    def __str__(self) -> str:
        return "".join(self._entries)


class RaisingSink:
    """Stops at the first failure by raising ``ExpectationFailed``."""

    def record_failure(self, text: str) -> None:
        raise ExpectationFailed(text)


class AnnotatingSink:
    """Forwards failures to ``inner`` with the failing source line on top."""

    def __init__(self, inner: FailureSink, *, config: ReporterConfig | None = None) -> None:
        resolved = _config(config)
        self._inner = inner
        self._frame_filter = resolved.frame_filter()
        self._max_depth = resolved.max_depth
        self._painter = resolved.painter()

    def record_failure(self, text: str) -> None:
        frame = _caller(self._frame_filter, self._max_depth)
        self._inner.record_failure(self._annotation(frame) + text)

    def _annotation(self, frame: CallFrame | None) -> str:
        if frame is None:
            return ""
        source = linecache.getline(frame.path, frame.line).strip() if frame.path else ""
        location = self._painter.paint(str(frame), "gray")
        if not source:
            return location
        return f"{location}  {self._painter.paint(source, 'yellow')}"


__all__ = ["AnnotatingSink", "BufferSink", "FailureSink", "RaisingSink"]
