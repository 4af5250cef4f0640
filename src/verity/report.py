"""
verity — failure reporting

File: src/verity/report.py

Purpose
- Assemble a labeled, column-aligned failure report from the resolved call
  site, a summary line and structured extras, and hand it to a failure sink.

Functional requirements
- A non-empty ``Message`` renders first and flush left; every other label renders
  in insertion order, right-aligned to the longest label.
- Continuation lines of multi-line content start at the same column as the
  first line's content.
- The rendered text starts with a newline and ends with the ``\\n\\r`` sentinel.
- ``report`` always returns ``False``; predicates decide whether to call it.

Non-functional requirements
- No state is shared between calls beyond the immutable ``ReporterConfig``.
"""

from __future__ import annotations

import functools
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from verity.callsite import resolve
from verity.classify import Ref
from verity.config import ReporterConfig, load_config
from verity.constants import LABEL_MESSAGE, REPORT_SENTINEL
from verity.rendering import safe_repr


@runtime_checkable
class FailureSink(Protocol):
    """Anything that can receive a rendered failure report."""

    def record_failure(self, text: str) -> None: ...


@dataclass(frozen=True, slots=True)
class LabeledOutput:
    """One ``label: content`` entry of a failure report."""

    label: str
    content: str


class Report:
    """Ordered labeled outputs rendered as an aligned failure report."""

    def __init__(self, *, message_label: str = LABEL_MESSAGE) -> None:
        self._message_label = message_label
        self._outputs: list[LabeledOutput] = []

    def add(self, output: LabeledOutput) -> Report:
        self._outputs.append(output)
        return self

    def __iter__(self) -> Iterator[LabeledOutput]:
        return iter(self._outputs)

    def __len__(self) -> int:
        return len(self._outputs)

    @property
    def padding(self) -> int:
        return max(
            (len(output.label) for output in self._outputs if self._rendered(output)), default=0
        )

    def _rendered(self, output: LabeledOutput) -> bool:
        return output.label != self._message_label or bool(output.content)

    def render(self) -> str:
        width = self.padding
        continuation = " " * (width + 1) + "\t"
        chunks: list[str] = []

        for output in self._outputs:
            if output.label == self._message_label and output.content:
                chunks.append("\n" + _align_continuations(output.content, ""))

        for output in self._outputs:
            if output.label == self._message_label:
                continue
            pad = " " * (width - len(output.label))
            content = _align_continuations(output.content, continuation)
            chunks.append(f"\n{pad}{output.label}:\t{content}")

        return "".join(chunks) + REPORT_SENTINEL

    __str__ = render


def _align_continuations(content: str, prefix: str) -> str:
    return ("\n" + prefix).join(content.splitlines())


def format_extras(*extras: object) -> str:
    """Render trailing predicate arguments as a message.

    A leading ``str`` (or UTF-8 ``bytes``) is a printf-style format applied to the
    remaining arguments; anything else renders as the list of all extras.
    """

    if not extras:
        return ""

    head, args = extras[0], extras[1:]
    if isinstance(head, bytes | bytearray):
        head = bytes(head).decode("utf-8", errors="replace")
    if not isinstance(head, str):
        return str(list(extras))
    if not args:
        return head

    operands: object = args[0] if len(args) == 1 and isinstance(args[0], Mapping) else args
    try:
        return head % operands
    except (TypeError, ValueError, KeyError):
        return " ".join([head, *(safe_repr(arg) for arg in args)])


def _labeled_outputs(extra: object) -> list[LabeledOutput] | None:
    if isinstance(extra, LabeledOutput):
        return [extra]
    if isinstance(extra, Ref) and isinstance(extra.target, LabeledOutput):
        return [extra.target]
    if isinstance(extra, list | tuple):
        outputs: list[LabeledOutput] = []
        for item in extra:
            if isinstance(item, Ref):
                item = item.target
            if not isinstance(item, LabeledOutput):
                return None
            outputs.append(item)
        return outputs
    return None


class FailureReporter:
    """Renders failure reports and hands them to a sink."""

    def __init__(self, config: ReporterConfig | None = None) -> None:
        self._config = config if config is not None else ReporterConfig()
        self._frame_filter = self._config.frame_filter()

    @property
    def config(self) -> ReporterConfig:
        return self._config

    def build(self, summary: str, *extras: object) -> Report:
        """Build the report for a failure attributed to the current call site."""

        chain = resolve(frame_filter=self._frame_filter, max_depth=self._config.max_depth)
        report = Report(message_label=self._config.label_message)
        report.add(LabeledOutput(self._config.label_error_trace, "\n".join(chain.lines())))
        report.add(LabeledOutput(self._config.label_error, summary))

        message = ""
        for extra in extras:
            outputs = _labeled_outputs(extra)
            if outputs is None:
                message = format_extras(*extras)
                if message:
                    break
                continue
            for output in outputs:
                report.add(output)

        if message:
            report.add(LabeledOutput(self._config.label_message, message))
        return report

    def report(self, sink: FailureSink, summary: str, *extras: object) -> bool:
        """Render a failure report into ``sink``; always returns ``False``."""

        sink.record_failure(self.build(summary, *extras).render())
        return False


@functools.cache
def default_reporter() -> FailureReporter:
    """The process-wide reporter, configured once from ``pyproject.toml`` and env."""

    return FailureReporter(load_config())


def errorf(sink: FailureSink, summary: str, *extras: object) -> bool:
    """Report a failure through the default reporter and return ``False``."""

    return default_reporter().report(sink, summary, *extras)


__all__ = [
    "FailureReporter",
    "FailureSink",
    "LabeledOutput",
    "Report",
    "default_reporter",
    "errorf",
    "format_extras",
]
