"""
verity — call-site attribution

File: src/verity/callsite.py

Purpose
- Walk the live call stack from a failing predicate outward and return the
  chain of ``file:line`` locations that belong to the caller, so failures point
  at user code instead of library internals.

Functional requirements
- Frames of the library's own packages are skipped unless the frame's file is
  a test file.
- The walk stops at the test entry point (recorded), at a driver frame (not
  recorded) and at a synthetic frame such as ``<string>`` (not recorded).
- The walk is bounded; an unreadable frame truncates the chain instead of
  failing.
- Which frames count as internal, driver or entry point is decided by a
  pluggable ``FrameFilter``.
"""

from __future__ import annotations

import inspect
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from types import FrameType

import structlog

from verity.constants import (
    DEFAULT_DRIVER_MODULES,
    DEFAULT_ENTRY_PREFIXES,
    DEFAULT_INTERNAL_PACKAGES,
    DEFAULT_MAX_DEPTH,
    TEST_FILE_PREFIX,
    TEST_FILE_SUFFIX,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CallFrame:
    """One caller location: base file name, line number and function name.

    ``path`` keeps the full file name for source lookups; it is not part of the
    rendered location.
    """

    file: str
    line: int
    function: str
    path: str = field(default="", compare=False)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True, slots=True)
class CallChain:
    """Caller locations, innermost first."""

    frames: tuple[CallFrame, ...] = ()
    longest_file: int = 0

    def __iter__(self) -> Iterator[CallFrame]:
        return iter(self.frames)

    def __len__(self) -> int:
        return len(self.frames)

    def lines(self) -> list[str]:
        """Render ``file:line`` entries with file names right-aligned on the colon."""

        return [f"{frame.file:>{self.longest_file}}:{frame.line}" for frame in self.frames]


def _in_packages(module: str, packages: tuple[str, ...]) -> bool:
    return any(module == package or module.startswith(f"{package}.") for package in packages)


def looks_like_entry_point(name: str, prefix: str) -> bool:
    """True if ``name`` is ``prefix`` or ``prefix`` followed by a non-lowercase character.

    ``test_parse`` and ``TestParser`` qualify; ``testimony`` does not.
    """

    if not name.startswith(prefix):
        return False
    if len(name) == len(prefix):
        return True
    return not name[len(prefix)].islower()


@dataclass(frozen=True, slots=True)
class FrameFilter:
    """Decides how the stack walk treats each frame.

    Subclass or construct with other packages/prefixes to reuse the resolver
    with a different test driver.
    """

    internal_packages: tuple[str, ...] = DEFAULT_INTERNAL_PACKAGES
    driver_modules: tuple[str, ...] = DEFAULT_DRIVER_MODULES
    entry_prefixes: tuple[str, ...] = DEFAULT_ENTRY_PREFIXES

    def is_synthetic(self, filename: str) -> bool:
        return filename.startswith("<") and filename.endswith(">")

    def is_driver(self, module: str) -> bool:
        return _in_packages(module, self.driver_modules)

    def is_internal(self, module: str) -> bool:
        return _in_packages(module, self.internal_packages)

    def is_test_file(self, filename: str) -> bool:
        base = os.path.basename(filename)
        if base.endswith(TEST_FILE_SUFFIX):
            return True
        return base.startswith(TEST_FILE_PREFIX) and base.endswith(".py")

    def is_entry_point(self, function: str) -> bool:
        name = function.rsplit(".", 1)[-1]
        return any(looks_like_entry_point(name, prefix) for prefix in self.entry_prefixes)


def resolve(
    skip_frames: int = 0,
    *,
    frame_filter: FrameFilter | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> CallChain:
    """Return the caller chain starting ``skip_frames`` levels above ``resolve``'s caller."""

    active_filter = frame_filter if frame_filter is not None else FrameFilter()
    frames: list[CallFrame] = []
    longest_file = 0

    frame: FrameType | None = inspect.currentframe()
    try:
        for _ in range(skip_frames + 1):
            frame = frame.f_back if frame is not None else None

        depth = 0
        while frame is not None and depth < max_depth:
            depth += 1
            try:
                code = frame.f_code
                filename = code.co_filename
                line = frame.f_lineno
                function = getattr(code, "co_qualname", code.co_name)
                module = frame.f_globals.get("__name__", "")
            except (AttributeError, ValueError) as exc:
                logger.warning("callsite_frame_unreadable", depth=depth, error=repr(exc))
                break

            if active_filter.is_synthetic(filename):
                break
            if active_filter.is_driver(str(module)):
                break

            is_test_file = active_filter.is_test_file(filename)
            if is_test_file or not active_filter.is_internal(str(module)):
                base = os.path.basename(filename)
                frames.append(
                    CallFrame(file=base, line=line or 0, function=function, path=filename)
                )
                if not is_test_file:
                    longest_file = max(longest_file, len(base))

            if active_filter.is_entry_point(function):
                break
            frame = frame.f_back
    finally:
        del frame

    return CallChain(frames=tuple(frames), longest_file=longest_file)


__all__ = ["CallChain", "CallFrame", "FrameFilter", "looks_like_entry_point", "resolve"]
