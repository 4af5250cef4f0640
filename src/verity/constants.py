"""Stable constants shared across verity modules."""

from __future__ import annotations

from typing import Final

# Report labels.
LABEL_ERROR_TRACE: Final[str] = "Error Trace"
LABEL_ERROR: Final[str] = "Error"
LABEL_MESSAGE: Final[str] = "Message"
LABEL_DIFF: Final[str] = "Diff"

# Terminates every rendered report; resets the driver's own indentation.
REPORT_SENTINEL: Final[str] = "\n\r"

# Unified diff headers and context window.
DIFF_FROM_FILE: Final[str] = "Expected"
DIFF_TO_FILE: Final[str] = "Actual"
DIFF_CONTEXT_LINES: Final[int] = 1

# Call-site attribution defaults.
DEFAULT_INTERNAL_PACKAGES: Final[tuple[str, ...]] = ("verity",)
DEFAULT_DRIVER_MODULES: Final[tuple[str, ...]] = ("_pytest", "pluggy", "unittest")
DEFAULT_ENTRY_PREFIXES: Final[tuple[str, ...]] = ("test", "Test", "bench", "example")
DEFAULT_MAX_DEPTH: Final[int] = 256
TEST_FILE_PREFIX: Final[str] = "test_"
TEST_FILE_SUFFIX: Final[str] = "_test.py"

# Painter roles and their default rich colors.
PAINT_ROLES: Final[tuple[str, ...]] = ("gray", "cyan", "green", "blue", "yellow", "magenta")
DEFAULT_PALETTE: Final[dict[str, str]] = {
    "gray": "bright_black",
    "cyan": "cyan",
    "green": "green",
    "blue": "blue",
    "yellow": "yellow",
    "magenta": "magenta",
}

__all__ = [
    "DEFAULT_DRIVER_MODULES",
    "DEFAULT_ENTRY_PREFIXES",
    "DEFAULT_INTERNAL_PACKAGES",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_PALETTE",
    "DIFF_CONTEXT_LINES",
    "DIFF_FROM_FILE",
    "DIFF_TO_FILE",
    "LABEL_DIFF",
    "LABEL_ERROR",
    "LABEL_ERROR_TRACE",
    "LABEL_MESSAGE",
    "PAINT_ROLES",
    "REPORT_SENTINEL",
    "TEST_FILE_PREFIX",
    "TEST_FILE_SUFFIX",
]
