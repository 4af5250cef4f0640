"""
verity — containment probing

File: src/verity/containment.py

Purpose
- Decide whether an element occurs inside a container-like or streamable value.

Functional requirements
- Text and bytes search for substrings; mappings match keys; sequences match
  members positionally; queues and streams are probed and then restored.
- Queues are always drained completely before the answer is returned, and every
  drained item is put back in its original order.
- Streams go back to their original position when seekable, get their content
  written back when writable, and otherwise stay consumed with a warning.
- Unsupported shapes and probing failures fail closed (``False``) with a
  diagnostic; nothing is raised to the caller.
"""

from __future__ import annotations

import asyncio
import queue
from collections.abc import Callable
from typing import Any, Final

import structlog

from verity.classify import Classification, classify, is_seekable, is_writable, type_name
from verity.equality import strict_equal

logger = structlog.get_logger(__name__)

_Probe = Callable[[Any, Any], bool]

_EMPTY_ERRORS: Final[tuple[type[BaseException], ...]] = (queue.Empty, asyncio.QueueEmpty)
_LIFO_TYPES: Final[tuple[type, ...]] = (queue.LifoQueue, asyncio.LifoQueue)
_BYTES_LIKE: Final[tuple[type, ...]] = (bytes, bytearray, memoryview)


def contains(container: object, element: object) -> bool:
    """Return True if ``element`` occurs in ``container``; False when it cannot be told."""

    kind = classify(container)
    probe = _PROBES.get(kind)
    if probe is None:
        logger.info(
            "containment_unsupported",
            container_type=type_name(container),
            classification=kind.value,
        )
        return False

    try:
        return probe(container, element)
    except Exception as exc:  # noqa: BLE001 - probing fails closed
        logger.warning(
            "containment_probe_failed",
            container_type=type_name(container),
            element_type=type_name(element),
            error=repr(exc),
        )
        return False


def not_contains(container: object, element: object) -> bool:
    return not contains(container, element)


def _text_needle(element: object) -> str | None:
    if isinstance(element, str):
        return element
    if isinstance(element, _BYTES_LIKE):
        try:
            return bytes(element).decode("utf-8")
        except UnicodeDecodeError:
            return None
    return None


def _bytes_needle(element: object) -> bytes | None:
    if isinstance(element, _BYTES_LIKE):
        return bytes(element)
    if isinstance(element, str):
        return element.encode("utf-8")
    return None


def _probe_text(container: str, element: object) -> bool:
    needle = _text_needle(element)
    return needle is not None and needle in container


def _probe_bytes(container: Any, element: object) -> bool:
    haystack = bytes(container)
    if isinstance(element, int) and not isinstance(element, bool):
        return 0 <= element <= 0xFF and element in haystack
    needle = _bytes_needle(element)
    return needle is not None and needle in haystack


def _probe_keys(container: Any, element: object) -> bool:
    return any(strict_equal(element, key) for key in container)


def _probe_sequence(container: Any, element: object) -> bool:
    return any(strict_equal(element, item) for item in container)


def _probe_queue(container: Any, element: object) -> bool:
    drained: list[Any] = []
    try:
        for _ in range(container.qsize()):
            try:
                drained.append(container.get_nowait())
            except _EMPTY_ERRORS:
                break
    finally:
        _restore_queue(container, drained)

    return any(strict_equal(element, item) for item in drained)


def _restore_queue(container: Any, drained: list[Any]) -> None:
    # A LIFO queue hands items out top first; refill bottom first.
    refill = reversed(drained) if isinstance(container, _LIFO_TYPES) else drained
    for item in refill:
        container.put_nowait(item)

    # Re-putting counts as new work; settle it so join() is unaffected.
    task_done = getattr(container, "task_done", None)
    if callable(task_done):
        for _ in drained:
            try:
                task_done()
            except ValueError:
                break


def _probe_stream(stream: Any, element: object) -> bool:
    position = stream.tell() if is_seekable(stream) else None
    content = stream.read()
    if content is None:
        content = b""
    try:
        if isinstance(content, _BYTES_LIKE):
            needle: object = _bytes_needle(element)
        else:
            needle = _text_needle(element)
        return needle is not None and needle in content
    finally:
        _restore_stream(stream, content, position)


def _restore_stream(stream: Any, content: Any, position: int | None) -> None:
    try:
        if position is not None:
            stream.seek(position)
            return
        if is_writable(stream):
            if content:
                stream.write(content)
            return
    except (OSError, ValueError) as exc:
        logger.warning(
            "stream_restore_failed",
            stream_type=type_name(stream),
            error=repr(exc),
        )
        return

    logger.warning(
        "stream_restore_unavailable",
        stream_type=type_name(stream),
        consumed=len(content),
    )


_PROBES: Final[dict[Classification, _Probe]] = {
    Classification.TEXT: _probe_text,
    Classification.BYTES: _probe_bytes,
    Classification.MAPPING: _probe_keys,
    Classification.SEQUENCE: _probe_sequence,
    Classification.QUEUE: _probe_queue,
    Classification.STREAM: _probe_stream,
}

__all__ = ["contains", "not_contains"]
