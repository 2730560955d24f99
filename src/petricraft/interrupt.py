"""Cooperative interruption of long-running explorations.

Coverability construction and cycle search poll an interrupter once per
iteration of their main loop. Cancelling a computation means flipping the
interrupter from another thread (or letting a deadline pass); the polling
loop then raises :class:`ComputationInterrupted`.

Interrupters are registered per thread, so independent analyses running in
parallel threads can be cancelled independently.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, runtime_checkable

from petricraft.exceptions import ComputationInterrupted

logger = logging.getLogger(__name__)


@runtime_checkable
class Interrupter(Protocol):
    """Anything that can tell a computation to stop."""

    def is_interrupt_requested(self) -> bool: ...


class NoOpInterrupter:
    """Interrupter that never interrupts."""

    def is_interrupt_requested(self) -> bool:
        return False


class EventInterrupter:
    """Interrupter backed by a :class:`threading.Event`.

    Call :meth:`request_interrupt` from any thread to cancel the
    computation polling this interrupter.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def request_interrupt(self) -> None:
        """Ask the polling computation to stop."""
        self._event.set()

    def reset(self) -> None:
        """Clear a previous interrupt request."""
        self._event.clear()

    def is_interrupt_requested(self) -> bool:
        return self._event.is_set()


class TimeoutInterrupter:
    """Interrupter that fires once a wall-clock budget is used up."""

    def __init__(self, seconds: float):
        if seconds < 0:
            raise ValueError(f"Timeout must be non-negative, got {seconds}")
        self.seconds = seconds
        self._deadline = time.monotonic() + seconds

    def is_interrupt_requested(self) -> bool:
        return time.monotonic() >= self._deadline


_NO_INTERRUPT = NoOpInterrupter()
_registry = threading.local()


def get_interrupter() -> Interrupter:
    """Return the interrupter registered for the current thread."""
    return getattr(_registry, "interrupter", _NO_INTERRUPT)


def set_interrupter(interrupter: Interrupter | None) -> None:
    """Register ``interrupter`` for the current thread (``None`` unregisters)."""
    if interrupter is None:
        if hasattr(_registry, "interrupter"):
            del _registry.interrupter
    else:
        _registry.interrupter = interrupter


@contextmanager
def interrupter_scope(interrupter: Interrupter | None) -> Iterator[Interrupter]:
    """Register ``interrupter`` for the current thread inside a ``with`` block.

    ``None`` keeps the interrupter that is already registered.
    """
    if interrupter is None:
        yield get_interrupter()
        return
    previous = getattr(_registry, "interrupter", None)
    set_interrupter(interrupter)
    try:
        yield interrupter
    finally:
        set_interrupter(previous)


def throw_if_interrupt_requested(interrupter: Interrupter | None = None) -> None:
    """Raise :class:`ComputationInterrupted` if an interrupt was requested.

    Args:
        interrupter: Interrupter to poll; defaults to the one registered
            for the current thread.

    Raises:
        ComputationInterrupted: If the interrupter asks to stop.
    """
    if interrupter is None:
        interrupter = get_interrupter()
    if interrupter.is_interrupt_requested():
        logger.debug("Interrupt requested, abandoning computation")
        raise ComputationInterrupted("Computation was interrupted")


__all__ = [
    "Interrupter",
    "NoOpInterrupter",
    "EventInterrupter",
    "TimeoutInterrupter",
    "get_interrupter",
    "set_interrupter",
    "interrupter_scope",
    "throw_if_interrupt_requested",
]
