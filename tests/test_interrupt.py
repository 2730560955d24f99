"""Tests for cooperative interruption."""

from __future__ import annotations

import threading

import pytest

from petricraft.exceptions import ComputationInterrupted
from petricraft.interrupt import (
    EventInterrupter,
    Interrupter,
    NoOpInterrupter,
    TimeoutInterrupter,
    get_interrupter,
    interrupter_scope,
    set_interrupter,
    throw_if_interrupt_requested,
)


class TestInterrupters:
    def test_noop(self):
        assert not NoOpInterrupter().is_interrupt_requested()
        assert isinstance(NoOpInterrupter(), Interrupter)

    def test_event(self):
        interrupter = EventInterrupter()
        assert not interrupter.is_interrupt_requested()
        interrupter.request_interrupt()
        assert interrupter.is_interrupt_requested()
        interrupter.reset()
        assert not interrupter.is_interrupt_requested()

    def test_timeout(self):
        assert TimeoutInterrupter(0).is_interrupt_requested()
        assert not TimeoutInterrupter(3600).is_interrupt_requested()
        with pytest.raises(ValueError):
            TimeoutInterrupter(-1)


class TestRegistry:
    def test_default_never_interrupts(self):
        assert not get_interrupter().is_interrupt_requested()
        throw_if_interrupt_requested()

    def test_explicit_interrupter_wins(self):
        interrupter = EventInterrupter()
        interrupter.request_interrupt()
        with pytest.raises(ComputationInterrupted):
            throw_if_interrupt_requested(interrupter)

    def test_scope_restores_previous(self):
        outer = EventInterrupter()
        inner = EventInterrupter()
        set_interrupter(outer)
        try:
            with interrupter_scope(inner):
                assert get_interrupter() is inner
            assert get_interrupter() is outer
        finally:
            set_interrupter(None)
        assert isinstance(get_interrupter(), NoOpInterrupter)

    def test_registry_is_per_thread(self):
        interrupter = EventInterrupter()
        interrupter.request_interrupt()
        seen = []

        def worker():
            seen.append(get_interrupter().is_interrupt_requested())

        with interrupter_scope(interrupter):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()
            with pytest.raises(ComputationInterrupted):
                throw_if_interrupt_requested()
        assert seen == [False]

    def test_scope_without_interrupter_keeps_registered(self):
        outer = EventInterrupter()
        with interrupter_scope(outer):
            with interrupter_scope(None) as current:
                assert current is outer
                assert get_interrupter() is outer
            assert get_interrupter() is outer
        assert isinstance(get_interrupter(), NoOpInterrupter)
