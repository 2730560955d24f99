"""Test fixtures for the analyses."""

from __future__ import annotations

import pytest

from petricraft.adt import PetriNet, TransitionSystem
from petricraft.generators import cycle_net, source_net


@pytest.fixture
def cycle3() -> PetriNet:
    return cycle_net(3)


@pytest.fixture
def source() -> PetriNet:
    """t -> p with nothing consuming p."""
    return source_net()


@pytest.fixture
def delayed_pump() -> PetriNet:
    """p0(1) -> t0 -> p1; t1 keeps p1 and adds a token to p2.

    The net becomes unbounded only after t0 has fired.
    """
    net = PetriNet("delayed-pump")
    net.create_place("p0", 1)
    net.create_places("p1", "p2")
    net.create_transitions("t0", "t1")
    net.create_flow("p0", "t0")
    net.create_flow("t0", "p1")
    net.create_flow("p1", "t1")
    net.create_flow("t1", "p1")
    net.create_flow("t1", "p2")
    return net


@pytest.fixture
def conflict_net() -> PetriNet:
    """One token on p that either a or b consumes."""
    net = PetriNet("conflict")
    net.create_place("p", 1)
    net.create_places("qa", "qb")
    net.create_transition("a")
    net.create_transition("b")
    net.create_flow("p", "a")
    net.create_flow("a", "qa")
    net.create_flow("p", "b")
    net.create_flow("b", "qb")
    return net


@pytest.fixture
def dead_net() -> PetriNet:
    """t0 can fire once, t1 waits for a token on an empty place."""
    net = PetriNet("dead")
    net.create_place("p0", 1)
    net.create_places("p1", "empty")
    net.create_transitions("t0", "t1")
    net.create_flow("p0", "t0")
    net.create_flow("t0", "p1")
    net.create_flow("empty", "t1")
    net.create_flow("t1", "p0")
    return net


@pytest.fixture
def loop_ts() -> TransitionSystem:
    """s0 -c-> s0 and s0 -a-> s1 -b-> s0."""
    ts = TransitionSystem("loops")
    ts.create_states("s0", "s1")
    ts.create_arc("s0", "s0", "c")
    ts.create_arc("s0", "s1", "a")
    ts.create_arc("s1", "s0", "b")
    ts.set_initial_state("s0")
    return ts
