"""Test fixtures for the abstract data types."""

from __future__ import annotations

import pytest

from petricraft.adt import PetriNet, TransitionSystem
from petricraft.generators import cycle_net


@pytest.fixture
def cycle3() -> PetriNet:
    """Cycle net of size 3: p0 -> t0 -> p1 -> t1 -> p2 -> t2 -> p0, one token on p0."""
    return cycle_net(3)


@pytest.fixture
def weighted_net() -> PetriNet:
    """p0(2) --2--> t --1--> p1, plus a side condition s(1) <-> t."""
    net = PetriNet("weighted")
    net.create_place("p0", 2)
    net.create_place("p1")
    net.create_place("s", 1)
    net.create_transition("t")
    net.create_flow("p0", "t", 2)
    net.create_flow("t", "p1")
    net.create_flow("s", "t")
    net.create_flow("t", "s")
    return net


@pytest.fixture
def diamond_ts() -> TransitionSystem:
    """s0 -a-> s1 -b-> s3, s0 -b-> s2 -a-> s3."""
    ts = TransitionSystem("diamond")
    ts.create_states("s0", "s1", "s2", "s3")
    ts.create_arc("s0", "s1", "a")
    ts.create_arc("s1", "s3", "b")
    ts.create_arc("s0", "s2", "b")
    ts.create_arc("s2", "s3", "a")
    ts.set_initial_state("s0")
    return ts
