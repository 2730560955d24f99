"""Tests for liveness, reversibility and persistence."""

from __future__ import annotations

import pytest

from petricraft.adt import PetriNet, TransitionSystem
from petricraft.analysis import (
    check_liveness,
    check_persistent,
    check_persistent_net,
    check_reversible,
)
from petricraft.exceptions import UnboundedError


class TestLiveness:
    def test_cycle_net_is_simply_live(self, cycle3):
        result = check_liveness(cycle3)
        assert result.is_simply_live
        assert result.dead_transitions == []
        assert result.summary() == "All transitions can fire"

    def test_dead_transition_found(self, dead_net):
        result = check_liveness(dead_net)
        assert not result.is_simply_live
        assert [t.id for t in result.dead_transitions] == ["t1"]

    def test_unbounded_net(self, source):
        assert check_liveness(source).is_simply_live


class TestReversibility:
    def test_cycle_net_is_reversible(self, cycle3):
        result = check_reversible(cycle3)
        assert result.is_reversible
        assert result.marking is None

    def test_one_way_net(self, dead_net):
        result = check_reversible(dead_net)
        assert not result.is_reversible
        assert result.marking == dead_net.marking({"p1": 1})

    def test_unbounded_net_raises(self, source):
        with pytest.raises(UnboundedError):
            check_reversible(source)


class TestPersistence:
    def test_conflict_is_not_persistent(self, conflict_net):
        result = check_persistent_net(conflict_net)
        assert not result.is_persistent
        assert result.state.is_initial
        assert result.ts.initial_state.id == result.state.id
        assert (result.label1, result.label2) == ("a", "b")
        assert "disables" in result.summary()

    def test_cycle_net_is_persistent(self, cycle3):
        result = check_persistent_net(cycle3)
        assert result.is_persistent
        assert len(result.ts.states) == 3

    def test_independent_transitions_are_persistent(self):
        net = PetriNet("independent")
        net.create_place("p1", 1)
        net.create_place("p2", 1)
        net.create_places("q1", "q2")
        net.create_transitions("a", "b")
        net.create_flow("p1", "a")
        net.create_flow("a", "q1")
        net.create_flow("p2", "b")
        net.create_flow("b", "q2")
        assert check_persistent_net(net).is_persistent

    def test_diamond_ts(self):
        ts = TransitionSystem("diamond")
        ts.create_states("s0", "s1", "s2", "s3")
        ts.create_arc("s0", "s1", "a")
        ts.create_arc("s0", "s2", "b")
        ts.create_arc("s1", "s3", "b")
        ts.create_arc("s2", "s3", "a")
        assert check_persistent(ts).is_persistent
        ts.remove_arc("s2", "s3", "a")
        result = check_persistent(ts)
        assert not result.is_persistent
        assert (result.state.id, result.label1, result.label2) == ("s0", "b", "a")

    def test_unbounded_net_raises(self, source):
        with pytest.raises(UnboundedError):
            check_persistent_net(source)
