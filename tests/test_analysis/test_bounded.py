"""Tests for boundedness checks and their witnesses."""

from __future__ import annotations

import pytest

from petricraft.adt import PetriNet
from petricraft.analysis import check_bounded
from petricraft.generators import cycle_net


class TestBoundedNets:
    def test_cycle_net_is_safe(self, cycle3):
        result = check_bounded(cycle3)
        assert result.is_bounded
        assert result.is_safe
        assert result.k == 1
        assert result.unbounded_place is None
        assert result.cycle is None
        assert result.summary() == "Net 'cycle-3' is 1-bounded"

    def test_k_from_initial_tokens(self):
        result = check_bounded(cycle_net(3, initial_tokens=2))
        assert result.k == 2
        assert not result.is_safe
        assert result.is_k_bounded(2)
        assert not result.is_k_bounded(1)

    def test_sequence_reaches_maximum(self):
        net = PetriNet("doubler")
        net.create_place("p0", 1)
        net.create_place("p1")
        net.create_transition("t")
        net.create_flow("p0", "t")
        net.create_flow("t", "p1", 2)
        result = check_bounded(net)
        assert result.k == 2
        assert [t.id for t in result.sequence] == ["t"]
        assert [t.id for t in result.get_sequence_exceeding(1)] == ["t"]
        assert result.get_sequence_exceeding(2) is None

    def test_initial_marking_already_exceeds(self):
        result = check_bounded(cycle_net(3, initial_tokens=2))
        assert result.get_sequence_exceeding(1) == []
        assert result.get_sequence_exceeding(2) is None
        assert result.get_sequence_exceeding(-1) is None

    def test_net_without_places(self):
        net = PetriNet("empty")
        net.create_transition("t")
        result = check_bounded(net)
        assert result.is_bounded
        assert result.k == 0


class TestUnboundedNets:
    def test_source_net(self, source):
        result = check_bounded(source)
        assert not result.is_bounded
        assert not result.is_safe
        assert not result.is_k_bounded(100)
        assert result.k is None
        assert result.unbounded_place.id == "p"
        assert result.sequence == []
        assert [t.id for t in result.cycle] == ["t"]
        assert "unbounded" in result.summary()

    @pytest.mark.parametrize("bound", [0, 1, 5, 20])
    def test_sequence_exceeding(self, source, bound):
        result = check_bounded(source)
        sequence = result.get_sequence_exceeding(bound)
        assert len(sequence) == bound + 1
        reached = source.initial_marking.fire_transitions(*sequence)
        assert reached["p"] == bound + 1

    def test_sequence_exceeding_after_prefix(self, delayed_pump):
        result = check_bounded(delayed_pump)
        assert result.unbounded_place.id == "p2"
        sequence = result.get_sequence_exceeding(2)
        reached = delayed_pump.initial_marking.fire_transitions(*sequence)
        assert reached["p2"] == 3

    def test_negative_bound(self, source):
        assert check_bounded(source).get_sequence_exceeding(-1) is None
