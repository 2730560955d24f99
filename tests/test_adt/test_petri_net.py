"""Tests for Petri nets, tokens, markings and the firing rule.

Covers:
- Net construction and the place/transition flow restriction
- Token arithmetic with OMEGA
- Marking value semantics, firing and reverse firing
- Incidence matrix, copy and reversal
"""

from __future__ import annotations

import numpy as np
import pytest

from petricraft.adt import OMEGA, ZERO, Marking, PetriNet, Token
from petricraft.exceptions import (
    IllegalFlowError,
    NoSuchNodeError,
    StructureError,
    TransitionNotEnabledError,
)

# ── Tokens ──────────────────────────────────────────────────────────


class TestToken:
    def test_finite_tokens_behave_like_ints(self):
        assert Token(3) == 3
        assert Token(2) < 3
        assert hash(Token(5)) == hash(5)
        assert int(Token(4)) == 4

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            Token(-1)

    def test_omega_is_greater_than_everything(self):
        assert OMEGA > Token(10**9)
        assert OMEGA > 10**9
        assert not OMEGA < OMEGA
        assert OMEGA == OMEGA
        assert OMEGA != 0

    def test_omega_absorbs_arithmetic(self):
        assert OMEGA.add(5).is_omega
        assert OMEGA.add(-5).is_omega
        assert Token(1).add(OMEGA).is_omega

    def test_add(self):
        assert Token(2).add(3) == 5
        assert Token(2).add(-2) is ZERO
        with pytest.raises(ValueError):
            Token(1).add(-2)

    def test_omega_has_no_value(self):
        with pytest.raises(ValueError):
            _ = OMEGA.value

    def test_str(self):
        assert str(OMEGA) == "ω"
        assert str(Token(7)) == "7"


# ── Structure ───────────────────────────────────────────────────────


class TestPetriNetStructure:
    def test_cycle_net_shape(self, cycle3):
        assert [p.id for p in cycle3.places] == ["p0", "p1", "p2"]
        assert [t.id for t in cycle3.transitions] == ["t0", "t1", "t2"]
        assert len(cycle3.flows) == 6

    def test_flow_between_places_is_illegal(self):
        net = PetriNet("n")
        net.create_places("a", "b")
        with pytest.raises(IllegalFlowError):
            net.create_flow("a", "b")

    def test_flow_between_transitions_is_illegal(self):
        net = PetriNet("n")
        net.create_transitions("a", "b")
        with pytest.raises(IllegalFlowError):
            net.create_flow("a", "b")

    def test_flow_weight_must_be_positive(self):
        net = PetriNet("n")
        net.create_place("p")
        net.create_transition("t")
        with pytest.raises(ValueError):
            net.create_flow("p", "t", 0)
        flow = net.create_flow("p", "t", 2)
        with pytest.raises(ValueError):
            flow.weight = 0

    def test_kind_specific_lookup(self, cycle3):
        with pytest.raises(NoSuchNodeError):
            cycle3.get_place("t0")
        with pytest.raises(NoSuchNodeError):
            cycle3.get_transition("p0")
        assert cycle3.contains_place("p0")
        assert not cycle3.contains_transition("p0")

    def test_transition_label_defaults_to_id(self):
        net = PetriNet("n")
        assert net.create_transition("t").label == "t"
        assert net.create_transition("u", "a").label == "a"

    def test_consumption_and_production(self, weighted_net):
        t = weighted_net.get_transition("t")
        assert t.consumption() == {"p0": 2, "s": 1}
        assert t.production() == {"p1": 1, "s": 1}

    def test_initial_place_token_cannot_be_omega(self):
        net = PetriNet("n")
        place = net.create_place("p")
        with pytest.raises(ValueError):
            place.initial_token = OMEGA

    def test_remove_transition_drops_flows(self, cycle3):
        cycle3.remove_transition("t0")
        assert not cycle3.contains_flow("p0", "t0")
        assert not cycle3.contains_flow("t0", "p1")
        assert len(cycle3.flows) == 4


# ── Markings ────────────────────────────────────────────────────────


class TestMarking:
    def test_zero_entries_are_dropped(self, cycle3):
        m = cycle3.marking({"p0": 1, "p1": 0})
        assert m.support() == frozenset({"p0"})
        assert m["p1"] == 0
        assert m == cycle3.marking({"p0": 1})

    def test_unknown_place_rejected(self, cycle3):
        with pytest.raises(NoSuchNodeError):
            cycle3.marking({"nope": 1})

    def test_markings_of_different_nets_differ(self, cycle3):
        other = cycle3.copy()
        assert cycle3.initial_marking != other.initial_marking

    def test_items_follow_net_order(self, cycle3):
        m = cycle3.marking({"p2": 3})
        assert list(m.items()) == [("p0", 0), ("p1", 0), ("p2", 3)]
        assert str(m) == "{p0=0, p1=0, p2=3}"

    def test_set_and_add_return_copies(self, cycle3):
        m = cycle3.initial_marking
        changed = m.set_token_count("p1", 4).add_token_count("p1", -1)
        assert m["p1"] == 0
        assert changed["p1"] == 3
        with pytest.raises(ValueError):
            m.add_token_count("p1", -1)

    def test_set_initial_marking(self, cycle3):
        cycle3.set_initial_marking({"p1": 2})
        assert cycle3.initial_marking == cycle3.marking({"p1": 2})
        assert cycle3.get_place("p0").initial_token == 0

    def test_set_initial_marking_of_other_net(self, cycle3):
        other = cycle3.copy()
        with pytest.raises(StructureError):
            cycle3.set_initial_marking(other.initial_marking)

    def test_set_initial_marking_with_omega_changes_nothing(self, cycle3):
        before = cycle3.initial_marking
        with pytest.raises(ValueError):
            cycle3.set_initial_marking(cycle3.marking({"p0": 3, "p1": OMEGA}))
        assert cycle3.initial_marking == before
        assert cycle3.get_place("p0").initial_token == 1

    def test_covers_and_cover(self, cycle3):
        small = cycle3.marking({"p0": 1})
        large = cycle3.marking({"p0": 1, "p1": 2})
        assert large.covers(small)
        assert not small.covers(large)
        assert small.cover(small) is None
        accelerated = large.cover(small)
        assert accelerated is not None
        assert accelerated["p0"] == 1
        assert accelerated["p1"].is_omega
        assert accelerated.omega_places() == ["p1"]

    def test_cover_needs_finite_growth(self, cycle3):
        small = cycle3.marking({"p0": 1, "p1": 2})
        large = cycle3.marking({"p0": 1, "p1": OMEGA})
        assert large.covers(small)
        assert large != small
        assert large.cover(small) is None
        assert large.cover(cycle3.marking({"p1": 2})).omega_places() == ["p0", "p1"]


class TestFiring:
    def test_cycle_returns_to_initial_marking(self, cycle3):
        m0 = cycle3.initial_marking
        assert m0.fire_transitions("t0", "t1", "t2") == m0

    def test_cycle_steps(self, cycle3):
        m1 = cycle3.initial_marking.fire("t0")
        assert m1 == cycle3.marking({"p1": 1})
        assert m1.is_enabled("t1")
        assert not m1.is_enabled("t0")

    def test_disabled_transition_raises(self, cycle3):
        m0 = cycle3.initial_marking
        with pytest.raises(TransitionNotEnabledError) as exc_info:
            m0.fire("t1")
        assert exc_info.value.transition.id == "t1"
        assert exc_info.value.marking == m0

    def test_weights_and_side_conditions(self, weighted_net):
        m0 = weighted_net.initial_marking
        m1 = m0.fire("t")
        assert m1 == weighted_net.marking({"p1": 1, "s": 1})
        assert not m1.is_enabled("t")

    def test_reverse_firing_undoes_firing(self, weighted_net):
        m0 = weighted_net.initial_marking
        m1 = m0.fire("t")
        assert m1.is_reverse_enabled("t")
        assert m1.fire_reverse("t") == m0
        with pytest.raises(TransitionNotEnabledError):
            m0.fire_reverse("t")

    def test_omega_stays_omega(self, cycle3):
        m = cycle3.marking({"p0": OMEGA})
        after = m.fire("t0")
        assert after["p0"].is_omega
        assert after["p1"] == 1

    def test_transition_helpers(self, cycle3):
        t0 = cycle3.get_transition("t0")
        assert t0.is_fireable(cycle3.initial_marking)
        assert t0.fire(cycle3.initial_marking) == cycle3.marking({"p1": 1})

    def test_transition_of_other_net_rejected(self, weighted_net):
        reverse = weighted_net.reversed()
        foreign = reverse.get_transition("t")
        with pytest.raises(StructureError):
            weighted_net.initial_marking.fire(foreign)
        with pytest.raises(StructureError):
            weighted_net.initial_marking.is_enabled(foreign)


# ── Derived structures ──────────────────────────────────────────────


class TestDerivedNets:
    def test_incidence_matrix(self, cycle3):
        expected = np.array([[-1, 0, 1], [1, -1, 0], [0, 1, -1]])
        np.testing.assert_array_equal(cycle3.incidence_matrix(), expected)

    def test_incidence_matrix_side_condition_cancels(self, weighted_net):
        matrix = weighted_net.incidence_matrix()
        assert matrix.shape == (3, 1)
        assert matrix[:, 0].tolist() == [-2, 1, 0]

    def test_copy_is_independent(self, cycle3):
        copy = cycle3.copy("copy")
        copy.create_place("extra")
        assert copy.name == "copy"
        assert not cycle3.contains_place("extra")
        assert [f.key for f in copy.flows] == [f.key for f in cycle3.flows]

    def test_reversed_swaps_flows(self, weighted_net):
        reverse = weighted_net.reversed()
        assert reverse.get_flow("t", "p0").weight == 2
        assert reverse.contains_flow("p1", "t")
        assert reverse.initial_marking == reverse.marking({"p0": 2, "s": 1})

    def test_reversed_firing_returns_to_predecessor(self, weighted_net):
        m0 = weighted_net.initial_marking
        m1 = m0.fire("t")
        reverse = weighted_net.reversed()
        back = reverse.marking(m1.to_dict()).fire("t")
        assert back == reverse.marking(m0.to_dict())
        assert back["p0"] == 2
        assert back["s"] == 1
