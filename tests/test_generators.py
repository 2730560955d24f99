"""Tests for the net generators."""

from __future__ import annotations

import pytest

from petricraft.analysis import check_bounded
from petricraft.generators import cycle_net, source_net


class TestCycleNet:
    @pytest.mark.parametrize("n", [1, 2, 3, 7])
    def test_shape(self, n):
        net = cycle_net(n)
        assert len(net.places) == n
        assert len(net.transitions) == n
        assert len(net.flows) == 2 * n
        assert net.initial_marking == net.marking({"p0": 1})

    @pytest.mark.parametrize("n", [1, 3, 5])
    def test_firing_all_transitions_returns_home(self, n):
        net = cycle_net(n)
        sequence = [f"t{i}" for i in range(n)]
        assert net.initial_marking.fire_transitions(*sequence) == net.initial_marking

    def test_incidence_columns_sum_to_zero(self):
        assert cycle_net(4).incidence_matrix().sum(axis=0).tolist() == [0, 0, 0, 0]

    def test_initial_tokens(self):
        net = cycle_net(2, initial_tokens=3)
        assert net.get_place("p0").initial_token == 3
        assert check_bounded(net).k == 3

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            cycle_net(0)
        with pytest.raises(ValueError):
            cycle_net(2, initial_tokens=-1)


class TestSourceNet:
    def test_unbounded(self):
        assert not check_bounded(source_net()).is_bounded
