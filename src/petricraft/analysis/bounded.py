"""Boundedness of Petri nets.

A net is k-bounded if no reachable marking puts more than k tokens on any
place, and bounded if it is k-bounded for some k. Both questions are
answered from the coverability graph: the net is unbounded iff some node
carries OMEGA, otherwise the largest token count over all nodes is the
smallest valid k.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from petricraft.adt.pn import PetriNet, Place, Transition
from petricraft.analysis.coverability import CoverabilityGraph
from petricraft.exceptions import UnboundedError
from petricraft.interrupt import Interrupter, interrupter_scope, throw_if_interrupt_requested

logger = logging.getLogger(__name__)


@dataclass
class BoundedResult:
    """Outcome of a boundedness check.

    Attributes:
        net: The analysed net
        unbounded_place: A place that can carry arbitrarily many tokens, or
            ``None`` for bounded nets
        k: Smallest bound of a bounded net, ``None`` for unbounded nets
        sequence: For unbounded nets, a firing sequence from the initial
            marking to the start of ``cycle``; for bounded nets, a firing
            sequence reaching a marking with ``k`` tokens on some place
        cycle: For unbounded nets, a firing sequence that can be repeated
            forever after ``sequence`` and increases ``unbounded_place``
    """

    net: PetriNet
    unbounded_place: Place | None
    k: int | None
    sequence: list[Transition] = field(default_factory=list)
    cycle: list[Transition] | None = None

    @property
    def is_bounded(self) -> bool:
        return self.unbounded_place is None

    @property
    def is_safe(self) -> bool:
        """At most one token on every place in every reachable marking."""
        return self.is_k_bounded(1)

    def is_k_bounded(self, k: int) -> bool:
        return self.is_bounded and self.k is not None and self.k <= k

    def get_sequence_exceeding(self, bound: int) -> list[Transition] | None:
        """Firing sequence after which some place holds more than ``bound`` tokens.

        Returns:
            ``None`` if no such sequence exists (the net is ``bound``-bounded
            or ``bound`` is negative), an empty list if the initial marking
            already exceeds ``bound``
        """
        if bound < 0 or self.is_k_bounded(bound):
            return None
        if any(token > bound for _, token in self.net.initial_marking.items()):
            return []
        if self.is_bounded:
            return list(self.sequence)
        assert self.unbounded_place is not None and self.cycle is not None
        witness = UnboundedError(self.net, self.unbounded_place, self.sequence, self.cycle)
        return witness.get_sequence_exceeding(bound)

    def summary(self) -> str:
        if self.is_bounded:
            return f"Net '{self.net.name}' is {self.k}-bounded"
        assert self.unbounded_place is not None and self.cycle is not None
        return (
            f"Net '{self.net.name}' is unbounded: place {self.unbounded_place.id} grows "
            f"when repeating {[t.id for t in self.cycle]} after "
            f"{[t.id for t in self.sequence]}"
        )


def check_bounded(net: PetriNet, interrupter: Interrupter | None = None) -> BoundedResult:
    """Decide boundedness of ``net`` and compute a witness.

    Args:
        net: Net to check
        interrupter: Optional interrupter polled during exploration

    Returns:
        BoundedResult with either the bound ``k`` or an unboundedness witness
    """
    graph = CoverabilityGraph.get(net)
    with interrupter_scope(interrupter):
        witness = graph.unbounded_witness()
    if witness is not None:
        return BoundedResult(
            net=net,
            unbounded_place=witness.place,
            k=None,
            sequence=list(witness.sequence),
            cycle=list(witness.cycle),
        )

    k = 0
    best = graph.initial_node
    with interrupter_scope(interrupter):
        for node in graph.iter_nodes():
            throw_if_interrupt_requested()
            for _, token in node.marking.items():
                if token.value > k:
                    k = token.value
                    best = node
    logger.debug(f"Net '{net.name}' is {k}-bounded")
    return BoundedResult(net=net, unbounded_place=None, k=k, sequence=best.firing_sequence)


__all__ = [
    "BoundedResult",
    "check_bounded",
]
