"""Behavioural properties of Petri nets and transition systems.

- Simple liveness: every transition can fire at least once
- Reversibility: the initial marking can be reached back from every
  reachable marking
- Persistence: firing one enabled label never disables another
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field

from petricraft.adt.pn import Marking, PetriNet, Transition
from petricraft.adt.ts import State, TransitionSystem
from petricraft.analysis.coverability import MARKING_EXTENSION, CoverabilityGraph
from petricraft.interrupt import Interrupter, interrupter_scope, throw_if_interrupt_requested

logger = logging.getLogger(__name__)

# =============================================================================
# Liveness
# =============================================================================


@dataclass
class LivenessResult:
    """Outcome of a simple liveness check.

    Attributes:
        is_simply_live: True iff every transition is fireable in some
            reachable marking
        dead_transitions: Transitions that can never fire, in net order
    """

    is_simply_live: bool
    dead_transitions: list[Transition] = field(default_factory=list)

    def summary(self) -> str:
        if self.is_simply_live:
            return "All transitions can fire"
        return f"Dead transitions: {[t.id for t in self.dead_transitions]}"


def check_liveness(net: PetriNet, interrupter: Interrupter | None = None) -> LivenessResult:
    """Find transitions that never fire.

    A transition is fireable in some reachable marking iff it labels an
    edge of the coverability graph, so this works for unbounded nets too.
    """
    with interrupter_scope(interrupter):
        fired = {edge.transition.id for edge in CoverabilityGraph.get(net).iter_edges()}
    dead = [t for t in net.transitions if t.id not in fired]
    logger.debug(f"Net '{net.name}' has {len(dead)} dead transitions")
    return LivenessResult(is_simply_live=not dead, dead_transitions=dead)


# =============================================================================
# Reversibility
# =============================================================================


@dataclass
class ReversibilityResult:
    """Outcome of a reversibility check.

    Attributes:
        is_reversible: True iff the initial marking is reachable from every
            reachable marking
        marking: A reachable marking from which the initial marking cannot
            be reached, or ``None``
    """

    is_reversible: bool
    marking: Marking | None = None


def check_reversible(net: PetriNet, interrupter: Interrupter | None = None) -> ReversibilityResult:
    """Check reversibility on the reachability graph.

    Raises:
        UnboundedError: If the net is unbounded
    """
    with interrupter_scope(interrupter):
        lts = CoverabilityGraph.get(net).to_reachability_lts()
    initial = lts.initial_state
    seen = {initial.id}
    queue = deque([initial.id])
    while queue:
        throw_if_interrupt_requested(interrupter)
        current = queue.popleft()
        for arc in lts.iter_preset_edges(current):
            if arc.source_id not in seen:
                seen.add(arc.source_id)
                queue.append(arc.source_id)
    for state in lts.states:
        if state.id not in seen:
            return ReversibilityResult(False, state.get_extension(MARKING_EXTENSION))
    return ReversibilityResult(True)


# =============================================================================
# Persistence
# =============================================================================


@dataclass
class PersistenceResult:
    """Outcome of a persistence check.

    If the system is not persistent, firing ``label1`` in ``state`` leads to
    a state where ``label2`` is no longer enabled although it was enabled in
    ``state``. The checked transition system is kept in ``ts`` since its
    states only hold a weak reference to it.
    """

    is_persistent: bool
    state: State | None = None
    label1: str | None = None
    label2: str | None = None
    ts: TransitionSystem | None = None

    def summary(self) -> str:
        if self.is_persistent:
            return "Persistent"
        assert self.state is not None
        return f"In state {self.state.id}, '{self.label1}' disables '{self.label2}'"


def _enabled_labels(ts: TransitionSystem, state_id: str) -> list[str]:
    labels: list[str] = []
    for arc in ts.iter_postset_edges(state_id):
        if arc.label not in labels:
            labels.append(arc.label)
    return labels


def check_persistent(
    ts: TransitionSystem,
    interrupter: Interrupter | None = None,
) -> PersistenceResult:
    """Check that no enabled label is disabled by firing another one."""
    for state in ts.states:
        throw_if_interrupt_requested(interrupter)
        enabled = _enabled_labels(ts, state.id)
        if len(enabled) < 2:
            continue
        for arc in ts.iter_postset_edges(state.id):
            after = set(_enabled_labels(ts, arc.target_id))
            for other in enabled:
                if other != arc.label and other not in after:
                    return PersistenceResult(False, state, arc.label, other, ts)
    return PersistenceResult(True, ts=ts)


def check_persistent_net(
    net: PetriNet,
    interrupter: Interrupter | None = None,
) -> PersistenceResult:
    """Check persistence of a bounded net on its reachability graph.

    Raises:
        UnboundedError: If the net is unbounded
    """
    with interrupter_scope(interrupter):
        lts = CoverabilityGraph.get(net).to_reachability_lts()
    return check_persistent(lts, interrupter)


__all__ = [
    "LivenessResult",
    "ReversibilityResult",
    "PersistenceResult",
    "check_liveness",
    "check_reversible",
    "check_persistent",
    "check_persistent_net",
]
