"""Cycles of transition systems and their Parikh vectors.

Several properties of a transition system can be phrased over its cycles:
for example, whether all small cycles have the same Parikh vector, or
whether any two of them are either equal or share no label. This module
enumerates elementary cycles and compares their Parikh vectors.

A cycle is *smallest* if no other cycle of the system has a strictly
smaller Parikh vector. Cycles with equal Parikh vectors are all kept.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

from petricraft.adt.ts import ParikhVector, TransitionSystem
from petricraft.interrupt import Interrupter, throw_if_interrupt_requested

logger = logging.getLogger(__name__)

# =============================================================================
# Types
# =============================================================================


class CycleSearchMode(Enum):
    """Which part of a transition system to search for cycles."""

    ALL = auto()
    FROM_INITIAL = auto()


@dataclass(frozen=True)
class Cycle:
    """An elementary cycle.

    Attributes:
        states: Ids of the visited states, starting at the state that comes
            first in the system's insertion order
        labels: Arc labels; ``labels[i]`` leads from ``states[i]`` to the
            next state (wrapping around)
        parikh_vector: Parikh vector of ``labels``
    """

    states: tuple[str, ...]
    labels: tuple[str, ...]
    parikh_vector: ParikhVector

    def __len__(self) -> int:
        return len(self.labels)

    def sort_key(self) -> tuple[tuple[str, ...], tuple[str, ...]]:
        return self.labels, self.states


@dataclass(frozen=True)
class CycleCounterExample:
    """Two cycles violating a Parikh vector property."""

    first: Cycle
    second: Cycle


@dataclass
class CycleCheckResult:
    """Outcome of a pairwise Parikh vector check; truthy iff the property holds."""

    holds: bool
    counter_example: CycleCounterExample | None = None
    cycles: list[Cycle] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.holds

    def summary(self) -> str:
        if self.holds:
            return f"Property holds for {len(self.cycles)} cycles"
        assert self.counter_example is not None
        first, second = self.counter_example.first, self.counter_example.second
        return (
            f"Cycles {list(first.labels)} ({first.parikh_vector}) and "
            f"{list(second.labels)} ({second.parikh_vector}) violate the property"
        )


# =============================================================================
# Enumeration
# =============================================================================


def search_cycles(
    ts: TransitionSystem,
    mode: CycleSearchMode = CycleSearchMode.ALL,
    interrupter: Interrupter | None = None,
) -> Iterator[Cycle]:
    """Enumerate the elementary cycles of ``ts``.

    Each cycle is reported once, rooted at its state with the lowest
    insertion index: the search from a root only enters states that come
    later in insertion order.

    Args:
        ts: Transition system to search
        mode: Search the whole system, or only states reachable from the
            initial state
        interrupter: Optional interrupter polled for every explored arc
    """
    if mode is CycleSearchMode.FROM_INITIAL:
        allowed = {s.id for s in ts.reachable_states()}
    else:
        allowed = {s.id for s in ts.states}
    rank = {s.id: i for i, s in enumerate(ts.states) if s.id in allowed}

    for root, root_rank in rank.items():
        path = [root]
        labels: list[str] = []
        on_path = {root}
        stack = [iter(ts.iter_postset_edges(root))]
        while stack:
            throw_if_interrupt_requested(interrupter)
            arc = next(stack[-1], None)
            if arc is None:
                stack.pop()
                on_path.discard(path.pop())
                if labels:
                    labels.pop()
                continue
            target = arc.target_id
            if target == root:
                cycle_labels = (*labels, arc.label)
                yield Cycle(tuple(path), cycle_labels, ParikhVector.from_sequence(cycle_labels))
            elif rank.get(target, -1) > root_rank and target not in on_path:
                path.append(target)
                labels.append(arc.label)
                on_path.add(target)
                stack.append(iter(ts.iter_postset_edges(target)))


def compute_smallest_cycles(
    ts: TransitionSystem,
    smallest: bool = True,
    mode: CycleSearchMode = CycleSearchMode.ALL,
    interrupter: Interrupter | None = None,
) -> frozenset[Cycle]:
    """Cycles of ``ts``, optionally reduced to those with minimal Parikh vectors.

    Args:
        ts: Transition system to search
        smallest: If True, drop every cycle for which another cycle has a
            strictly smaller Parikh vector
        mode: See :func:`search_cycles`
        interrupter: Optional interrupter
    """
    cycles = set(search_cycles(ts, mode, interrupter))
    if smallest:
        vectors = {c.parikh_vector for c in cycles}
        minimal = {
            pv for pv in vectors if not any(other.less_than(pv) for other in vectors)
        }
        cycles = {c for c in cycles if c.parikh_vector in minimal}
    logger.debug(f"Found {len(cycles)} {'smallest ' if smallest else ''}cycles in '{ts.name}'")
    return frozenset(cycles)


# =============================================================================
# Parikh vector checks
# =============================================================================


def _check_pairs(
    cycles: frozenset[Cycle],
    compatible: Callable[[ParikhVector, ParikhVector], bool],
) -> CycleCheckResult:
    ordered = sorted(cycles, key=Cycle.sort_key)
    for i, first in enumerate(ordered):
        for second in ordered[i + 1 :]:
            if not compatible(first.parikh_vector, second.parikh_vector):
                return CycleCheckResult(
                    holds=False,
                    counter_example=CycleCounterExample(first, second),
                    cycles=ordered,
                )
    return CycleCheckResult(holds=True, cycles=ordered)


def check_same_pvs(
    ts: TransitionSystem,
    smallest: bool = True,
    mode: CycleSearchMode = CycleSearchMode.ALL,
    interrupter: Interrupter | None = None,
) -> CycleCheckResult:
    """Check that all (smallest) cycles share one Parikh vector."""
    cycles = compute_smallest_cycles(ts, smallest, mode, interrupter)
    return _check_pairs(cycles, lambda a, b: a == b)


def check_same_or_mutually_disjoint_pvs(
    ts: TransitionSystem,
    smallest: bool = True,
    mode: CycleSearchMode = CycleSearchMode.ALL,
    interrupter: Interrupter | None = None,
) -> CycleCheckResult:
    """Check that any two (smallest) cycles have equal or label-disjoint Parikh vectors."""
    cycles = compute_smallest_cycles(ts, smallest, mode, interrupter)
    return _check_pairs(cycles, ParikhVector.same_or_mutually_disjoint)


__all__ = [
    "CycleSearchMode",
    "Cycle",
    "CycleCounterExample",
    "CycleCheckResult",
    "search_cycles",
    "compute_smallest_cycles",
    "check_same_pvs",
    "check_same_or_mutually_disjoint_pvs",
]
