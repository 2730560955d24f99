"""Labeled transition systems and Parikh vectors.

A transition system is a directed graph of states with labeled arcs and a
designated initial state. Several arcs may connect the same pair of states
as long as their labels differ, so arcs are keyed by
``(source_id, target_id, label)``.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from petricraft.adt.extension import clone_with_policy
from petricraft.adt.graph import Edge, EdgeKey, Graph, Node
from petricraft.exceptions import StructureError

logger = logging.getLogger(__name__)

# =============================================================================
# Parikh vectors
# =============================================================================


class ParikhVector:
    """Multiset of labels: how often each label occurs in a sequence.

    Labels with count zero are not stored, so two vectors over different
    alphabets compare equal when they agree on every non-zero count.
    """

    __slots__ = ("_counts",)

    def __init__(self, counts: Mapping[str, int] | None = None):
        self._counts: dict[str, int] = {}
        for label, count in (counts or {}).items():
            if count < 0:
                raise ValueError(f"Parikh vector count must be non-negative, got {label}={count}")
            if count:
                self._counts[label] = count

    @classmethod
    def from_sequence(cls, labels: Iterable[str]) -> ParikhVector:
        """Count the labels of a sequence."""
        counts: dict[str, int] = {}
        for label in labels:
            counts[label] = counts.get(label, 0) + 1
        return cls(counts)

    def get(self, label: str) -> int:
        return self._counts.get(label, 0)

    def __getitem__(self, label: str) -> int:
        return self._counts.get(label, 0)

    def items(self) -> Iterator[tuple[str, int]]:
        """(label, count) pairs with non-zero count, sorted by label."""
        return iter(sorted(self._counts.items()))

    @property
    def support(self) -> frozenset[str]:
        """Labels occurring at least once."""
        return frozenset(self._counts)

    def total(self) -> int:
        """Length of every sequence with this Parikh vector."""
        return sum(self._counts.values())

    def __add__(self, other: ParikhVector) -> ParikhVector:
        counts = dict(self._counts)
        for label, count in other._counts.items():
            counts[label] = counts.get(label, 0) + count
        return ParikhVector(counts)

    def compare(self, other: ParikhVector) -> int | None:
        """Componentwise partial order.

        Returns:
            -1 if this vector is smaller, 0 if equal, 1 if greater,
            ``None`` if the vectors are incomparable
        """
        smaller = greater = False
        for label in self._counts.keys() | other._counts.keys():
            mine, theirs = self.get(label), other.get(label)
            if mine < theirs:
                smaller = True
            elif mine > theirs:
                greater = True
            if smaller and greater:
                return None
        if smaller:
            return -1
        if greater:
            return 1
        return 0

    def less_than(self, other: ParikhVector) -> bool:
        """True iff no count exceeds ``other``'s and the vectors differ."""
        return self.compare(other) == -1

    def is_mutually_disjoint(self, other: ParikhVector) -> bool:
        """True iff no label occurs in both vectors."""
        return not (self._counts.keys() & other._counts.keys())

    def same_or_mutually_disjoint(self, other: ParikhVector) -> bool:
        return self == other or self.is_mutually_disjoint(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParikhVector):
            return NotImplemented
        return self._counts == other._counts

    def __hash__(self) -> int:
        return hash(frozenset(self._counts.items()))

    def __repr__(self) -> str:
        return f"ParikhVector({dict(self.items())})"

    def __str__(self) -> str:
        return "{" + ", ".join(f"{label}={count}" for label, count in self.items()) + "}"


# =============================================================================
# States and arcs
# =============================================================================


class State(Node):
    """A state of a transition system."""

    @property
    def is_initial(self) -> bool:
        ts = self.graph
        return ts._initial_id == self.id

    def get_postset_edges_by_label(self, label: str) -> set[Arc]:
        return {a for a in self.graph.iter_postset_edges(self.id) if a.label == label}

    def get_postset_nodes_by_label(self, label: str) -> set[State]:
        return {a.target for a in self.get_postset_edges_by_label(label)}

    def get_preset_edges_by_label(self, label: str) -> set[Arc]:
        return {a for a in self.graph.iter_preset_edges(self.id) if a.label == label}

    def get_preset_nodes_by_label(self, label: str) -> set[State]:
        return {a.source for a in self.get_preset_edges_by_label(label)}


class Arc(Edge):
    """A labeled arc between two states."""

    def __init__(self, ts: TransitionSystem, source_id: str, target_id: str, label: str):
        super().__init__(ts, source_id, target_id)
        self._label = label

    @property
    def label(self) -> str:
        return self._label

    @property
    def key(self) -> EdgeKey:
        return (self.source_id, self.target_id, self._label)

    def __repr__(self) -> str:
        return f"Arc({self.source_id!r} --{self._label}--> {self.target_id!r})"


# =============================================================================
# Transition system
# =============================================================================


class TransitionSystem(Graph[State, Arc]):
    """Labeled transition system (S, Σ, →, s₀)."""

    def __init__(self, name: str = ""):
        super().__init__(name)
        self._initial_id: str | None = None
        self._label_counts: dict[str, int] = {}

    @staticmethod
    def _id_of(state: str | State) -> str:
        return state if isinstance(state, str) else state.id

    # ── states ─────────────────────────────────────────────────────────

    def create_state(self, state_id: str | None = None) -> State:
        """Add a state; an id is generated when none is given.

        Raises:
            NodeExistsError: If the id is already used
        """
        if state_id is None:
            state_id = self._next_id("s")
        return self._add_node(State(self, state_id))

    def create_states(self, *state_ids: str) -> list[State]:
        return [self.create_state(sid) for sid in state_ids]

    def get_state(self, state_id: str) -> State:
        return self.get_node(state_id)

    @property
    def states(self) -> list[State]:
        return self.nodes

    def remove_node(self, node_id: str) -> None:
        super().remove_node(node_id)
        if self._initial_id == node_id:
            self._initial_id = None

    def remove_state(self, state: str | State) -> None:
        self.remove_node(self._id_of(state))

    def get_state_by_extension(self, key: str, value: Any) -> State:
        """First state whose extension ``key`` equals ``value``.

        Raises:
            StructureError: If no such state exists
        """
        for state in self._nodes.values():
            if state.has_extension(key) and state.get_extension(key) == value:
                return state
        raise StructureError(f"No state with extension {key}={value!r} in '{self.name}'")

    # ── initial state ──────────────────────────────────────────────────

    @property
    def initial_state(self) -> State:
        """The initial state.

        Raises:
            StructureError: If no initial state was set
        """
        if self._initial_id is None:
            raise StructureError(f"Transition system '{self.name}' has no initial state")
        return self._nodes[self._initial_id]

    def has_initial_state(self) -> bool:
        return self._initial_id is not None

    def set_initial_state(self, state: str | State) -> None:
        """Mark ``state`` as the initial state.

        Raises:
            StructureError: If the state belongs to another transition system
            NoSuchNodeError: If no state with this id exists
        """
        if isinstance(state, State) and state.graph is not self:
            raise StructureError(
                f"State '{state.id}' does not belong to transition system '{self.name}'"
            )
        self._initial_id = self.get_node(self._id_of(state)).id
        self._touch()

    # ── arcs ───────────────────────────────────────────────────────────

    def create_arc(self, source: str | State, target: str | State, label: str) -> Arc:
        """Add a labeled arc.

        Raises:
            NoSuchNodeError: If an endpoint does not exist
            EdgeExistsError: If an arc with the same endpoints and label exists
        """
        arc = self._add_edge(Arc(self, self._id_of(source), self._id_of(target), label))
        self._label_counts[label] = self._label_counts.get(label, 0) + 1
        return arc

    def get_arc(self, source: str | State, target: str | State, label: str) -> Arc:
        return self.get_edge(self._id_of(source), self._id_of(target), label)

    def contains_arc(self, source: str | State, target: str | State, label: str) -> bool:
        return self.contains_edge(self._id_of(source), self._id_of(target), label)

    @property
    def arcs(self) -> list[Arc]:
        return self.edges

    def _remove_edge(self, key: EdgeKey) -> None:
        super()._remove_edge(key)
        label = str(key[2])
        self._label_counts[label] -= 1
        if not self._label_counts[label]:
            del self._label_counts[label]

    def remove_arc(self, source: str | State, target: str | State, label: str) -> None:
        self._remove_edge((self._id_of(source), self._id_of(target), label))

    @property
    def alphabet(self) -> frozenset[str]:
        """Labels occurring on at least one arc."""
        return frozenset(self._label_counts)

    # ── queries ────────────────────────────────────────────────────────

    def find_nondeterminism(self) -> tuple[State, str] | None:
        """A (state, label) pair with more than one successor, or ``None``."""
        for state in self._nodes.values():
            seen: set[str] = set()
            for arc in self.iter_postset_edges(state.id):
                if arc.label in seen:
                    return state, arc.label
                seen.add(arc.label)
        return None

    def is_deterministic(self) -> bool:
        return self.find_nondeterminism() is None

    def reachable_states(self, start: str | State | None = None) -> list[State]:
        """States reachable from ``start`` (default: initial state), in BFS order."""
        origin = self.initial_state if start is None else self.get_node(self._id_of(start))
        seen = {origin.id}
        order = [origin]
        queue = deque([origin.id])
        while queue:
            current = queue.popleft()
            for arc in self.iter_postset_edges(current):
                if arc.target_id not in seen:
                    seen.add(arc.target_id)
                    order.append(self._nodes[arc.target_id])
                    queue.append(arc.target_id)
        return order

    def parikh_vector(self, labels: Iterable[str]) -> ParikhVector:
        """Parikh vector of a label sequence over this system's alphabet.

        Raises:
            StructureError: If a label does not occur in the alphabet
        """
        labels = list(labels)
        unknown = set(labels) - self.alphabet
        if unknown:
            raise StructureError(f"Labels {sorted(unknown)} are not in the alphabet of '{self.name}'")
        return ParikhVector.from_sequence(labels)

    def copy(self, name: str | None = None) -> TransitionSystem:
        """Structural copy; extensions follow their copy policy."""
        result = TransitionSystem(self.name if name is None else name)
        clone_with_policy(self, result)
        for state in self._nodes.values():
            clone_with_policy(state, result.create_state(state.id))
        for arc in self._edges.values():
            clone_with_policy(arc, result.create_arc(arc.source_id, arc.target_id, arc.label))
        if self._initial_id is not None:
            result.set_initial_state(self._initial_id)
        return result


__all__ = [
    "ParikhVector",
    "State",
    "Arc",
    "TransitionSystem",
]
