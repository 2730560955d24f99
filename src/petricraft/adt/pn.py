"""Place/transition Petri nets with weighted flows.

A Petri net is a bipartite graph of places and transitions. Flows connect
a place with a transition (never two nodes of the same kind) and carry an
integer weight. A marking assigns tokens to places; a transition is
enabled if every input place holds at least the weight of its flow, and
firing it moves tokens from the preset to the postset.

Markings may contain the OMEGA token, standing for "arbitrarily many",
which is what the coverability graph construction introduces.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterator, Mapping
from typing import Union

import numpy as np

from petricraft.adt.extension import clone_with_policy
from petricraft.adt.graph import Edge, Graph, Node
from petricraft.exceptions import (
    IllegalFlowError,
    NoSuchNodeError,
    StructureError,
    TransitionNotEnabledError,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Tokens
# =============================================================================


@functools.total_ordering
class Token:
    """Token count of a single place: a natural number or OMEGA.

    OMEGA absorbs additions and subtractions and is greater than every
    natural number. Tokens compare and hash like plain ints when finite.
    """

    __slots__ = ("_value",)

    _OMEGA_VALUE = -1

    def __init__(self, value: int = 0):
        if value < 0:
            raise ValueError(f"Token count must be non-negative, got {value}")
        self._value = value

    @classmethod
    def _make_omega(cls) -> Token:
        token = object.__new__(cls)
        token._value = cls._OMEGA_VALUE
        return token

    @classmethod
    def of(cls, value: int | Token) -> Token:
        """Coerce an int (or token) into a token."""
        if isinstance(value, Token):
            return value
        if value == 0:
            return ZERO
        return cls(value)

    @property
    def is_omega(self) -> bool:
        return self._value == self._OMEGA_VALUE

    @property
    def value(self) -> int:
        """The finite token count.

        Raises:
            ValueError: If this token is OMEGA
        """
        if self.is_omega:
            raise ValueError("OMEGA has no finite token count")
        return self._value

    def add(self, delta: int | Token) -> Token:
        """Return this token plus ``delta`` (OMEGA stays OMEGA).

        Raises:
            ValueError: If the result would be negative
        """
        if self.is_omega:
            return self
        if isinstance(delta, Token):
            if delta.is_omega:
                return OMEGA
            delta = delta._value
        result = self._value + delta
        if result < 0:
            raise ValueError(f"Token count would become negative: {self._value} + {delta}")
        return Token.of(result)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Token):
            return self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return not self.is_omega and self._value == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, Token):
            if self.is_omega:
                return False
            return other.is_omega or self._value < other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return not self.is_omega and self._value < other
        return NotImplemented

    def __hash__(self) -> int:
        if self.is_omega:
            return hash(float("inf"))
        return hash(self._value)

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return "OMEGA" if self.is_omega else f"Token({self._value})"

    def __str__(self) -> str:
        return "ω" if self.is_omega else str(self._value)


OMEGA = Token._make_omega()
ZERO = Token(0)


# =============================================================================
# Nodes and flows
# =============================================================================


class Place(Node):
    """A place; holds the number of tokens it carries initially."""

    def __init__(self, net: PetriNet, place_id: str, initial_tokens: int = 0):
        super().__init__(net, place_id)
        self._initial_token = Token.of(initial_tokens)
        if self._initial_token.is_omega:
            raise ValueError("The initial marking cannot contain OMEGA")

    @property
    def initial_token(self) -> Token:
        return self._initial_token

    @initial_token.setter
    def initial_token(self, value: int | Token) -> None:
        token = Token.of(value)
        if token.is_omega:
            raise ValueError("The initial marking cannot contain OMEGA")
        self._initial_token = token
        self.graph._touch()


class Transition(Node):
    """A transition with a label (defaults to its id)."""

    def __init__(self, net: PetriNet, transition_id: str, label: str | None = None):
        super().__init__(net, transition_id)
        self._label = label if label is not None else transition_id

    @property
    def label(self) -> str:
        return self._label

    @label.setter
    def label(self, value: str) -> None:
        self._label = value
        self.graph._touch()

    def consumption(self) -> dict[str, int]:
        """Place id -> weight of every flow into this transition."""
        return {f.source_id: f.weight for f in self.graph.iter_preset_edges(self.id)}

    def production(self) -> dict[str, int]:
        """Place id -> weight of every flow out of this transition."""
        return {f.target_id: f.weight for f in self.graph.iter_postset_edges(self.id)}

    def is_fireable(self, marking: Marking) -> bool:
        return marking.is_enabled(self)

    def fire(self, marking: Marking) -> Marking:
        return marking.fire(self)


class Flow(Edge):
    """Weighted arc between a place and a transition."""

    def __init__(self, net: PetriNet, source_id: str, target_id: str, weight: int = 1):
        super().__init__(net, source_id, target_id)
        if weight < 1:
            raise ValueError(f"Flow weight must be at least 1, got {weight}")
        self._weight = weight

    @property
    def weight(self) -> int:
        return self._weight

    @weight.setter
    def weight(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"Flow weight must be at least 1, got {value}")
        self._weight = value
        self.graph._touch()

    def __repr__(self) -> str:
        return f"Flow({self.source_id!r} -> {self.target_id!r}, weight={self._weight})"


PNNode = Union[Place, Transition]


# =============================================================================
# Markings
# =============================================================================


class Marking:
    """Immutable assignment of tokens to the places of one net.

    Places that are not mentioned carry zero tokens. Every operation that
    changes tokens returns a new marking.
    """

    __slots__ = ("_net", "_tokens")

    def __init__(self, net: PetriNet, tokens: Mapping[str, int | Token] | None = None):
        self._net = net
        self._tokens: dict[str, Token] = {}
        for place_id, value in (tokens or {}).items():
            net.get_place(place_id)
            token = Token.of(value)
            if token != 0:
                self._tokens[place_id] = token

    @classmethod
    def _unchecked(cls, net: PetriNet, tokens: dict[str, Token]) -> Marking:
        marking = object.__new__(cls)
        marking._net = net
        marking._tokens = {p: t for p, t in tokens.items() if t != 0}
        return marking

    @property
    def net(self) -> PetriNet:
        return self._net

    # ── token access ───────────────────────────────────────────────────

    def get_token(self, place: str | Place) -> Token:
        """Tokens on ``place``.

        Raises:
            NoSuchNodeError: If the place is not part of this marking's net
        """
        place_id = self._net.get_place(place if isinstance(place, str) else place.id).id
        return self._tokens.get(place_id, ZERO)

    def __getitem__(self, place: str | Place) -> Token:
        return self.get_token(place)

    def items(self) -> Iterator[tuple[str, Token]]:
        """(place id, token) for every place of the net, in net order."""
        for place in self._net.places:
            yield place.id, self._tokens.get(place.id, ZERO)

    def support(self) -> frozenset[str]:
        """Ids of places carrying at least one token (or OMEGA)."""
        return frozenset(self._tokens)

    def has_omega(self) -> bool:
        return any(t.is_omega for t in self._tokens.values())

    def omega_places(self) -> list[str]:
        """Ids of places marked OMEGA, in net order."""
        return [p for p, t in self.items() if t.is_omega]

    def set_token_count(self, place: str | Place, value: int | Token) -> Marking:
        """Copy of this marking with ``value`` tokens on ``place``."""
        place_id = self._place_id(place)
        tokens = dict(self._tokens)
        tokens[place_id] = Token.of(value)
        return Marking._unchecked(self._net, tokens)

    def add_token_count(self, place: str | Place, delta: int | Token) -> Marking:
        """Copy of this marking with ``delta`` tokens added to ``place``.

        Raises:
            ValueError: If the place would end up with a negative count
        """
        place_id = self._place_id(place)
        tokens = dict(self._tokens)
        tokens[place_id] = tokens.get(place_id, ZERO).add(delta)
        return Marking._unchecked(self._net, tokens)

    def _place_id(self, place: str | Place) -> str:
        return self._net.get_place(place if isinstance(place, str) else place.id).id

    # ── firing rule ────────────────────────────────────────────────────

    def is_enabled(self, transition: str | Transition) -> bool:
        """True iff every input place holds at least the flow weight."""
        t = self._net._as_transition(transition)
        return all(self._tokens.get(p, ZERO) >= w for p, w in t.consumption().items())

    def fire(self, transition: str | Transition) -> Marking:
        """Fire ``transition``: subtract preset weights, add postset weights.

        A place in both preset and postset (side condition) is handled by
        applying both weights to the same place.

        Raises:
            TransitionNotEnabledError: If the transition is not enabled
        """
        t = self._net._as_transition(transition)
        consumption = t.consumption()
        if not all(self._tokens.get(p, ZERO) >= w for p, w in consumption.items()):
            raise TransitionNotEnabledError(self, t)
        tokens = dict(self._tokens)
        for place_id, weight in consumption.items():
            tokens[place_id] = tokens.get(place_id, ZERO).add(-weight)
        for place_id, weight in t.production().items():
            tokens[place_id] = tokens.get(place_id, ZERO).add(weight)
        return Marking._unchecked(self._net, tokens)

    def is_reverse_enabled(self, transition: str | Transition) -> bool:
        """True iff ``transition`` can be fired backwards from this marking."""
        t = self._net._as_transition(transition)
        return all(self._tokens.get(p, ZERO) >= w for p, w in t.production().items())

    def fire_reverse(self, transition: str | Transition) -> Marking:
        """Undo a firing of ``transition``: subtract postset, add preset weights.

        Raises:
            TransitionNotEnabledError: If the postset lacks the needed tokens
        """
        t = self._net._as_transition(transition)
        production = t.production()
        if not all(self._tokens.get(p, ZERO) >= w for p, w in production.items()):
            raise TransitionNotEnabledError(self, t)
        tokens = dict(self._tokens)
        for place_id, weight in production.items():
            tokens[place_id] = tokens.get(place_id, ZERO).add(-weight)
        for place_id, weight in t.consumption().items():
            tokens[place_id] = tokens.get(place_id, ZERO).add(weight)
        return Marking._unchecked(self._net, tokens)

    def fire_transitions(self, *transitions: str | Transition) -> Marking:
        """Fire a sequence left to right; the first disabled transition raises."""
        result = self
        for t in transitions:
            result = result.fire(t)
        return result

    # ── domination ─────────────────────────────────────────────────────

    def covers(self, other: Marking) -> bool:
        """True iff this marking has at least as many tokens everywhere."""
        return all(self._tokens.get(p, ZERO) >= t for p, t in other._tokens.items())

    def cover(self, other: Marking) -> Marking | None:
        """Accelerate this marking against a dominated ``other``.

        Returns:
            A copy with OMEGA on every finite place where this marking has
            more tokens than ``other``, provided this marking covers
            ``other`` and at least one finite place grew. ``None``
            otherwise, also when the only strict growth is on places that
            are already OMEGA.
        """
        if not self.covers(other):
            return None
        grown = [
            p
            for p, t in self._tokens.items()
            if not t.is_omega and t > other._tokens.get(p, ZERO)
        ]
        if not grown:
            return None
        tokens = dict(self._tokens)
        for place_id in grown:
            tokens[place_id] = OMEGA
        return Marking._unchecked(self._net, tokens)

    # ── value semantics ────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Token]:
        """Place id -> token for every place of the net."""
        return dict(self.items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Marking):
            return NotImplemented
        return self._net is other._net and self._tokens == other._tokens

    def __hash__(self) -> int:
        return hash(frozenset(self._tokens.items()))

    def __repr__(self) -> str:
        return f"Marking({self})"

    def __str__(self) -> str:
        return "{" + ", ".join(f"{p}={t}" for p, t in self.items()) + "}"


# =============================================================================
# Petri net
# =============================================================================


class PetriNet(Graph[PNNode, Flow]):
    """A place/transition net with weighted flows and an initial marking."""

    def __init__(self, name: str = ""):
        super().__init__(name)

    # ── helpers ────────────────────────────────────────────────────────

    @staticmethod
    def _id_of(node: str | Node) -> str:
        return node if isinstance(node, str) else node.id

    def _as_transition(self, transition: str | Transition) -> Transition:
        if isinstance(transition, Transition):
            if transition.graph is not self:
                raise StructureError(
                    f"Transition {transition.id} does not belong to net '{self.name}'"
                )
            return transition
        return self.get_transition(self._id_of(transition))

    # ── places ─────────────────────────────────────────────────────────

    def create_place(self, place_id: str | None = None, initial_tokens: int = 0) -> Place:
        """Add a place; an id is generated when none is given.

        Raises:
            NodeExistsError: If the id is already used
        """
        if place_id is None:
            place_id = self._next_id("p")
        return self._add_node(Place(self, place_id, initial_tokens))

    def create_places(self, *place_ids: str) -> list[Place]:
        return [self.create_place(pid) for pid in place_ids]

    def get_place(self, place_id: str) -> Place:
        """Return the place with the given id.

        Raises:
            NoSuchNodeError: If there is no place with this id
        """
        node = self._nodes.get(place_id)
        if not isinstance(node, Place):
            raise NoSuchNodeError(self.name, place_id)
        return node

    def contains_place(self, place_id: str) -> bool:
        return isinstance(self._nodes.get(place_id), Place)

    @property
    def places(self) -> list[Place]:
        return [n for n in self._nodes.values() if isinstance(n, Place)]

    def remove_place(self, place: str | Place) -> None:
        self.remove_node(self.get_place(self._id_of(place)).id)

    # ── transitions ────────────────────────────────────────────────────

    def create_transition(
        self,
        transition_id: str | None = None,
        label: str | None = None,
    ) -> Transition:
        """Add a transition; an id is generated when none is given.

        Raises:
            NodeExistsError: If the id is already used
        """
        if transition_id is None:
            transition_id = self._next_id("t")
        return self._add_node(Transition(self, transition_id, label))

    def create_transitions(self, *transition_ids: str) -> list[Transition]:
        return [self.create_transition(tid) for tid in transition_ids]

    def get_transition(self, transition_id: str) -> Transition:
        """Return the transition with the given id.

        Raises:
            NoSuchNodeError: If there is no transition with this id
        """
        node = self._nodes.get(transition_id)
        if not isinstance(node, Transition):
            raise NoSuchNodeError(self.name, transition_id)
        return node

    def contains_transition(self, transition_id: str) -> bool:
        return isinstance(self._nodes.get(transition_id), Transition)

    @property
    def transitions(self) -> list[Transition]:
        return [n for n in self._nodes.values() if isinstance(n, Transition)]

    def remove_transition(self, transition: str | Transition) -> None:
        self.remove_node(self.get_transition(self._id_of(transition)).id)

    # ── flows ──────────────────────────────────────────────────────────

    def create_flow(self, source: str | Node, target: str | Node, weight: int = 1) -> Flow:
        """Connect a place and a transition.

        Raises:
            NoSuchNodeError: If an endpoint does not exist
            IllegalFlowError: If both endpoints are of the same kind
            EdgeExistsError: If the flow already exists
            ValueError: If ``weight`` is smaller than 1
        """
        source_id, target_id = self._id_of(source), self._id_of(target)
        source_node = self.get_node(source_id)
        target_node = self.get_node(target_id)
        if isinstance(source_node, Place) == isinstance(target_node, Place):
            raise IllegalFlowError(self.name, source_id, target_id)
        return self._add_edge(Flow(self, source_id, target_id, weight))

    def get_flow(self, source: str | Node, target: str | Node) -> Flow:
        return self.get_edge(self._id_of(source), self._id_of(target))

    def contains_flow(self, source: str | Node, target: str | Node) -> bool:
        return self.contains_edge(self._id_of(source), self._id_of(target))

    @property
    def flows(self) -> list[Flow]:
        return self.edges

    def remove_flow(self, source: str | Node, target: str | Node) -> None:
        self._remove_edge((self._id_of(source), self._id_of(target)))

    # ── markings ───────────────────────────────────────────────────────

    @property
    def initial_marking(self) -> Marking:
        return Marking._unchecked(self, {p.id: p.initial_token for p in self.places})

    def set_initial_marking(self, marking: Marking | Mapping[str, int]) -> None:
        """Replace the initial marking; unmentioned places get zero tokens.

        Raises:
            StructureError: If a marking of another net is given
            ValueError: If the marking contains OMEGA
        """
        if isinstance(marking, Marking):
            if marking.net is not self:
                raise StructureError(f"Marking belongs to a different net than '{self.name}'")
        else:
            marking = Marking(self, marking)
        if marking.has_omega():
            raise ValueError("The initial marking cannot contain OMEGA")
        for place_id, token in marking.items():
            self.get_place(place_id).initial_token = token
        logger.debug(f"Set initial marking of '{self.name}' to {marking}")

    def marking(self, tokens: Mapping[str, int | Token] | None = None) -> Marking:
        """Create a marking of this net."""
        return Marking(self, tokens)

    # ── derived structures ─────────────────────────────────────────────

    def incidence_matrix(self) -> np.ndarray:
        """Incidence matrix C with C[p, t] = W(t, p) - W(p, t).

        Rows follow :attr:`places`, columns follow :attr:`transitions`.
        """
        places = {p.id: i for i, p in enumerate(self.places)}
        transitions = {t.id: j for j, t in enumerate(self.transitions)}
        matrix = np.zeros((len(places), len(transitions)), dtype=np.int64)
        for flow in self._edges.values():
            if flow.source_id in places:
                matrix[places[flow.source_id], transitions[flow.target_id]] -= flow.weight
            else:
                matrix[places[flow.target_id], transitions[flow.source_id]] += flow.weight
        return matrix

    def copy(self, name: str | None = None) -> PetriNet:
        """Structural copy; extensions follow their copy policy."""
        result = PetriNet(self.name if name is None else name)
        clone_with_policy(self, result)
        for node in self._nodes.values():
            if isinstance(node, Place):
                copied: PNNode = result.create_place(node.id, node.initial_token.value)
            else:
                copied = result.create_transition(node.id, node.label)
            clone_with_policy(node, copied)
        for flow in self._edges.values():
            clone_with_policy(flow, result.create_flow(flow.source_id, flow.target_id, flow.weight))
        return result

    def reversed(self, name: str | None = None) -> PetriNet:
        """Copy of this net with the direction of every flow swapped."""
        result = PetriNet(f"reverse of {self.name}" if name is None else name)
        for node in self._nodes.values():
            if isinstance(node, Place):
                result.create_place(node.id, node.initial_token.value)
            else:
                result.create_transition(node.id, node.label)
        for flow in self._edges.values():
            result.create_flow(flow.target_id, flow.source_id, flow.weight)
        return result


__all__ = [
    "Token",
    "OMEGA",
    "ZERO",
    "Place",
    "Transition",
    "Flow",
    "PNNode",
    "Marking",
    "PetriNet",
]
