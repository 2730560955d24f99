"""Error taxonomy for graph construction and analysis.

Structural errors are raised while building a net or transition system and
mean the caller has to fix the input. Semantic errors carry enough context
(offending marking, transition, witness sequence) to be explained to a user.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from petricraft.adt.pn import Marking, PetriNet, Place, Transition


class PetriCraftError(Exception):
    """Base class for all petricraft errors."""


# =============================================================================
# Structural errors
# =============================================================================


class StructureError(PetriCraftError):
    """The structure of a graph does not allow the requested operation."""


class NodeExistsError(StructureError):
    """A node with the given id already exists in the graph."""

    def __init__(self, graph_name: str, node_id: str):
        super().__init__(f"Node '{node_id}' already exists in graph '{graph_name}'")
        self.graph_name = graph_name
        self.node_id = node_id


class NoSuchNodeError(StructureError):
    """The graph has no node with the given id."""

    def __init__(self, graph_name: str, node_id: str):
        super().__init__(f"Node '{node_id}' does not exist in graph '{graph_name}'")
        self.graph_name = graph_name
        self.node_id = node_id


class EdgeExistsError(StructureError):
    """An edge with the same key already exists in the graph."""

    def __init__(self, graph_name: str, key: tuple[str, ...]):
        super().__init__(f"Edge {key} already exists in graph '{graph_name}'")
        self.graph_name = graph_name
        self.key = key


class NoSuchEdgeError(StructureError):
    """The graph has no edge with the given key."""

    def __init__(self, graph_name: str, key: tuple[str, ...]):
        super().__init__(f"Edge {key} does not exist in graph '{graph_name}'")
        self.graph_name = graph_name
        self.key = key


class IllegalFlowError(StructureError):
    """A flow must connect a place with a transition."""

    def __init__(self, graph_name: str, source_id: str, target_id: str):
        super().__init__(
            f"Flow {source_id} -> {target_id} in net '{graph_name}' "
            "does not connect a place and a transition"
        )
        self.graph_name = graph_name
        self.source_id = source_id
        self.target_id = target_id


class NoSuchExtensionError(StructureError):
    """No extension is stored under the given key."""

    def __init__(self, key: str):
        super().__init__(f"Extension '{key}' not found")
        self.key = key


# =============================================================================
# Semantic errors
# =============================================================================


class TransitionNotEnabledError(PetriCraftError):
    """A transition was fired in a marking that does not enable it."""

    def __init__(self, marking: Marking, transition: Transition):
        super().__init__(f"Transition '{transition.id}' is not enabled in marking {marking}")
        self.marking = marking
        self.transition = transition


class UnboundedError(PetriCraftError):
    """The net is unbounded, so its reachability graph is infinite.

    Attributes:
        net: The unbounded Petri net
        place: A place that can carry arbitrarily many tokens
        sequence: Firing sequence from the initial marking to the start of the cycle
        cycle: Firing sequence that stays enabled forever after ``sequence``
            and strictly increases the token count on ``place``
    """

    def __init__(
        self,
        net: PetriNet,
        place: Place,
        sequence: list[Transition],
        cycle: list[Transition],
    ):
        super().__init__(f"Petri net '{net.name}' is unbounded (place '{place.id}')")
        self.net = net
        self.place = place
        self.sequence = sequence
        self.cycle = cycle

    def get_sequence_exceeding(self, bound: int) -> list[Transition]:
        """Build a firing sequence that puts more than ``bound`` tokens on ``place``."""
        marking = self.net.initial_marking
        result: list[Transition] = []
        if marking[self.place.id] > bound:
            return result
        marking = marking.fire_transitions(*self.sequence)
        result.extend(self.sequence)
        while not marking[self.place.id] > bound:
            marking = marking.fire_transitions(*self.cycle)
            result.extend(self.cycle)
        return result


class StateSpaceLimitError(PetriCraftError):
    """An exploration produced more nodes than its configured limit."""

    def __init__(self, limit: int, context: Any = None):
        super().__init__(f"State space exceeds limit of {limit} nodes")
        self.limit = limit
        self.context = context


# =============================================================================
# Cancellation
# =============================================================================


class ComputationInterrupted(RuntimeError):
    """The running computation was cancelled through an interrupter."""


__all__ = [
    "PetriCraftError",
    "StructureError",
    "NodeExistsError",
    "NoSuchNodeError",
    "EdgeExistsError",
    "NoSuchEdgeError",
    "IllegalFlowError",
    "NoSuchExtensionError",
    "TransitionNotEnabledError",
    "UnboundedError",
    "StateSpaceLimitError",
    "ComputationInterrupted",
]
