"""Coverability and reachability graphs of Petri nets.

The reachable markings of a Petri net form a graph whose arcs are labeled
with the fired transitions. For unbounded nets this graph is infinite. The
coverability graph (Karp-Miller construction) keeps it finite: whenever a
new marking strictly dominates a marking on its path back to the initial
marking, every place that grew is replaced by OMEGA ("arbitrarily many").

The result over-approximates reachability: every reachable marking is
dominated by some node, and a transition is fireable in some reachable
marking iff it labels an arc of the coverability graph.

Exploration is breadth-first so that firing sequences to nodes are short,
and lazy: nodes are generated on demand while iterating.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto

from petricraft.adt.extension import ExtensionProperty
from petricraft.adt.pn import OMEGA, Marking, PetriNet, Transition
from petricraft.adt.ts import TransitionSystem
from petricraft.exceptions import StateSpaceLimitError, UnboundedError
from petricraft.interrupt import Interrupter, throw_if_interrupt_requested

logger = logging.getLogger(__name__)

# Extension keys put on generated transition systems
PETRI_NET_EXTENSION = "petri_net"
MARKING_EXTENSION = "marking"
COVERABILITY_NODE_EXTENSION = "coverability_node"
TRANSITION_EXTENSION = "transition"

_CACHE_KEY = f"{__name__}.CoverabilityGraph"

# =============================================================================
# Nodes and edges
# =============================================================================


class ExplorationState(Enum):
    """Exploration progress of a single node."""

    UNEXPLORED = auto()
    EXPLORING = auto()
    DONE = auto()


@dataclass(frozen=True, eq=False)
class CoverabilityGraphEdge:
    """An arc of the coverability graph: source --transition--> target."""

    transition: Transition
    source: CoverabilityGraphNode
    target: CoverabilityGraphNode

    def __repr__(self) -> str:
        return f"{self.source.marking} --{self.transition.id}--> {self.target.marking}"


class CoverabilityGraphNode:
    """A node of the coverability graph, identified by its marking.

    Every node remembers the BFS-tree parent through which it was first
    reached and, if OMEGAs were introduced when creating it, the closest
    ancestor whose marking it strictly dominates.
    """

    def __init__(
        self,
        graph: CoverabilityGraph,
        transition: Transition | None,
        marking: Marking,
        parent: CoverabilityGraphNode | None,
        covered: CoverabilityGraphNode | None,
    ):
        self._graph = graph
        self._marking = marking
        self._reaching_transition = transition
        self._parent = parent
        self._covered = covered
        self._postset_edges: list[CoverabilityGraphEdge] | None = None
        self.exploration_state = ExplorationState.UNEXPLORED

    @property
    def marking(self) -> Marking:
        return self._marking

    @property
    def parent(self) -> CoverabilityGraphNode | None:
        """Parent on the BFS-tree path back to the initial node."""
        return self._parent

    @property
    def covered_node(self) -> CoverabilityGraphNode | None:
        """Closest ancestor whose marking this node's marking strictly dominates."""
        return self._covered

    @property
    def firing_sequence(self) -> list[Transition]:
        """Transitions fired from the initial marking to reach this node."""
        result: list[Transition] = []
        node: CoverabilityGraphNode | None = self
        while node is not None and node._reaching_transition is not None:
            result.append(node._reaching_transition)
            node = node._parent
        result.reverse()
        return result

    @property
    def firing_sequence_from_covered_node(self) -> list[Transition] | None:
        """Transitions leading from the covered node to this node, or ``None``.

        Fired repeatedly from the covered node's marking, this sequence keeps
        increasing the tokens on the places that became OMEGA here.
        """
        if self._covered is None:
            return None
        return self.firing_sequence[len(self._covered.firing_sequence) :]

    @property
    def postset_edges(self) -> list[CoverabilityGraphEdge]:
        """Outgoing edges; generated on first access."""
        if self._postset_edges is None:
            self._graph._expand(self)
        assert self._postset_edges is not None
        return self._postset_edges

    @property
    def postset_nodes(self) -> list[CoverabilityGraphNode]:
        result: list[CoverabilityGraphNode] = []
        for edge in self.postset_edges:
            if edge.target not in result:
                result.append(edge.target)
        return result

    def __repr__(self) -> str:
        return f"CoverabilityGraphNode({self._marking})"


# =============================================================================
# Graph
# =============================================================================


class CoverabilityGraph:
    """Coverability (or plain reachability) graph of a Petri net.

    Construction is cheap; nodes are generated when iterating or when
    :meth:`calculate_nodes` forces full exploration.

    Args:
        net: The Petri net to explore
        reachability: If True, never introduce OMEGAs (the graph is then
            infinite for unbounded nets)
        max_nodes: Optional limit on the number of generated nodes
        interrupter: Interrupter polled once per explored node; defaults to
            the one registered for the current thread
    """

    def __init__(
        self,
        net: PetriNet,
        reachability: bool = False,
        max_nodes: int | None = None,
        interrupter: Interrupter | None = None,
    ):
        self._net = net
        self._reachability = reachability
        self._max_nodes = max_nodes
        self._interrupter = interrupter
        self._transitions = net.transitions
        self._states: dict[Marking, CoverabilityGraphNode] = {}
        self._nodes: list[CoverabilityGraphNode] = []
        self._first_unvisited = 0
        self._get_node(None, net.initial_marking, None, None)

    @classmethod
    def get(cls, net: PetriNet) -> CoverabilityGraph:
        """Coverability graph of ``net``, reused while the net is unchanged.

        Cached graphs are shared between callers, so they poll the
        interrupter registered for the current thread; wrap the work in
        :func:`~petricraft.interrupt.interrupter_scope` to cancel it.
        """
        return cls._cached(net, reachability=False)

    @classmethod
    def get_reachability_graph(cls, net: PetriNet) -> CoverabilityGraph:
        """Reachability graph of ``net``, reused while the net is unchanged.

        Keep in mind that this graph is infinite for unbounded nets.
        """
        return cls._cached(net, reachability=True)

    @classmethod
    def _cached(cls, net: PetriNet, reachability: bool) -> CoverabilityGraph:
        key = _CACHE_KEY + ("-reachability" if reachability else "")
        if net.has_extension(key):
            revision, graph = net.get_extension(key)
            if revision == net.revision:
                return graph
        graph = cls(net, reachability=reachability)
        net.put_extension(key, (net.revision, graph), ExtensionProperty.NOCOPY)
        return graph

    @property
    def net(self) -> PetriNet:
        return self._net

    @property
    def is_reachability_graph(self) -> bool:
        return self._reachability

    @property
    def initial_node(self) -> CoverabilityGraphNode:
        return self._nodes[0]

    # ── exploration ────────────────────────────────────────────────────

    def calculate_nodes(self) -> int:
        """Explore the whole graph.

        Returns:
            Number of nodes in the graph
        """
        while self._visit_node():
            pass
        logger.debug(
            f"{'Reachability' if self._reachability else 'Coverability'} graph of "
            f"'{self._net.name}' has {len(self._nodes)} nodes"
        )
        return len(self._nodes)

    def _visit_node(self) -> bool:
        throw_if_interrupt_requested(self._interrupter)
        if self._first_unvisited >= len(self._nodes):
            return False
        node = self._nodes[self._first_unvisited]
        if node._postset_edges is None:
            self._expand(node)
        self._first_unvisited += 1
        return True

    def _expand(self, node: CoverabilityGraphNode) -> None:
        node.exploration_state = ExplorationState.EXPLORING
        marking = node.marking
        edges: list[CoverabilityGraphEdge] = []
        for transition in self._transitions:
            if not marking.is_enabled(transition):
                continue
            successor = marking.fire(transition)
            covered = self._check_cover(successor, node)
            if covered is None:
                target = self._get_node(transition, successor, node, None)
            else:
                target = self._get_node(transition, covered[1], node, covered[0])
            edges.append(CoverabilityGraphEdge(transition, node, target))
        node._postset_edges = edges
        node.exploration_state = ExplorationState.DONE

    def _check_cover(
        self,
        marking: Marking,
        parent: CoverabilityGraphNode,
    ) -> tuple[CoverabilityGraphNode, Marking] | None:
        """Compare ``marking`` with every ancestor, starting at ``parent``.

        Returns:
            ``None`` if no ancestor is strictly dominated, else the closest
            dominated ancestor and the marking with OMEGA on every place that
            grew with respect to some dominated ancestor.
        """
        if self._reachability:
            return None
        covered: CoverabilityGraphNode | None = None
        grown: set[str] = set()
        ancestor: CoverabilityGraphNode | None = parent
        while ancestor is not None:
            accelerated = marking.cover(ancestor.marking)
            if accelerated is not None:
                if covered is None:
                    covered = ancestor
                grown.update(accelerated.omega_places())
            ancestor = ancestor.parent
        if covered is None:
            return None
        result = marking
        for place_id in grown:
            result = result.set_token_count(place_id, OMEGA)
        return covered, result

    def _get_node(
        self,
        transition: Transition | None,
        marking: Marking,
        parent: CoverabilityGraphNode | None,
        covered: CoverabilityGraphNode | None,
    ) -> CoverabilityGraphNode:
        node = self._states.get(marking)
        if node is None:
            if self._max_nodes is not None and len(self._nodes) >= self._max_nodes:
                raise StateSpaceLimitError(self._max_nodes, self._net)
            node = CoverabilityGraphNode(self, transition, marking, parent, covered)
            self._states[marking] = node
            self._nodes.append(node)
        return node

    # ── enumeration ────────────────────────────────────────────────────

    def iter_nodes(self) -> Iterator[CoverabilityGraphNode]:
        """Nodes in BFS order, generating them as needed."""
        position = 0
        while True:
            while position >= len(self._nodes):
                if not self._visit_node():
                    return
            yield self._nodes[position]
            position += 1

    def iter_edges(self) -> Iterator[CoverabilityGraphEdge]:
        for node in self.iter_nodes():
            yield from node.postset_edges

    def find_node(self, marking: Marking) -> CoverabilityGraphNode | None:
        """Node for ``marking`` among the nodes generated so far."""
        return self._states.get(marking)

    # ── unboundedness ──────────────────────────────────────────────────

    def unbounded_witness(self) -> UnboundedError | None:
        """Witness of unboundedness, or ``None`` if the net is bounded.

        The witness is built from the first node carrying an OMEGA. All of
        its ancestors are OMEGA-free, so its firing sequence is a real firing
        sequence of the net and repeating the cycle from the covered node
        pumps tokens onto the reported place.
        """
        if self._reachability:
            return None
        for node in self.iter_nodes():
            if node.marking.has_omega():
                return self._unbounded_error(node)
        return None

    def _unbounded_error(self, node: CoverabilityGraphNode) -> UnboundedError:
        covered = node.covered_node
        assert covered is not None
        sequence = covered.firing_sequence
        cycle = node.firing_sequence_from_covered_node or []
        reached = self._net.initial_marking.fire_transitions(*node.firing_sequence)
        place_id = next(
            p for p, token in reached.items() if token > covered.marking[p]
        )
        logger.debug(
            f"Net '{self._net.name}' is unbounded: place {place_id}, "
            f"sequence {[t.id for t in sequence]}, cycle {[t.id for t in cycle]}"
        )
        return UnboundedError(self._net, self._net.get_place(place_id), sequence, cycle)

    # ── conversion ─────────────────────────────────────────────────────

    def to_reachability_lts(self) -> TransitionSystem:
        """The reachability graph as a transition system.

        Raises:
            UnboundedError: If the net is unbounded
        """
        return self._to_lts(only_reachability=True)

    def to_coverability_lts(self) -> TransitionSystem:
        """The coverability graph as a transition system (always succeeds)."""
        return self._to_lts(only_reachability=self._reachability)

    def _to_lts(self, only_reachability: bool) -> TransitionSystem:
        kind = "Reachability" if only_reachability else "Coverability"
        lts = TransitionSystem(f"{kind} graph of {self._net.name}")
        lts.put_extension(PETRI_NET_EXTENSION, self._net, ExtensionProperty.NOCOPY)
        states = {}

        for node in self.iter_nodes():
            throw_if_interrupt_requested(self._interrupter)
            if only_reachability and node.marking.has_omega():
                raise self._unbounded_error(node)
            state = lts.create_state()
            state.put_extension(MARKING_EXTENSION, node.marking, ExtensionProperty.NOCOPY)
            state.put_extension(COVERABILITY_NODE_EXTENSION, node, ExtensionProperty.NOCOPY)
            states[node] = state

        for node in self.iter_nodes():
            source = states[node]
            for edge in node.postset_edges:
                throw_if_interrupt_requested(self._interrupter)
                target = states[edge.target]
                label = edge.transition.label
                if lts.contains_arc(source, target, label):
                    # An LTS has at most one arc per (source, label, target)
                    logger.warning(
                        f"Dropping duplicate arc {source.id} --{label}--> {target.id} "
                        f"(transition {edge.transition.id})"
                    )
                    continue
                arc = lts.create_arc(source, target, label)
                arc.put_extension(TRANSITION_EXTENSION, edge.transition, ExtensionProperty.NOCOPY)

        lts.set_initial_state(states[self.initial_node])
        return lts


__all__ = [
    "ExplorationState",
    "CoverabilityGraphEdge",
    "CoverabilityGraphNode",
    "CoverabilityGraph",
    "PETRI_NET_EXTENSION",
    "MARKING_EXTENSION",
    "COVERABILITY_NODE_EXTENSION",
    "TRANSITION_EXTENSION",
]
