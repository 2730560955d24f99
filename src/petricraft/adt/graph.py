"""Generic directed graph shared by Petri nets and transition systems.

The graph is the single owner of its nodes and edges. Nodes and edges only
hold a weak back-reference to their graph plus string ids, and resolve
their neighbours by asking the graph. Edges are stored under an edge key;
for Petri nets this is ``(source_id, target_id)``, transition systems add
the arc label.

Entities expose a small set of capabilities (:class:`Identified`,
:class:`HasExtensions`, :class:`HasPresetPostset`) rather than a deep
class hierarchy.
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Hashable
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from petricraft.adt.extension import Extensible
from petricraft.exceptions import (
    EdgeExistsError,
    NoSuchEdgeError,
    NoSuchNodeError,
    NodeExistsError,
    StructureError,
)

logger = logging.getLogger(__name__)

EdgeKey = tuple[Hashable, ...]

# =============================================================================
# Capabilities
# =============================================================================


@runtime_checkable
class Identified(Protocol):
    """Entity with a graph-unique string id."""

    @property
    def id(self) -> str: ...


@runtime_checkable
class HasExtensions(Protocol):
    """Entity carrying an extension side-table."""

    def put_extension(self, key: str, value: Any, properties: Any = ...) -> None: ...

    def get_extension(self, key: str) -> Any: ...

    def has_extension(self, key: str) -> bool: ...


@runtime_checkable
class HasPresetPostset(Protocol):
    """Entity whose neighbourhood can be queried."""

    @property
    def preset_nodes(self) -> set[Any]: ...

    @property
    def postset_nodes(self) -> set[Any]: ...

    @property
    def preset_edges(self) -> set[Any]: ...

    @property
    def postset_edges(self) -> set[Any]: ...


# =============================================================================
# Nodes and edges
# =============================================================================


def _resolve(ref: weakref.ReferenceType[Any]) -> Any:
    graph = ref()
    if graph is None:
        raise StructureError("The owning graph no longer exists")
    return graph


class Node(Extensible):
    """A node, identified by its id inside the owning graph."""

    def __init__(self, graph: Graph[Any, Any], node_id: str):
        super().__init__()
        self._graph_ref = weakref.ref(graph)
        self._id = node_id

    @property
    def id(self) -> str:
        return self._id

    @property
    def graph(self) -> Graph[Any, Any]:
        return _resolve(self._graph_ref)

    @property
    def preset_nodes(self) -> set[Any]:
        return self.graph.get_preset_nodes(self._id)

    @property
    def postset_nodes(self) -> set[Any]:
        return self.graph.get_postset_nodes(self._id)

    @property
    def preset_edges(self) -> set[Any]:
        return self.graph.get_preset_edges(self._id)

    @property
    def postset_edges(self) -> set[Any]:
        return self.graph.get_postset_edges(self._id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._id!r})"

    def __str__(self) -> str:
        return self._id


class Edge(Extensible):
    """A directed edge between two nodes of the same graph."""

    def __init__(self, graph: Graph[Any, Any], source_id: str, target_id: str):
        super().__init__()
        self._graph_ref = weakref.ref(graph)
        self._source_id = source_id
        self._target_id = target_id

    @property
    def graph(self) -> Graph[Any, Any]:
        return _resolve(self._graph_ref)

    @property
    def source_id(self) -> str:
        return self._source_id

    @property
    def target_id(self) -> str:
        return self._target_id

    @property
    def source(self) -> Any:
        return self.graph.get_node(self._source_id)

    @property
    def target(self) -> Any:
        return self.graph.get_node(self._target_id)

    @property
    def key(self) -> EdgeKey:
        return (self._source_id, self._target_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._source_id!r} -> {self._target_id!r})"


N = TypeVar("N", bound=Node)
E = TypeVar("E", bound=Edge)


# =============================================================================
# Graph
# =============================================================================


class Graph(Extensible, Generic[N, E]):
    """Arena of nodes and edges with id-based lookup.

    Enumeration of nodes and edges follows insertion order, so a graph can be
    written out and read back with the same element order.

    Attributes:
        name: Human-readable graph name
    """

    def __init__(self, name: str = ""):
        super().__init__()
        self.name = name
        self._nodes: dict[str, N] = {}
        self._edges: dict[EdgeKey, E] = {}
        self._preset_edges: dict[str, dict[EdgeKey, E]] = {}
        self._postset_edges: dict[str, dict[EdgeKey, E]] = {}
        self._revision = 0
        self._id_counter = 0

    # ── bookkeeping ────────────────────────────────────────────────────

    @property
    def revision(self) -> int:
        """Counter bumped by every structural change."""
        return self._revision

    def _touch(self) -> None:
        self._revision += 1

    def _next_id(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}{self._id_counter}"
            self._id_counter += 1
            if candidate not in self._nodes:
                return candidate

    def _add_node(self, node: N) -> N:
        if node.id in self._nodes:
            raise NodeExistsError(self.name, node.id)
        self._nodes[node.id] = node
        self._preset_edges[node.id] = {}
        self._postset_edges[node.id] = {}
        self._touch()
        logger.debug(f"Added node {node.id} to graph '{self.name}'")
        return node

    def _add_edge(self, edge: E) -> E:
        for node_id in (edge.source_id, edge.target_id):
            if node_id not in self._nodes:
                raise NoSuchNodeError(self.name, node_id)
        key = edge.key
        if key in self._edges:
            raise EdgeExistsError(self.name, key)
        self._edges[key] = edge
        self._postset_edges[edge.source_id][key] = edge
        self._preset_edges[edge.target_id][key] = edge
        self._touch()
        logger.debug(f"Added edge {key} to graph '{self.name}'")
        return edge

    def _remove_edge(self, key: EdgeKey) -> None:
        edge = self._edges.pop(key, None)
        if edge is None:
            raise NoSuchEdgeError(self.name, key)
        del self._postset_edges[edge.source_id][key]
        del self._preset_edges[edge.target_id][key]
        self._touch()
        logger.debug(f"Removed edge {key} from graph '{self.name}'")

    # ── nodes ──────────────────────────────────────────────────────────

    def get_node(self, node_id: str) -> N:
        """Return the node with the given id.

        Raises:
            NoSuchNodeError: If the graph has no such node
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise NoSuchNodeError(self.name, node_id)
        return node

    def contains_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    @property
    def nodes(self) -> list[N]:
        """All nodes in insertion order."""
        return list(self._nodes.values())

    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    def remove_node(self, node_id: str) -> None:
        """Remove a node together with all incident edges.

        Raises:
            NoSuchNodeError: If the graph has no such node
        """
        if node_id not in self._nodes:
            raise NoSuchNodeError(self.name, node_id)
        incident = list(self._preset_edges[node_id]) + list(self._postset_edges[node_id])
        for key in incident:
            if key in self._edges:
                self._remove_edge(key)
        del self._nodes[node_id]
        del self._preset_edges[node_id]
        del self._postset_edges[node_id]
        self._touch()
        logger.debug(f"Removed node {node_id} from graph '{self.name}'")

    # ── edges ──────────────────────────────────────────────────────────

    def get_edge(self, *key: Hashable) -> E:
        """Return the edge stored under ``key``.

        Raises:
            NoSuchEdgeError: If the graph has no such edge
        """
        edge = self._edges.get(tuple(key))
        if edge is None:
            raise NoSuchEdgeError(self.name, tuple(key))
        return edge

    def contains_edge(self, *key: Hashable) -> bool:
        return tuple(key) in self._edges

    @property
    def edges(self) -> list[E]:
        """All edges in insertion order."""
        return list(self._edges.values())

    @property
    def num_edges(self) -> int:
        return len(self._edges)

    # ── neighbourhood ──────────────────────────────────────────────────

    def _check_node(self, node_id: str) -> None:
        if node_id not in self._nodes:
            raise NoSuchNodeError(self.name, node_id)

    def get_preset_edges(self, node_id: str) -> set[E]:
        """Edges ending in the given node."""
        self._check_node(node_id)
        return set(self._preset_edges[node_id].values())

    def get_postset_edges(self, node_id: str) -> set[E]:
        """Edges starting in the given node."""
        self._check_node(node_id)
        return set(self._postset_edges[node_id].values())

    def get_preset_nodes(self, node_id: str) -> set[N]:
        """Nodes with an edge into the given node."""
        self._check_node(node_id)
        return {self._nodes[e.source_id] for e in self._preset_edges[node_id].values()}

    def get_postset_nodes(self, node_id: str) -> set[N]:
        """Nodes reached by an edge from the given node."""
        self._check_node(node_id)
        return {self._nodes[e.target_id] for e in self._postset_edges[node_id].values()}

    def iter_postset_edges(self, node_id: str) -> list[E]:
        """Edges starting in the given node, in insertion order."""
        self._check_node(node_id)
        return list(self._postset_edges[node_id].values())

    def iter_preset_edges(self, node_id: str) -> list[E]:
        """Edges ending in the given node, in insertion order."""
        self._check_node(node_id)
        return list(self._preset_edges[node_id].values())

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"nodes={len(self._nodes)}, edges={len(self._edges)})"
        )


__all__ = [
    "EdgeKey",
    "Identified",
    "HasExtensions",
    "HasPresetPostset",
    "Node",
    "Edge",
    "Graph",
]
