"""Abstract data types: extensible graphs, Petri nets and transition systems.

This module provides:
- An extension side-table with per-entry copy policies
- A generic id-indexed directed graph
- Place/transition nets with markings and the firing rule
- Labeled transition systems and Parikh vectors
"""

from __future__ import annotations

from .extension import (
    Extensible,
    ExtensionProperty,
    clone_with_policy,
)
from .graph import (
    Edge,
    EdgeKey,
    Graph,
    HasExtensions,
    HasPresetPostset,
    Identified,
    Node,
)
from .pn import (
    OMEGA,
    ZERO,
    Flow,
    Marking,
    PetriNet,
    Place,
    PNNode,
    Token,
    Transition,
)
from .ts import (
    Arc,
    ParikhVector,
    State,
    TransitionSystem,
)

__all__ = [
    # Extensions
    "Extensible",
    "ExtensionProperty",
    "clone_with_policy",
    # Graph core
    "EdgeKey",
    "Identified",
    "HasExtensions",
    "HasPresetPostset",
    "Node",
    "Edge",
    "Graph",
    # Petri nets
    "Token",
    "OMEGA",
    "ZERO",
    "Place",
    "Transition",
    "Flow",
    "PNNode",
    "Marking",
    "PetriNet",
    # Transition systems
    "ParikhVector",
    "State",
    "Arc",
    "TransitionSystem",
]
