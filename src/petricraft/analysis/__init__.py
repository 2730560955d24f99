"""Analyses built on the coverability graph and on transition systems.

This module provides:
- Coverability and reachability graph construction (Karp-Miller)
- Boundedness checks with constructive witnesses
- Cycle enumeration and Parikh vector comparisons
- Liveness, reversibility and persistence checks
"""

from __future__ import annotations

from .behaviour import (
    LivenessResult,
    PersistenceResult,
    ReversibilityResult,
    check_liveness,
    check_persistent,
    check_persistent_net,
    check_reversible,
)
from .bounded import (
    BoundedResult,
    check_bounded,
)
from .coverability import (
    COVERABILITY_NODE_EXTENSION,
    MARKING_EXTENSION,
    PETRI_NET_EXTENSION,
    TRANSITION_EXTENSION,
    CoverabilityGraph,
    CoverabilityGraphEdge,
    CoverabilityGraphNode,
    ExplorationState,
)
from .cycles import (
    Cycle,
    CycleCheckResult,
    CycleCounterExample,
    CycleSearchMode,
    check_same_or_mutually_disjoint_pvs,
    check_same_pvs,
    compute_smallest_cycles,
    search_cycles,
)

__all__ = [
    # Coverability
    "ExplorationState",
    "CoverabilityGraph",
    "CoverabilityGraphNode",
    "CoverabilityGraphEdge",
    "PETRI_NET_EXTENSION",
    "MARKING_EXTENSION",
    "COVERABILITY_NODE_EXTENSION",
    "TRANSITION_EXTENSION",
    # Boundedness
    "BoundedResult",
    "check_bounded",
    # Cycles
    "CycleSearchMode",
    "Cycle",
    "CycleCounterExample",
    "CycleCheckResult",
    "search_cycles",
    "compute_smallest_cycles",
    "check_same_pvs",
    "check_same_or_mutually_disjoint_pvs",
    # Behaviour
    "LivenessResult",
    "ReversibilityResult",
    "PersistenceResult",
    "check_liveness",
    "check_reversible",
    "check_persistent",
    "check_persistent_net",
]
