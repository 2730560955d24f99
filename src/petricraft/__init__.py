"""
petricraft -- Petri nets, transition systems and their coverability graphs.

Karp-Miller coverability | Boundedness witnesses | Cycle Parikh vectors

Minimal dependencies (NumPy). Pure Python.
"""

from petricraft._version import __version__
from petricraft.adt import (
    OMEGA,
    Arc,
    ExtensionProperty,
    Flow,
    Marking,
    ParikhVector,
    PetriNet,
    Place,
    State,
    Token,
    Transition,
    TransitionSystem,
)
from petricraft.analysis import (
    BoundedResult,
    CoverabilityGraph,
    Cycle,
    CycleSearchMode,
    check_bounded,
    check_liveness,
    check_same_or_mutually_disjoint_pvs,
    check_same_pvs,
    compute_smallest_cycles,
)
from petricraft.exceptions import (
    ComputationInterrupted,
    PetriCraftError,
    StructureError,
    TransitionNotEnabledError,
    UnboundedError,
)

# NOTE: Full subpackage APIs are accessible via direct imports:
#   from petricraft.analysis import check_reversible, check_persistent, search_cycles, ...
#   from petricraft.interrupt import TimeoutInterrupter, interrupter_scope, ...
#   from petricraft.serialization import petri_net_to_dict, ts_from_json, ...
#   from petricraft.generators import cycle_net, ...

__all__ = [
    "__version__",
    # Petri nets
    "Token",
    "OMEGA",
    "Place",
    "Transition",
    "Flow",
    "Marking",
    "PetriNet",
    # Transition systems
    "ParikhVector",
    "State",
    "Arc",
    "TransitionSystem",
    "ExtensionProperty",
    # Analysis
    "CoverabilityGraph",
    "BoundedResult",
    "check_bounded",
    "check_liveness",
    "CycleSearchMode",
    "Cycle",
    "compute_smallest_cycles",
    "check_same_pvs",
    "check_same_or_mutually_disjoint_pvs",
    # Errors
    "PetriCraftError",
    "StructureError",
    "TransitionNotEnabledError",
    "UnboundedError",
    "ComputationInterrupted",
]
