"""Cycle Parikh vectors -- comparing the small cycles of a transition system."""

from petricraft import (
    CoverabilityGraph,
    TransitionSystem,
    check_same_or_mutually_disjoint_pvs,
    check_same_pvs,
    compute_smallest_cycles,
)
from petricraft.analysis import check_persistent
from petricraft.generators import cycle_net

# =============================================================
# Scenario 1: Reachability graph of a ring
# =============================================================
print("=== Ring ===")

lts = CoverabilityGraph.get(cycle_net(3)).to_reachability_lts()
for cycle in sorted(compute_smallest_cycles(lts), key=lambda c: c.sort_key()):
    print(f"{list(cycle.labels)} -> {cycle.parikh_vector}")
print(f"Same Parikh vectors: {bool(check_same_pvs(lts))}")

# =============================================================
# Scenario 2: Two loops through one state
# =============================================================
print("\n=== Two loops ===")

ts = TransitionSystem("loops")
ts.create_states("home", "away")
ts.create_arc("home", "home", "idle")
ts.create_arc("home", "away", "leave")
ts.create_arc("away", "home", "return")
ts.set_initial_state("home")

same = check_same_pvs(ts)
print(same.summary())
disjoint = check_same_or_mutually_disjoint_pvs(ts)
print(f"Same or disjoint: {disjoint.holds}")
print(check_persistent(ts).summary())
