"""Coverability graphs -- boundedness witnesses for a producer/consumer net.

Builds a producer that can run ahead of its consumer, finds the unbounded
buffer and pumps it past a chosen bound.
"""

from petricraft import CoverabilityGraph, PetriNet, UnboundedError, check_bounded, check_liveness
from petricraft.generators import cycle_net

# =============================================================
# Scenario 1: Bounded token ring
# =============================================================
print("=== Token ring ===")

ring = cycle_net(4)
result = check_bounded(ring)
print(result.summary())
assert result.is_safe

lts = CoverabilityGraph.get(ring).to_reachability_lts()
print(f"Reachability graph: {lts.num_nodes} states, {lts.num_edges} arcs")

# =============================================================
# Scenario 2: Producer runs ahead of consumer
# =============================================================
print("\n=== Producer / consumer ===")

net = PetriNet("producer-consumer")
net.create_place("ready", 1)
net.create_place("buffer")
net.create_place("idle", 1)
net.create_transition("produce")
net.create_transition("consume")
net.create_flow("ready", "produce")
net.create_flow("produce", "ready")
net.create_flow("produce", "buffer")
net.create_flow("buffer", "consume")
net.create_flow("idle", "consume")
net.create_flow("consume", "idle")

result = check_bounded(net)
print(result.summary())
assert result.unbounded_place is not None and result.unbounded_place.id == "buffer"

sequence = result.get_sequence_exceeding(5)
reached = net.initial_marking.fire_transitions(*sequence)
print(f"After {[t.id for t in sequence]}: {reached}")

cover = CoverabilityGraph.get(net).to_coverability_lts()
for state in cover.states:
    print(f"  {state.id}: {state.get_extension('marking')}")

try:
    CoverabilityGraph.get(net).to_reachability_lts()
except UnboundedError as e:
    print(f"No finite reachability graph: {e}")

print(check_liveness(net).summary())
