"""Serialization for Petri nets, transition systems and analysis results.

Round-trip guarantee: ``from_dict(to_dict(x))`` has the same nodes, edges,
initial marking/state and element order as ``x`` for nets and transition
systems.

Supported types:
- PetriNet (places, transitions, flows, initial marking)
- TransitionSystem (states, arcs, initial state)
- Marking, BoundedResult, Cycle (write-only)

Only extensions flagged ``ExtensionProperty.WRITE_TO_FILE`` are written;
their values must be JSON-compatible. OMEGA tokens are written as the
string ``"omega"``.
"""

from __future__ import annotations

import json
from typing import Any

from petricraft.adt.extension import Extensible, ExtensionProperty
from petricraft.adt.pn import Marking, PetriNet, Token
from petricraft.adt.ts import TransitionSystem
from petricraft.analysis.bounded import BoundedResult
from petricraft.analysis.cycles import Cycle

OMEGA_LITERAL = "omega"

# ── Helpers ────────────────────────────────────────────────────────────


def _token_to_json(token: Token) -> int | str:
    return OMEGA_LITERAL if token.is_omega else token.value


def _extensions_to_dict(item: Extensible) -> dict[str, Any]:
    return dict(item.persistent_extensions())


def _extensions_from_dict(item: Extensible, data: dict[str, Any]) -> None:
    for key, value in data.get("extensions", {}).items():
        item.put_extension(key, value, ExtensionProperty.WRITE_TO_FILE)


# ── Petri net serialization ───────────────────────────────────────────


def petri_net_to_dict(net: PetriNet) -> dict[str, Any]:
    """Serialize a Petri net to a plain dict."""
    return {
        "name": net.name,
        "places": [
            {
                "id": p.id,
                "initial_tokens": p.initial_token.value,
                "extensions": _extensions_to_dict(p),
            }
            for p in net.places
        ],
        "transitions": [
            {"id": t.id, "label": t.label, "extensions": _extensions_to_dict(t)}
            for t in net.transitions
        ],
        "flows": [
            {
                "source": f.source_id,
                "target": f.target_id,
                "weight": f.weight,
                "extensions": _extensions_to_dict(f),
            }
            for f in net.flows
        ],
        "extensions": _extensions_to_dict(net),
    }


def petri_net_from_dict(data: dict[str, Any]) -> PetriNet:
    """Deserialize a Petri net.

    Raises:
        StructureError: If the data describes an inconsistent net
    """
    net = PetriNet(data.get("name", ""))
    _extensions_from_dict(net, data)
    for place_data in data["places"]:
        place = net.create_place(place_data["id"], place_data.get("initial_tokens", 0))
        _extensions_from_dict(place, place_data)
    for transition_data in data["transitions"]:
        transition = net.create_transition(transition_data["id"], transition_data.get("label"))
        _extensions_from_dict(transition, transition_data)
    for flow_data in data["flows"]:
        flow = net.create_flow(flow_data["source"], flow_data["target"], flow_data.get("weight", 1))
        _extensions_from_dict(flow, flow_data)
    return net


def marking_to_dict(marking: Marking) -> dict[str, int | str]:
    """Serialize a marking as place id -> token count, omitting empty places."""
    return {p: _token_to_json(t) for p, t in marking.items() if t != 0}


# ── Transition system serialization ───────────────────────────────────


def ts_to_dict(ts: TransitionSystem) -> dict[str, Any]:
    """Serialize a transition system to a plain dict."""
    return {
        "name": ts.name,
        "states": [{"id": s.id, "extensions": _extensions_to_dict(s)} for s in ts.states],
        "arcs": [
            {
                "source": a.source_id,
                "target": a.target_id,
                "label": a.label,
                "extensions": _extensions_to_dict(a),
            }
            for a in ts.arcs
        ],
        "initial_state": ts.initial_state.id if ts.has_initial_state() else None,
        "extensions": _extensions_to_dict(ts),
    }


def ts_from_dict(data: dict[str, Any]) -> TransitionSystem:
    """Deserialize a transition system."""
    ts = TransitionSystem(data.get("name", ""))
    _extensions_from_dict(ts, data)
    for state_data in data["states"]:
        _extensions_from_dict(ts.create_state(state_data["id"]), state_data)
    for arc_data in data["arcs"]:
        arc = ts.create_arc(arc_data["source"], arc_data["target"], arc_data["label"])
        _extensions_from_dict(arc, arc_data)
    if data.get("initial_state") is not None:
        ts.set_initial_state(data["initial_state"])
    return ts


# ── Analysis result serialization ──────────────────────────────────────


def bounded_result_to_dict(result: BoundedResult) -> dict[str, Any]:
    """Serialize a BoundedResult."""
    return {
        "net": result.net.name,
        "is_bounded": result.is_bounded,
        "k": result.k,
        "unbounded_place": result.unbounded_place.id if result.unbounded_place else None,
        "sequence": [t.id for t in result.sequence],
        "cycle": [t.id for t in result.cycle] if result.cycle is not None else None,
    }


def cycle_to_dict(cycle: Cycle) -> dict[str, Any]:
    """Serialize a Cycle."""
    return {
        "states": list(cycle.states),
        "labels": list(cycle.labels),
        "parikh_vector": dict(cycle.parikh_vector.items()),
    }


# ── JSON wrappers ──────────────────────────────────────────────────────


def petri_net_to_json(net: PetriNet, indent: int | None = None) -> str:
    return json.dumps(petri_net_to_dict(net), indent=indent)


def petri_net_from_json(text: str) -> PetriNet:
    return petri_net_from_dict(json.loads(text))


def ts_to_json(ts: TransitionSystem, indent: int | None = None) -> str:
    return json.dumps(ts_to_dict(ts), indent=indent)


def ts_from_json(text: str) -> TransitionSystem:
    return ts_from_dict(json.loads(text))


__all__ = [
    "OMEGA_LITERAL",
    "petri_net_to_dict",
    "petri_net_from_dict",
    "marking_to_dict",
    "ts_to_dict",
    "ts_from_dict",
    "bounded_result_to_dict",
    "cycle_to_dict",
    "petri_net_to_json",
    "petri_net_from_json",
    "ts_to_json",
    "ts_from_json",
]
