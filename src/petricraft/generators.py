"""Generators for small parameterised Petri nets used in tests and examples."""

from __future__ import annotations

import logging

from petricraft.adt.pn import PetriNet

logger = logging.getLogger(__name__)


def cycle_net(n: int, initial_tokens: int = 1) -> PetriNet:
    """Build a cycle of ``n`` places and ``n`` transitions.

    Transition ``t{i}`` moves a token from ``p{i}`` to ``p{(i+1) % n}``; the
    initial marking puts ``initial_tokens`` tokens on ``p0``.

    Raises:
        ValueError: If ``n`` is smaller than 1 or ``initial_tokens`` is negative
    """
    if n < 1:
        raise ValueError(f"A cycle net needs at least one place, got n={n}")
    if initial_tokens < 0:
        raise ValueError(f"initial_tokens must be non-negative, got {initial_tokens}")
    net = PetriNet(f"cycle-{n}")
    for i in range(n):
        net.create_place(f"p{i}")
    for i in range(n):
        net.create_transition(f"t{i}")
        net.create_flow(f"p{i}", f"t{i}")
        net.create_flow(f"t{i}", f"p{(i + 1) % n}")
    net.get_place("p0").initial_token = initial_tokens
    logger.debug(f"Generated cycle net of size {n}")
    return net


def source_net() -> PetriNet:
    """A transition that fills a place nothing consumes: the smallest unbounded net."""
    net = PetriNet("source")
    net.create_place("p")
    net.create_transition("t")
    net.create_flow("t", "p")
    return net


__all__ = [
    "cycle_net",
    "source_net",
]
