"""Named side-table attached to graphs, nodes and edges.

Every entity carries extensions: arbitrary values stored under a string
key, each with an :class:`ExtensionProperty` flag set deciding what
happens when the owner is cloned or written out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from typing import Any

from petricraft.exceptions import NoSuchExtensionError


class ExtensionProperty(Flag):
    """Propagation flags of a single extension.

    - NONE: copied on clone, not persisted
    - NOCOPY: dropped when the owner is cloned
    - WRITE_TO_FILE: included when the owner is serialized
    """

    NONE = 0
    NOCOPY = auto()
    WRITE_TO_FILE = auto()


@dataclass
class _Entry:
    value: Any
    properties: ExtensionProperty


class Extensible:
    """Mixin providing the extension side-table."""

    def __init__(self) -> None:
        self._extensions: dict[str, _Entry] = {}

    def put_extension(
        self,
        key: str,
        value: Any,
        properties: ExtensionProperty = ExtensionProperty.NONE,
    ) -> None:
        """Store ``value`` under ``key``, replacing a previous entry."""
        self._extensions[key] = _Entry(value, properties)

    def get_extension(self, key: str) -> Any:
        """Return the value stored under ``key``.

        Raises:
            NoSuchExtensionError: If no such extension exists
        """
        entry = self._extensions.get(key)
        if entry is None:
            raise NoSuchExtensionError(key)
        return entry.value

    def has_extension(self, key: str) -> bool:
        return key in self._extensions

    def remove_extension(self, key: str) -> None:
        """Remove the extension stored under ``key`` (no-op if absent)."""
        self._extensions.pop(key, None)

    def get_extension_properties(self, key: str) -> ExtensionProperty:
        entry = self._extensions.get(key)
        if entry is None:
            raise NoSuchExtensionError(key)
        return entry.properties

    def extensions(self) -> list[tuple[str, Any]]:
        """All (key, value) pairs. Values are not copied."""
        return [(key, entry.value) for key, entry in self._extensions.items()]

    def copyable_extensions(self) -> list[tuple[str, Any]]:
        """(key, value) pairs that survive cloning of the owner."""
        return [
            (key, entry.value)
            for key, entry in self._extensions.items()
            if ExtensionProperty.NOCOPY not in entry.properties
        ]

    def persistent_extensions(self) -> list[tuple[str, Any]]:
        """(key, value) pairs that should be written out with the owner."""
        return [
            (key, entry.value)
            for key, entry in self._extensions.items()
            if ExtensionProperty.WRITE_TO_FILE in entry.properties
        ]


def clone_with_policy(source: Extensible, target: Extensible) -> None:
    """Copy all extensions of ``source`` not flagged NOCOPY onto ``target``.

    This is a reference copy: the stored values are shared, their
    property flags are kept.
    """
    for key, entry in source._extensions.items():
        if ExtensionProperty.NOCOPY not in entry.properties:
            target._extensions[key] = _Entry(entry.value, entry.properties)


__all__ = [
    "ExtensionProperty",
    "Extensible",
    "clone_with_policy",
]
