"""Host build-system boundary.

A static-site build registers content through collections: the source asks
for a collection by name and adds one node per document.  Any object
satisfying :class:`SourceActions` can receive the documents;
:class:`InMemorySourceActions` keeps them in dicts.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Collection(Protocol):
    """A named node collection in the host build system."""

    def add_node(self, node: dict[str, Any]) -> Any:
        """Register one node.  ``node["id"]`` is unique across the build."""
        ...


@runtime_checkable
class SourceActions(Protocol):
    """Entry point the host hands to a data source while loading."""

    def add_collection(self, name: str) -> Collection:
        """Create (or return) the collection called *name*."""
        ...


class InMemoryCollection:
    """A :class:`Collection` that stores nodes in insertion order."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.nodes: dict[str, dict[str, Any]] = {}

    def add_node(self, node: dict[str, Any]) -> dict[str, Any]:
        node_id = node["id"]
        if node_id in self.nodes:
            raise ValueError(f"Duplicate node id in collection {self.name!r}: {node_id}")
        self.nodes[node_id] = node
        return node


class InMemorySourceActions:
    """A :class:`SourceActions` backed by :class:`InMemoryCollection`."""

    def __init__(self) -> None:
        self.collections: dict[str, InMemoryCollection] = {}

    def add_collection(self, name: str) -> InMemoryCollection:
        return self.collections.setdefault(name, InMemoryCollection(name))
