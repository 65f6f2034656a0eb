"""Persistence collaborator interface.

The engine never mutates a graph locally; every change goes through a
TreeStore and is followed by a full get_graph() reload.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from family_tree.models import (
    FamilyGraph,
    ParentOfInput,
    ParentOfRelationship,
    Person,
    PersonInput,
    UnionInput,
    UnionRelationship,
)


class TreeStore(ABC):
    """Abstract base for family tree persistence."""

    @abstractmethod
    async def list_persons(self) -> list[Person]:
        """List every person (used to populate relationship forms)."""
        ...

    @abstractmethod
    async def get_graph(self) -> FamilyGraph:
        """Load the full relationship graph snapshot."""
        ...

    @abstractmethod
    async def create_person(self, fields: PersonInput) -> Person:
        ...

    @abstractmethod
    async def update_person(self, person_id: str, fields: PersonInput) -> Person:
        ...

    @abstractmethod
    async def delete_person(self, person_id: str) -> None:
        ...

    @abstractmethod
    async def create_union(self, fields: UnionInput) -> UnionRelationship:
        ...

    @abstractmethod
    async def create_parent_of(self, fields: ParentOfInput) -> ParentOfRelationship:
        ...

    @abstractmethod
    async def set_person_position(self, person_id: str, x: float, y: float) -> Person:
        """Persist a manual position for a person."""
        ...

    @abstractmethod
    async def clear_person_position(self, person_id: str) -> Person:
        """Forget a manual position so the person returns to auto-layout."""
        ...

    async def __aenter__(self) -> TreeStore:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None
