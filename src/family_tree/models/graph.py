"""Relationship graph snapshot.

A FamilyGraph is one atomic load from the store. It is never patched in
place: every mutation is followed by a full reload that replaces it.
"""
from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .person import Person
from .relationship import ParentOfRelationship, UnionRelationship

Entity = Annotated[
    Person | ParentOfRelationship | UnionRelationship,
    Field(discriminator="kind"),
]


class FamilyGraph(BaseModel):
    """People plus parent-of and union relationships."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    nodes: tuple[Person, ...] = ()
    parent_of: tuple[ParentOfRelationship, ...] = Field(default=(), alias="parentOf")
    unions: tuple[UnionRelationship, ...] = ()

    @field_validator("nodes", "parent_of", "unions", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def person_ids(self) -> set[str]:
        return {p.id for p in self.nodes}

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def person(self, person_id: str) -> Person | None:
        return next((p for p in self.nodes if p.id == person_id), None)

    def entities(self) -> Iterator[Entity]:
        """Iterate over every entity in the snapshot, nodes first."""
        yield from self.nodes
        yield from self.parent_of
        yield from self.unions

    def persisted_positions(self) -> dict[str, tuple[float, float]]:
        """Map of person id -> stored (x, y) for manually placed people."""
        out: dict[str, tuple[float, float]] = {}
        for person in self.nodes:
            pos = person.persisted_position
            if pos is not None:
                out[person.id] = (pos.x, pos.y)
        return out
