"""Derived relationship lookup for a single person.

The index is computed on demand from the relationship lists of one graph
snapshot by linear scan. Nothing is cached between queries; callers build a
new index (or re-query) after every reload.

Relationships pointing at people missing from the snapshot are skipped.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from family_tree.models import (
    FamilyGraph,
    ParentType,
    Person,
    UnionRelationship,
)


@dataclass(frozen=True)
class ParentLink:
    """A parent of the focal person."""
    person: Person
    parent_type: ParentType


@dataclass(frozen=True)
class ChildLink:
    """A child of the focal person."""
    person: Person
    parent_type: ParentType


@dataclass(frozen=True)
class SpouseLink:
    """A spouse or partner together with the union record."""
    person: Person
    union: UnionRelationship


@dataclass
class PersonRelationships:
    """Parents, children and spouses of one person."""
    person_id: str
    parents: list[ParentLink] = field(default_factory=list)
    children: list[ChildLink] = field(default_factory=list)
    spouses: list[SpouseLink] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.parents or self.children or self.spouses)


class RelationshipIndex:
    """Parent/child/spouse queries over one graph snapshot."""

    def __init__(self, graph: FamilyGraph) -> None:
        self.graph = graph

    def parents(self, person_id: str) -> list[ParentLink]:
        out = []
        for rel in self.graph.parent_of:
            if rel.child_id != person_id:
                continue
            parent = self.graph.person(rel.parent_id)
            if parent is not None:
                out.append(ParentLink(person=parent, parent_type=rel.parent_type))
        return out

    def children(self, person_id: str) -> list[ChildLink]:
        out = []
        for rel in self.graph.parent_of:
            if rel.parent_id != person_id:
                continue
            child = self.graph.person(rel.child_id)
            if child is not None:
                out.append(ChildLink(person=child, parent_type=rel.parent_type))
        return out

    def spouses(self, person_id: str) -> list[SpouseLink]:
        out = []
        for union in self.graph.unions:
            if not union.involves(person_id):
                continue
            partner = self.graph.person(union.partner_of(person_id))
            if partner is not None:
                out.append(SpouseLink(person=partner, union=union))
        return out

    def for_person(self, person_id: str) -> PersonRelationships:
        """Collect all relationships of a person."""
        return PersonRelationships(
            person_id=person_id,
            parents=self.parents(person_id),
            children=self.children(person_id),
            spouses=self.spouses(person_id),
        )
