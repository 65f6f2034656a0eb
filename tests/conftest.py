"""Shared fixtures: an in-memory TreeStore and small sample trees."""
from __future__ import annotations

import itertools

import pytest

from family_tree.client import ApiError, FamilyTreeAPIError, TreeStore
from family_tree.models import (
    FamilyGraph,
    ParentOfInput,
    ParentOfRelationship,
    Person,
    PersonInput,
    UnionInput,
    UnionRelationship,
)


class InMemoryTreeStore(TreeStore):
    """TreeStore keeping everything in lists; records calls, fails on demand.

    `fail` maps a method name to the error it should raise on its next call.
    """

    def __init__(self, graph: FamilyGraph | None = None) -> None:
        graph = graph or FamilyGraph()
        self.persons: list[Person] = list(graph.nodes)
        self.parent_of: list[ParentOfRelationship] = list(graph.parent_of)
        self.unions: list[UnionRelationship] = list(graph.unions)
        self.calls: list[tuple] = []
        self.fail: dict[str, FamilyTreeAPIError] = {}
        self._ids = itertools.count(1)

    def _enter(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        error = self.fail.pop(name, None)
        if error is not None:
            raise error

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def _find(self, person_id: str) -> int:
        for i, person in enumerate(self.persons):
            if person.id == person_id:
                return i
        raise ApiError("API request failed: Not Found", 404, "Not Found")

    async def list_persons(self) -> list[Person]:
        self._enter("list_persons")
        return list(self.persons)

    async def get_graph(self) -> FamilyGraph:
        self._enter("get_graph")
        return FamilyGraph(nodes=self.persons, parent_of=self.parent_of, unions=self.unions)

    async def create_person(self, fields: PersonInput) -> Person:
        self._enter("create_person", fields)
        person = Person(id=f"new-{next(self._ids)}", **fields.model_dump(exclude_none=True))
        self.persons.append(person)
        return person

    async def update_person(self, person_id: str, fields: PersonInput) -> Person:
        self._enter("update_person", person_id, fields)
        i = self._find(person_id)
        person = self.persons[i].model_copy(update=fields.model_dump(exclude_none=True))
        self.persons[i] = person
        return person

    async def delete_person(self, person_id: str) -> None:
        self._enter("delete_person", person_id)
        self.persons.pop(self._find(person_id))
        self.parent_of = [r for r in self.parent_of if person_id not in (r.parent_id, r.child_id)]
        self.unions = [u for u in self.unions if not u.involves(person_id)]

    async def create_union(self, fields: UnionInput) -> UnionRelationship:
        self._enter("create_union", fields)
        union = UnionRelationship.model_validate(fields.to_payload())
        self.unions.append(union)
        return union

    async def create_parent_of(self, fields: ParentOfInput) -> ParentOfRelationship:
        self._enter("create_parent_of", fields)
        rel = ParentOfRelationship.model_validate(fields.to_payload())
        self.parent_of.append(rel)
        return rel

    async def set_person_position(self, person_id: str, x: float, y: float) -> Person:
        self._enter("set_person_position", person_id, x, y)
        i = self._find(person_id)
        self.persons[i] = self.persons[i].model_copy(update={"position_x": x, "position_y": y})
        return self.persons[i]

    async def clear_person_position(self, person_id: str) -> Person:
        self._enter("clear_person_position", person_id)
        i = self._find(person_id)
        self.persons[i] = self.persons[i].model_copy(update={"position_x": None, "position_y": None})
        return self.persons[i]


def make_graph(
    persons: list[str | dict],
    parents: list[tuple[str, str]] = (),
    unions: list[tuple[str, str] | dict] = (),
) -> FamilyGraph:
    """Build a snapshot from ids (or person dicts), parent pairs and unions."""
    nodes = [{"id": p, "first_name": p} if isinstance(p, str) else p for p in persons]
    return FamilyGraph.model_validate(
        {
            "nodes": nodes,
            "parentOf": [{"parent_id": p, "child_id": c} for p, c in parents],
            "unions": [
                {"person1_id": u[0], "person2_id": u[1]} if isinstance(u, tuple) else u
                for u in unions
            ],
        }
    )


@pytest.fixture
def family() -> FamilyGraph:
    """Two parents in a union with one child."""
    return make_graph(
        [
            {"id": "A", "first_name": "Alice", "last_name": "Smith", "gender": "female", "birth_date": "1950-03-01"},
            {"id": "B", "first_name": "Bob", "last_name": "Smith", "gender": "male", "birth_date": "1948-07-12"},
            {"id": "C", "first_name": "Carol", "last_name": "Smith", "birth_date": "1975-01-20"},
        ],
        parents=[("A", "C"), ("B", "C")],
        unions=[{"person1_id": "A", "person2_id": "B", "startDate": "1972-06-01", "status": "ongoing"}],
    )


@pytest.fixture
def store(family: FamilyGraph) -> InMemoryTreeStore:
    return InMemoryTreeStore(family)
