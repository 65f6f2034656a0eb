"""Form shapes handed to the data-entry widgets.

Forms are mutable: the widget writes into them, the controller reads them on
submit. Field contents are not validated here beyond the relationship forms
requiring both endpoints.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from family_tree.models import (
    ParentOfInput,
    ParentType,
    Person,
    PersonInput,
    UnionInput,
    UnionStatus,
    UnionType,
)

from .errors import IncompleteFormError


def _choices(persons: list[Person], exclude: str) -> list[Person]:
    return [p for p in persons if p.id != exclude]


@dataclass
class PersonForm:
    """Create or edit a person."""
    values: PersonInput = field(default_factory=PersonInput)
    person: Person | None = None  # set when editing

    @property
    def is_edit(self) -> bool:
        return self.person is not None

    @classmethod
    def for_person(cls, person: Person) -> PersonForm:
        return cls(values=PersonInput.from_person(person), person=person)


@dataclass
class UnionForm:
    """Create a union between two people."""
    person1_id: str = ""
    person2_id: str = ""
    union_type: UnionType | None = None
    status: UnionStatus = UnionStatus.ONGOING
    start_date: str | None = None
    end_date: str | None = None
    place: str | None = None
    notes: str | None = None

    @property
    def can_submit(self) -> bool:
        return bool(self.person1_id.strip() and self.person2_id.strip())

    def person1_choices(self, persons: list[Person]) -> list[Person]:
        return _choices(persons, self.person2_id)

    def person2_choices(self, persons: list[Person]) -> list[Person]:
        return _choices(persons, self.person1_id)

    def to_input(self) -> UnionInput:
        if not self.can_submit:
            raise IncompleteFormError("Please select both persons")
        return UnionInput(
            person1_id=self.person1_id,
            person2_id=self.person2_id,
            union_type=self.union_type,
            status=self.status,
            start_date=self.start_date or None,
            end_date=self.end_date or None,
            place=self.place or None,
            notes=self.notes or None,
        )


@dataclass
class ParentOfForm:
    """Create a parent -> child link."""
    parent_id: str = ""
    child_id: str = ""
    parent_type: ParentType = ParentType.BIOLOGICAL

    @property
    def can_submit(self) -> bool:
        return bool(self.parent_id.strip() and self.child_id.strip())

    def parent_choices(self, persons: list[Person]) -> list[Person]:
        return _choices(persons, self.child_id)

    def child_choices(self, persons: list[Person]) -> list[Person]:
        return _choices(persons, self.parent_id)

    def to_input(self) -> ParentOfInput:
        if not self.can_submit:
            raise IncompleteFormError("Please select both parent and child")
        return ParentOfInput(
            parent_id=self.parent_id,
            child_id=self.child_id,
            parent_type=self.parent_type,
        )
