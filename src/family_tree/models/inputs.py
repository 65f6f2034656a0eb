"""Creatable-field payloads sent to the store."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .person import Gender, Person
from .relationship import ParentType, UnionStatus, UnionType


def _require_id(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("endpoint identifier must not be empty")
    return value


class PersonInput(BaseModel):
    """Fields accepted when creating or updating a person."""

    first_name: str | None = None
    last_name: str | None = None
    maiden_name: str | None = None
    birth_date: str | None = None  # ISO date: YYYY-MM-DD
    death_date: str | None = None
    birth_place: str | None = None
    death_place: str | None = None
    gender: Gender | None = None
    occupation: str | None = None
    notes: str | None = None
    photo_url: str | None = None
    email: str | None = None
    phone: str | None = None
    current_address: str | None = None
    data: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        # Empty form fields are sent as null
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_person(cls, person: Person) -> PersonInput:
        gender = None if person.gender == Gender.UNSPECIFIED else person.gender
        return cls(
            **person.model_dump(include=set(cls.model_fields) - {"gender"}),
            gender=gender,
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class UnionInput(BaseModel):
    """Fields accepted when creating a union."""

    model_config = ConfigDict(populate_by_name=True)

    person1_id: str
    person2_id: str
    union_id: str | None = Field(default=None, alias="unionId")
    union_type: UnionType | None = Field(default=None, alias="type")
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    place: str | None = None
    status: UnionStatus = UnionStatus.ONGOING
    notes: str | None = None

    @field_validator("person1_id", "person2_id")
    @classmethod
    def _check_endpoints(cls, value: str) -> str:
        return _require_id(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ParentOfInput(BaseModel):
    """Fields accepted when creating a parent -> child link."""

    parent_id: str
    child_id: str
    parent_type: ParentType = ParentType.BIOLOGICAL

    @field_validator("parent_id", "child_id")
    @classmethod
    def _check_endpoints(cls, value: str) -> str:
        return _require_id(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
