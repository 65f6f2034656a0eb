"""Relationship (graph edge) models.

Two kinds of edges connect people:

- ParentOfRelationship: directed, parent -> child, drives the layered layout
- UnionRelationship: undirected partnership, drawn between laid-out nodes
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .person import year_of


class ParentType(str, Enum):
    """Kind of parentage."""

    BIOLOGICAL = "biological"
    ADOPTIVE = "adoptive"
    STEP = "step"
    FOSTER = "foster"


class UnionType(str, Enum):
    """Kind of union between two people."""

    MARRIAGE = "marriage"
    PARTNERSHIP = "partnership"
    CIVIL_UNION = "civil_union"
    OTHER = "other"


class UnionStatus(str, Enum):
    """Current state of a union."""

    ONGOING = "ongoing"
    DIVORCED = "divorced"
    ANNULLED = "annulled"
    WIDOWED = "widowed"
    SEPARATED = "separated"


# Statuses drawn with the "ended" (dashed) treatment
ENDED_STATUSES = frozenset({UnionStatus.DIVORCED, UnionStatus.ANNULLED})


class ParentOfRelationship(BaseModel):
    """Parent -> child link."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True, extra="ignore")

    kind: Literal["parent_of"] = "parent_of"
    parent_id: str
    child_id: str
    parent_type: ParentType = ParentType.BIOLOGICAL

    @field_validator("parent_type", mode="before")
    @classmethod
    def _default_parent_type(cls, value: Any) -> Any:
        if value is None or value == "":
            return ParentType.BIOLOGICAL
        return value

    @property
    def key(self) -> tuple[str, str]:
        return (self.parent_id, self.child_id)


class UnionRelationship(BaseModel):
    """Marriage or partnership between two people.

    Stored with a fixed person1/person2 order, treated symmetrically.
    """

    model_config = ConfigDict(
        frozen=True,
        coerce_numbers_to_str=True,
        populate_by_name=True,
        extra="ignore",
    )

    kind: Literal["union"] = "union"
    person1_id: str
    person2_id: str
    union_id: str | None = Field(default=None, alias="unionId")
    union_type: UnionType | None = Field(default=None, alias="type")
    status: UnionStatus = UnionStatus.ONGOING
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    place: str | None = None
    notes: str | None = None

    @field_validator("union_type", mode="before")
    @classmethod
    def _coerce_union_type(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, UnionType):
            return value
        try:
            return UnionType(str(value).strip().lower())
        except ValueError:
            return UnionType.OTHER

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        if value is None or value == "":
            return UnionStatus.ONGOING
        return value

    @property
    def is_ongoing(self) -> bool:
        return self.status == UnionStatus.ONGOING

    @property
    def is_ended(self) -> bool:
        return self.status in ENDED_STATUSES

    @property
    def start_year(self) -> int | None:
        return year_of(self.start_date)

    def involves(self, person_id: str) -> bool:
        return person_id in (self.person1_id, self.person2_id)

    def partner_of(self, person_id: str) -> str:
        """Return the other endpoint of the union."""
        if person_id == self.person1_id:
            return self.person2_id
        if person_id == self.person2_id:
            return self.person1_id
        raise ValueError(f"{person_id!r} is not part of this union")
