"""Person (graph node) model.

Field names follow the wire format of the family tree store.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_YEAR_RE = re.compile(r"^\s*(\d{4})")


class Gender(str, Enum):
    """Gender of a person as shown on the diagram."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class Position:
    """A point in layout units (top-left corner of a node box)."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


def year_of(value: str | None) -> int | None:
    """Extract the year from an ISO-ish date string ('1950-03-01' -> 1950)."""
    if not value:
        return None
    match = _YEAR_RE.match(value)
    return int(match.group(1)) if match else None


class Person(BaseModel):
    """Individual in the family tree."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True, extra="ignore")

    kind: Literal["person"] = "person"
    id: str = Field(min_length=1)

    # Names
    first_name: str | None = None
    last_name: str | None = None
    maiden_name: str | None = None

    # Vitals
    gender: Gender = Gender.UNSPECIFIED
    birth_date: str | None = None
    death_date: str | None = None
    birth_place: str | None = None
    death_place: str | None = None

    # Details
    occupation: str | None = None
    notes: str | None = None
    photo_url: str | None = None
    email: str | None = None
    phone: str | None = None
    current_address: str | None = None
    data: str | None = Field(default=None, description="Opaque stringified JSON")

    # Manual placement; absent unless the user dragged the node
    position_x: float | None = None
    position_y: float | None = None

    @field_validator("gender", mode="before")
    @classmethod
    def _coerce_gender(cls, value: Any) -> Gender:
        if value is None or value == "":
            return Gender.UNSPECIFIED
        if isinstance(value, Gender):
            return value
        try:
            return Gender(str(value).strip().lower())
        except ValueError:
            return Gender.OTHER

    @property
    def persisted_position(self) -> Position | None:
        """Stored position, only when both coordinates are present."""
        if self.position_x is None or self.position_y is None:
            return None
        return Position(self.position_x, self.position_y)

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or "Unknown"

    @property
    def initials(self) -> str:
        first = (self.first_name or "")[:1]
        last = (self.last_name or "")[:1]
        return (first + last).upper() or "?"

    @property
    def birth_year(self) -> int | None:
        return year_of(self.birth_date)

    @property
    def death_year(self) -> int | None:
        return year_of(self.death_date)

    @property
    def is_deceased(self) -> bool:
        return self.death_date is not None
