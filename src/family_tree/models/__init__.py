"""Pydantic data models."""

from .graph import Entity, FamilyGraph
from .inputs import ParentOfInput, PersonInput, UnionInput
from .person import Gender, Person, Position
from .relationship import (
    ENDED_STATUSES,
    ParentOfRelationship,
    ParentType,
    UnionRelationship,
    UnionStatus,
    UnionType,
)

__all__ = [
    "ENDED_STATUSES",
    "Entity",
    "FamilyGraph",
    "Gender",
    "ParentOfInput",
    "ParentOfRelationship",
    "ParentType",
    "Person",
    "PersonInput",
    "Position",
    "UnionInput",
    "UnionRelationship",
    "UnionStatus",
    "UnionType",
]
