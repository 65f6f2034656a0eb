"""State types of the tree viewer.

Selection, context menu, dialog and drag are independent sub-states; each
holds at most one active value at a time.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from family_tree.models import Person, Position, UnionRelationship

from .forms import ParentOfForm, PersonForm, UnionForm


class LoadState(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class NodeSelection:
    """A person is selected; the detail panel shows them."""
    person: Person

    @property
    def person_id(self) -> str:
        return self.person.id


@dataclass(frozen=True)
class UnionSelection:
    """A union edge is selected; the detail panel shows the union."""
    union: UnionRelationship
    edge_id: str


Selection = NodeSelection | UnionSelection


@dataclass(frozen=True)
class ContextMenu:
    """Open context menu for a person at a screen position."""
    person_id: str
    x: float
    y: float


class ContextAction(str, Enum):
    ADD_CHILD = "add_child"
    ADD_SPOUSE = "add_spouse"
    ADD_PARENT = "add_parent"


class ModalKind(str, Enum):
    CREATE_PERSON = "create_person"
    EDIT_PERSON = "edit_person"
    CREATE_UNION = "create_union"
    CREATE_PARENT_OF = "create_parent_of"
    CONFIRM_DELETE = "confirm_delete"


MODAL_TITLES = {
    ModalKind.CREATE_PERSON: "Add Person",
    ModalKind.EDIT_PERSON: "Edit Person",
    ModalKind.CREATE_UNION: "Add Union",
    ModalKind.CREATE_PARENT_OF: "Add Parent-Child Relationship",
    ModalKind.CONFIRM_DELETE: "Confirm Delete",
}


@dataclass
class Modal:
    """The open dialog and its (possibly pre-filled) form."""
    kind: ModalKind
    form: PersonForm | UnionForm | ParentOfForm | None = None
    target: Person | None = None  # person being edited or deleted

    @property
    def title(self) -> str:
        return MODAL_TITLES[self.kind]


@dataclass(frozen=True)
class DragState:
    """A node is being dragged."""
    person_id: str
    origin: Position
