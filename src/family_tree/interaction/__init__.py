"""Interactive viewer state: selection, dialogs, context menu and drag."""

from .controller import TreeController
from .errors import IncompleteFormError, InteractionError, ModalConflictError
from .forms import ParentOfForm, PersonForm, UnionForm
from .state import (
    MODAL_TITLES,
    ContextAction,
    ContextMenu,
    DragState,
    LoadState,
    Modal,
    ModalKind,
    NodeSelection,
    Selection,
    UnionSelection,
)

__all__ = [
    "MODAL_TITLES",
    "ContextAction",
    "ContextMenu",
    "DragState",
    "IncompleteFormError",
    "InteractionError",
    "LoadState",
    "Modal",
    "ModalConflictError",
    "ModalKind",
    "NodeSelection",
    "ParentOfForm",
    "PersonForm",
    "Selection",
    "TreeController",
    "UnionForm",
    "UnionSelection",
]
