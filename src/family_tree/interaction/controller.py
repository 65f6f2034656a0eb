"""Interaction state machine of the family tree viewer.

The controller owns the current graph snapshot and everything the user is
doing with it:

- load state (loading / loaded / error with retry)
- selection (one node or one union edge, or nothing)
- context menu (at most one, for one person)
- dialog (at most one, optionally pre-filled)
- drag (one node at a time; the release persists the position)

All mutations go through the TreeStore and are followed by a full reload;
the snapshot is never patched locally. Overlapping loads resolve
last-request-wins: each load takes a ticket and only the newest ticket may
install its result.
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from family_tree.client import FamilyTreeAPIError, TreeStore
from family_tree.index import PersonRelationships, RelationshipIndex
from family_tree.layout import DEFAULT_LAYOUT, GraphLayout, LayoutConfig, layout_graph
from family_tree.models import FamilyGraph, Person, PersonInput
from family_tree.presentation import EdgeKind, TreeView, build_view

from .errors import IncompleteFormError, InteractionError, ModalConflictError
from .forms import ParentOfForm, PersonForm, UnionForm
from .state import (
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

logger = structlog.get_logger(__name__)


class TreeController:
    """Selection, dialogs, context menu and drag over one loaded graph.

    Example:
        async with FamilyTreeClient() as client:
            controller = TreeController(client)
            await controller.load()
            controller.on_node_click("p1")
    """

    def __init__(
        self,
        store: TreeStore,
        layout_config: LayoutConfig | None = None,
        on_fit_view: Callable[[TreeView], None] | None = None,
    ) -> None:
        self.store = store
        self.layout_config = layout_config or DEFAULT_LAYOUT
        self.on_fit_view = on_fit_view

        self.load_state = LoadState.LOADING
        self.error: str | None = None
        self.graph: FamilyGraph | None = None
        self.layout: GraphLayout | None = None
        self.view = TreeView()

        self.selection: Selection | None = None
        self.context_menu: ContextMenu | None = None
        self.modal: Modal | None = None
        self.drag: DragState | None = None
        self.inline_error: str | None = None

        self._load_ticket = 0
        self._pending_saves: set[asyncio.Task] = set()

    # =========================================================================
    # Loading
    # =========================================================================

    @property
    def is_loaded(self) -> bool:
        return self.load_state == LoadState.LOADED

    async def load(self) -> bool:
        """Fetch a fresh snapshot, lay it out and install it.

        Returns True when this call's result was installed. A load that is
        overtaken by a newer one discards its result (or its error).
        """
        self._load_ticket += 1
        ticket = self._load_ticket
        self.load_state = LoadState.LOADING
        self.error = None
        logger.debug("tree.load_started", ticket=ticket)

        try:
            graph = await self.store.get_graph()
        except FamilyTreeAPIError as e:
            if ticket != self._load_ticket:
                logger.info("tree.load_stale", ticket=ticket, latest=self._load_ticket)
                return False
            self.load_state = LoadState.ERROR
            self.error = str(e) or "Failed to load family tree"
            logger.error("tree.load_failed", ticket=ticket, status=e.status_code, error=str(e))
            return False

        if ticket != self._load_ticket:
            logger.info("tree.load_stale", ticket=ticket, latest=self._load_ticket)
            return False

        self._install(graph)
        logger.info("tree.loaded", ticket=ticket, persons=len(graph.nodes))
        return True

    async def retry(self) -> bool:
        """User-initiated reload after an error."""
        return await self.load()

    def _install(self, graph: FamilyGraph) -> None:
        layout = layout_graph(graph, self.layout_config)
        self.graph = graph
        self.layout = layout
        self.view = build_view(graph, layout, self.layout_config)
        self.load_state = LoadState.LOADED
        self._revalidate()
        if self.on_fit_view is not None:
            self.on_fit_view(self.view)

    def _revalidate(self) -> None:
        """Drop references to entities that vanished in the new snapshot."""
        if isinstance(self.selection, NodeSelection):
            person = self.graph.person(self.selection.person_id)
            self.selection = NodeSelection(person) if person else None
        elif isinstance(self.selection, UnionSelection):
            edge = self.view.edge(self.selection.edge_id)
            self.selection = UnionSelection(edge.relationship, edge.id) if edge else None

        if self.context_menu and self.graph.person(self.context_menu.person_id) is None:
            self.context_menu = None
        if self.drag and self.view.node(self.drag.person_id) is None:
            self.drag = None

    def _person(self, person_id: str) -> Person | None:
        return self.graph.person(person_id) if self.graph else None

    # =========================================================================
    # Relationship lookup
    # =========================================================================

    def relationships(self, person_id: str) -> PersonRelationships:
        if self.graph is None:
            return PersonRelationships(person_id=person_id)
        return RelationshipIndex(self.graph).for_person(person_id)

    @property
    def selected_relationships(self) -> PersonRelationships | None:
        if isinstance(self.selection, NodeSelection):
            return self.relationships(self.selection.person_id)
        return None

    async def person_choices(self) -> list[Person]:
        """People offered by relationship forms; empty if the list fails."""
        try:
            return await self.store.list_persons()
        except FamilyTreeAPIError as e:
            logger.error("tree.person_list_failed", error=str(e))
            return []

    # =========================================================================
    # Selection
    # =========================================================================

    def select_node(self, person_id: str) -> None:
        person = self._person(person_id)
        self.context_menu = None
        if person is None:
            logger.debug("tree.select_unknown_node", person_id=person_id)
            return
        self.selection = NodeSelection(person)

    def select_edge(self, edge_id: str) -> None:
        """Select a union edge. Parent edges carry no detail view."""
        self.context_menu = None
        edge = self.view.edge(edge_id)
        if edge is None or edge.kind != EdgeKind.UNION:
            return
        self.selection = UnionSelection(edge.relationship, edge.id)

    def select_background(self) -> None:
        self.selection = None
        self.context_menu = None

    def close_details(self) -> None:
        self.selection = None

    # =========================================================================
    # Context menu
    # =========================================================================

    def open_context_menu(self, person_id: str, x: float, y: float) -> None:
        if self._person(person_id) is None:
            return
        self.context_menu = ContextMenu(person_id, x, y)

    def close_context_menu(self) -> None:
        self.context_menu = None

    def choose_context_action(self, action: ContextAction) -> Modal:
        menu = self.context_menu
        if menu is None:
            raise InteractionError("No context menu is open")
        self.context_menu = None

        if action == ContextAction.ADD_CHILD:
            return self.open_create_parent_of(parent_id=menu.person_id)
        if action == ContextAction.ADD_SPOUSE:
            return self.open_create_union(person1_id=menu.person_id)
        if action == ContextAction.ADD_PARENT:
            return self.open_create_parent_of(child_id=menu.person_id)
        raise InteractionError(f"Unknown context action: {action!r}")

    # =========================================================================
    # Dialogs
    # =========================================================================

    def _open(self, modal: Modal) -> Modal:
        if self.modal is not None:
            raise ModalConflictError(f"'{self.modal.title}' dialog is already open")
        self.context_menu = None
        self.inline_error = None
        self.modal = modal
        logger.debug("tree.modal_opened", kind=modal.kind.value)
        return modal

    def _require(self, *kinds: ModalKind) -> Modal:
        if self.modal is None or self.modal.kind not in kinds:
            current = self.modal.kind.value if self.modal else None
            raise InteractionError(f"Expected one of {[k.value for k in kinds]} dialog, got {current}")
        return self.modal

    def _close(self) -> None:
        self.modal = None
        self.inline_error = None

    def open_create_person(self) -> Modal:
        return self._open(Modal(ModalKind.CREATE_PERSON, form=PersonForm()))

    def open_edit_person(self, person_id: str) -> Modal:
        person = self._person(person_id)
        if person is None:
            raise InteractionError(f"Unknown person: {person_id}")
        return self._open(Modal(ModalKind.EDIT_PERSON, form=PersonForm.for_person(person), target=person))

    def edit_selected(self) -> Modal:
        if not isinstance(self.selection, NodeSelection):
            raise InteractionError("No person selected")
        return self.open_edit_person(self.selection.person_id)

    def open_create_union(self, person1_id: str | None = None, person2_id: str | None = None) -> Modal:
        form = UnionForm(person1_id=person1_id or "", person2_id=person2_id or "")
        return self._open(Modal(ModalKind.CREATE_UNION, form=form))

    def open_create_parent_of(self, parent_id: str | None = None, child_id: str | None = None) -> Modal:
        form = ParentOfForm(parent_id=parent_id or "", child_id=child_id or "")
        return self._open(Modal(ModalKind.CREATE_PARENT_OF, form=form))

    def request_delete(self) -> Modal:
        """Ask for confirmation before deleting the selected person."""
        if not isinstance(self.selection, NodeSelection):
            raise InteractionError("No person selected")
        return self._open(Modal(ModalKind.CONFIRM_DELETE, target=self.selection.person))

    def cancel_modal(self) -> None:
        if self.modal is not None:
            logger.debug("tree.modal_cancelled", kind=self.modal.kind.value)
        self._close()

    async def submit_person(self, values: PersonInput | None = None) -> Person:
        modal = self._require(ModalKind.CREATE_PERSON, ModalKind.EDIT_PERSON)
        values = values or modal.form.values
        try:
            if modal.kind == ModalKind.EDIT_PERSON:
                person = await self.store.update_person(modal.target.id, values)
            else:
                person = await self.store.create_person(values)
        except FamilyTreeAPIError as e:
            logger.error("tree.person_save_failed", kind=modal.kind.value, error=str(e))
            raise
        logger.info("tree.person_saved", kind=modal.kind.value, person_id=person.id)
        await self.load()
        self._close()
        return person

    async def submit_union(self, form: UnionForm | None = None):
        modal = self._require(ModalKind.CREATE_UNION)
        form = form or modal.form
        if not form.can_submit:
            raise IncompleteFormError("Please select both persons")
        try:
            union = await self.store.create_union(form.to_input())
        except FamilyTreeAPIError as e:
            logger.error("tree.union_create_failed", error=str(e))
            raise
        logger.info("tree.union_created", person1_id=union.person1_id, person2_id=union.person2_id)
        await self.load()
        self._close()
        return union

    async def submit_parent_of(self, form: ParentOfForm | None = None):
        modal = self._require(ModalKind.CREATE_PARENT_OF)
        form = form or modal.form
        if not form.can_submit:
            raise IncompleteFormError("Please select both parent and child")
        try:
            rel = await self.store.create_parent_of(form.to_input())
        except FamilyTreeAPIError as e:
            logger.error("tree.parent_of_create_failed", error=str(e))
            raise
        logger.info("tree.parent_of_created", parent_id=rel.parent_id, child_id=rel.child_id)
        await self.load()
        self._close()
        return rel

    async def confirm_delete(self) -> bool:
        """Delete the person of the confirm dialog.

        Failures keep the dialog open and set `inline_error`; the rest of the
        viewer stays as it was.
        """
        modal = self._require(ModalKind.CONFIRM_DELETE)
        person = modal.target
        try:
            await self.store.delete_person(person.id)
        except FamilyTreeAPIError as e:
            self.inline_error = str(e) or "Failed to delete person"
            logger.error("tree.delete_failed", person_id=person.id, error=str(e))
            return False

        logger.info("tree.person_deleted", person_id=person.id)
        self._close()
        self.selection = None
        await self.load()
        return True

    async def submit_modal(self):
        """Submit whatever dialog is open."""
        if self.modal is None:
            raise InteractionError("No dialog is open")
        kind = self.modal.kind
        if kind in (ModalKind.CREATE_PERSON, ModalKind.EDIT_PERSON):
            return await self.submit_person()
        if kind == ModalKind.CREATE_UNION:
            return await self.submit_union()
        if kind == ModalKind.CREATE_PARENT_OF:
            return await self.submit_parent_of()
        if kind == ModalKind.CONFIRM_DELETE:
            return await self.confirm_delete()
        raise InteractionError(f"Unhandled dialog kind: {kind!r}")

    # =========================================================================
    # Dragging and manual positions
    # =========================================================================

    def begin_drag(self, person_id: str) -> None:
        node = self.view.node(person_id)
        if node is None:
            return
        self.context_menu = None
        self.drag = DragState(person_id, node.position)

    def end_drag(self, x: float, y: float, person_id: str | None = None) -> asyncio.Task | None:
        """Drop the dragged node at (x, y) and persist it in the background.

        The displayed position is kept whether or not the save succeeds.
        """
        drag, self.drag = self.drag, None
        person_id = person_id or (drag.person_id if drag else None)
        if person_id is None or not self.view.move_node(person_id, x, y):
            return None

        task = asyncio.create_task(self._save_position(person_id, x, y))
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)
        return task

    async def _save_position(self, person_id: str, x: float, y: float) -> None:
        try:
            await self.store.set_person_position(person_id, x, y)
        except Exception as e:
            # Next drag saves again
            logger.warning(
                "tree.position_save_failed",
                person_id=person_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return
        logger.debug("tree.position_saved", person_id=person_id, x=x, y=y)

    def pending_saves(self) -> frozenset[asyncio.Task]:
        return frozenset(self._pending_saves)

    async def wait_for_saves(self) -> None:
        """Await position saves still in flight."""
        if self._pending_saves:
            await asyncio.gather(*list(self._pending_saves), return_exceptions=True)

    async def reset_position(self, person_id: str) -> None:
        """Forget a manual position and return the person to auto-layout."""
        try:
            await self.store.clear_person_position(person_id)
        except FamilyTreeAPIError as e:
            logger.error("tree.position_reset_failed", person_id=person_id, error=str(e))
            raise
        await self.load()

    # =========================================================================
    # GestureHandler
    # =========================================================================

    def on_node_click(self, node_id: str) -> None:
        self.select_node(node_id)

    def on_node_double_click(self, node_id: str) -> None:
        if self.modal is not None:
            logger.debug("tree.gesture_ignored", gesture="double_click", node_id=node_id)
            return
        self.open_edit_person(node_id)

    def on_node_context_menu(self, node_id: str, screen_x: float, screen_y: float) -> None:
        self.open_context_menu(node_id, screen_x, screen_y)

    def on_edge_click(self, edge_id: str) -> None:
        self.select_edge(edge_id)

    def on_pane_click(self) -> None:
        self.select_background()

    def on_node_drag_start(self, node_id: str) -> None:
        self.begin_drag(node_id)

    def on_node_drag_stop(self, node_id: str, x: float, y: float) -> asyncio.Task | None:
        return self.end_drag(x, y, person_id=node_id)
