"""Renderable descriptors for the family tree diagram.

Maps a laid-out FamilyGraph to plain node/edge descriptors that a drawing
surface can consume without knowing the domain models:

- parent edges anchor bottom -> top and end in a closed arrow
- union edges anchor right -> left; ongoing unions are solid and colored,
  divorced/annulled unions are dashed
- node positions are top-left corners of fixed-size boxes

Also renders a view as a mermaid flowchart for export.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import structlog

from family_tree.layout import DEFAULT_LAYOUT, GraphLayout, LayoutConfig
from family_tree.models import (
    FamilyGraph,
    Gender,
    ParentOfRelationship,
    ParentType,
    Person,
    Position,
    UnionRelationship,
)

logger = structlog.get_logger(__name__)

EDGE_GRAY = "#9ca3af"
UNION_ACTIVE = "#6366f1"
ARROW_CLOSED = "arrowclosed"


class EdgeKind(str, Enum):
    PARENT = "parent"
    UNION = "union"


class UnionTreatment(str, Enum):
    """How a union edge is drawn."""
    ONGOING = "ongoing"  # solid, colored
    ENDED = "ended"  # dashed, gray
    INACTIVE = "inactive"  # solid, gray (widowed, separated)


@dataclass(frozen=True)
class NodeDescriptor:
    """A person box on the diagram."""
    id: str
    position: Position
    width: float
    height: float
    label: str
    initials: str
    gender_class: str
    deceased: bool = False
    lifespan: str = ""
    maiden_label: str = ""
    occupation: str | None = None
    photo_url: str | None = None
    pinned: bool = False
    person: Person | None = field(default=None, compare=False, repr=False)

    def moved_to(self, x: float, y: float) -> NodeDescriptor:
        return replace(self, position=Position(x, y))


@dataclass(frozen=True)
class EdgeDescriptor:
    """A connector between two person boxes."""
    id: str
    kind: EdgeKind
    source: str
    target: str
    source_handle: str
    target_handle: str
    stroke: str = EDGE_GRAY
    dashed: bool = False
    marker_end: str | None = None
    label: str | None = None
    treatment: UnionTreatment | None = None
    relationship: ParentOfRelationship | UnionRelationship | None = field(
        default=None, compare=False, repr=False
    )

    @property
    def selectable(self) -> bool:
        """Only union edges open a detail view."""
        return self.kind == EdgeKind.UNION


@dataclass
class TreeView:
    """Everything the drawing surface needs for one snapshot."""
    nodes: list[NodeDescriptor] = field(default_factory=list)
    edges: list[EdgeDescriptor] = field(default_factory=list)

    def node(self, node_id: str) -> NodeDescriptor | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def edge(self, edge_id: str) -> EdgeDescriptor | None:
        return next((e for e in self.edges if e.id == edge_id), None)

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Update a node's displayed position in place. False if unknown."""
        for i, node in enumerate(self.nodes):
            if node.id == node_id:
                self.nodes[i] = node.moved_to(x, y)
                return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [
                {
                    "id": n.id,
                    "position": n.position.to_dict(),
                    "width": n.width,
                    "height": n.height,
                    "label": n.label,
                    "maiden_label": n.maiden_label,
                    "initials": n.initials,
                    "gender_class": n.gender_class,
                    "deceased": n.deceased,
                    "lifespan": n.lifespan,
                    "occupation": n.occupation,
                    "photo_url": n.photo_url,
                    "pinned": n.pinned,
                }
                for n in self.nodes
            ],
            "edges": [
                {
                    "id": e.id,
                    "kind": e.kind.value,
                    "source": e.source,
                    "target": e.target,
                    "source_handle": e.source_handle,
                    "target_handle": e.target_handle,
                    "stroke": e.stroke,
                    "dashed": e.dashed,
                    "marker_end": e.marker_end,
                    "label": e.label,
                    "selectable": e.selectable,
                }
                for e in self.edges
            ],
        }


@runtime_checkable
class GestureHandler(Protocol):
    """Callbacks the drawing surface invokes on user gestures."""

    def on_node_click(self, node_id: str) -> None: ...

    def on_node_double_click(self, node_id: str) -> None: ...

    def on_node_context_menu(self, node_id: str, screen_x: float, screen_y: float) -> None: ...

    def on_edge_click(self, edge_id: str) -> None: ...

    def on_pane_click(self) -> None: ...

    def on_node_drag_start(self, node_id: str) -> None: ...

    def on_node_drag_stop(self, node_id: str, x: float, y: float) -> Any: ...


def _gender_class(gender: Gender) -> str:
    if gender == Gender.MALE:
        return "person-node-male"
    if gender == Gender.FEMALE:
        return "person-node-female"
    return "person-node-other"


def _lifespan(person: Person) -> str:
    if person.birth_year is None:
        return ""
    end = str(person.death_year) if person.death_year else "present"
    return f"{person.birth_year} - {end}"


def node_descriptor(person: Person, position: Position, config: LayoutConfig, pinned: bool = False) -> NodeDescriptor:
    return NodeDescriptor(
        id=person.id,
        position=position,
        width=config.node_width,
        height=config.node_height,
        label=person.display_name,
        initials=person.initials,
        gender_class=_gender_class(person.gender),
        deceased=person.is_deceased,
        lifespan=_lifespan(person),
        maiden_label=f"({person.maiden_name})" if person.maiden_name else "",
        occupation=person.occupation,
        photo_url=person.photo_url,
        pinned=pinned,
        person=person,
    )


def parent_edge(rel: ParentOfRelationship) -> EdgeDescriptor:
    label = rel.parent_type.value if rel.parent_type != ParentType.BIOLOGICAL else None
    return EdgeDescriptor(
        id=f"parent-{rel.parent_id}-{rel.child_id}",
        kind=EdgeKind.PARENT,
        source=rel.parent_id,
        target=rel.child_id,
        source_handle="bottom",
        target_handle="top",
        stroke=EDGE_GRAY,
        marker_end=ARROW_CLOSED,
        label=label,
        relationship=rel,
    )


def union_edge(union: UnionRelationship) -> EdgeDescriptor:
    if union.is_ongoing:
        treatment = UnionTreatment.ONGOING
    elif union.is_ended:
        treatment = UnionTreatment.ENDED
    else:
        treatment = UnionTreatment.INACTIVE
    return EdgeDescriptor(
        id=f"union-{union.person1_id}-{union.person2_id}",
        kind=EdgeKind.UNION,
        source=union.person1_id,
        target=union.person2_id,
        source_handle="right",
        target_handle="left",
        stroke=UNION_ACTIVE if treatment == UnionTreatment.ONGOING else EDGE_GRAY,
        dashed=treatment == UnionTreatment.ENDED,
        label=str(union.start_year) if union.start_year else None,
        treatment=treatment,
        relationship=union,
    )


def build_view(graph: FamilyGraph, layout: GraphLayout, config: LayoutConfig | None = None) -> TreeView:
    """Turn a snapshot and its layout into drawable descriptors.

    Edges with an endpoint missing from the snapshot are dropped.
    """
    config = config or DEFAULT_LAYOUT
    view = TreeView()
    for person in graph.nodes:
        position = layout.position_of(person.id) or Position(0.0, 0.0)
        view.nodes.append(node_descriptor(person, position, config, layout.is_pinned(person.id)))

    known = graph.person_ids
    dropped = 0
    for rel in graph.parent_of:
        if rel.parent_id in known and rel.child_id in known:
            view.edges.append(parent_edge(rel))
        else:
            dropped += 1
    for union in graph.unions:
        if union.person1_id in known and union.person2_id in known:
            view.edges.append(union_edge(union))
        else:
            dropped += 1
    if dropped:
        logger.info("view.dangling_edges_dropped", count=dropped)
    return view


def _mermaid_id(node_id: str) -> str:
    # Mermaid-safe identifier
    return "N_" + "".join(ch if ch.isalnum() else "_" for ch in node_id)[:60]


def render_mermaid(view: TreeView) -> str:
    """Render a view as a mermaid flowchart (top-down)."""
    lines = ["flowchart TD"]
    for node in view.nodes:
        label = node.label.replace('"', "'")
        if node.lifespan:
            label += f"<br/>{node.lifespan}"
        lines.append(f'  {_mermaid_id(node.id)}["{label}"]')

    for edge in view.edges:
        a, b = _mermaid_id(edge.source), _mermaid_id(edge.target)
        if edge.kind == EdgeKind.PARENT:
            arrow = f"-- {edge.label} -->" if edge.label else "-->"
        elif edge.dashed:
            arrow = "-.-"
        else:
            arrow = "---"
        lines.append(f"  {a} {arrow} {b}")
    return "\n".join(lines) + "\n"
