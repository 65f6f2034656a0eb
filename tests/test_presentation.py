"""Tests for the presentation adapter."""
from __future__ import annotations

from family_tree.layout import LayoutConfig, layout_graph
from family_tree.models import ParentOfRelationship, UnionRelationship
from family_tree.presentation import (
    ARROW_CLOSED,
    EDGE_GRAY,
    UNION_ACTIVE,
    EdgeKind,
    GestureHandler,
    UnionTreatment,
    build_view,
    parent_edge,
    render_mermaid,
    union_edge,
)
from family_tree.interaction import TreeController

from .conftest import InMemoryTreeStore, make_graph

CONFIG = LayoutConfig(node_width=200, node_height=150, node_sep=80, rank_sep=150)


class TestEdges:
    """Tests for edge descriptors."""

    def test_parent_edge(self):
        """Test parent edges run bottom -> top with a closed arrow."""
        edge = parent_edge(ParentOfRelationship(parent_id="A", child_id="C"))
        assert edge.id == "parent-A-C"
        assert edge.kind == EdgeKind.PARENT
        assert (edge.source, edge.target) == ("A", "C")
        assert (edge.source_handle, edge.target_handle) == ("bottom", "top")
        assert edge.marker_end == ARROW_CLOSED
        assert edge.stroke == EDGE_GRAY
        assert edge.label is None
        assert not edge.selectable

    def test_non_biological_parent_labelled(self):
        edge = parent_edge(ParentOfRelationship(parent_id="A", child_id="C", parent_type="step"))
        assert edge.label == "step"

    def test_ongoing_union(self):
        """Test an ongoing union is solid and colored, labelled with its year."""
        edge = union_edge(UnionRelationship(person1_id="A", person2_id="B", start_date="1972-06-01"))
        assert edge.id == "union-A-B"
        assert (edge.source_handle, edge.target_handle) == ("right", "left")
        assert edge.stroke == UNION_ACTIVE
        assert not edge.dashed
        assert edge.label == "1972"
        assert edge.treatment == UnionTreatment.ONGOING
        assert edge.marker_end is None
        assert edge.selectable

    def test_divorced_union_dashed(self):
        """Test divorced and annulled unions use the ended treatment."""
        for status in ("divorced", "annulled"):
            edge = union_edge(UnionRelationship(person1_id="A", person2_id="B", status=status))
            assert edge.dashed
            assert edge.stroke == EDGE_GRAY
            assert edge.treatment == UnionTreatment.ENDED

    def test_widowed_union_inactive(self):
        edge = union_edge(UnionRelationship(person1_id="A", person2_id="B", status="widowed"))
        assert not edge.dashed
        assert edge.stroke == EDGE_GRAY
        assert edge.treatment == UnionTreatment.INACTIVE
        assert edge.label is None


class TestBuildView:
    """Tests for build_view."""

    def test_nodes_follow_layout(self, family):
        """Test node descriptors carry positions, box size and display text."""
        layout = layout_graph(family, CONFIG)
        view = build_view(family, layout, CONFIG)

        assert [n.id for n in view.nodes] == ["A", "B", "C"]
        for node in view.nodes:
            assert node.position == layout.position_of(node.id)
            assert (node.width, node.height) == (200, 150)

        alice = view.node("A")
        assert alice.label == "Alice Smith"
        assert alice.initials == "AS"
        assert alice.gender_class == "person-node-female"
        assert alice.lifespan == "1950 - present"
        assert view.node("C").gender_class == "person-node-other"

    def test_edges(self, family):
        view = build_view(family, layout_graph(family, CONFIG), CONFIG)
        assert [e.id for e in view.edges] == ["parent-A-C", "parent-B-C", "union-A-B"]

    def test_dangling_edges_dropped(self):
        """Test edges with a missing endpoint are not rendered."""
        graph = make_graph(["A", "B"], parents=[("A", "B"), ("A", "ghost")], unions=[("ghost", "B")])
        view = build_view(graph, layout_graph(graph, CONFIG), CONFIG)
        assert [e.id for e in view.edges] == ["parent-A-B"]

    def test_pinned_flag(self):
        graph = make_graph([{"id": "A", "position_x": 5, "position_y": 7}, "B"])
        view = build_view(graph, layout_graph(graph, CONFIG), CONFIG)
        assert view.node("A").pinned
        assert view.node("A").position.x == 5
        assert not view.node("B").pinned

    def test_move_node(self, family):
        view = build_view(family, layout_graph(family, CONFIG), CONFIG)
        assert view.move_node("C", 320, 140)
        assert view.node("C").position.to_dict() == {"x": 320, "y": 140}
        assert not view.move_node("nobody", 1, 1)

    def test_to_dict(self, family):
        data = build_view(family, layout_graph(family, CONFIG), CONFIG).to_dict()
        assert len(data["nodes"]) == 3
        assert data["nodes"][0]["position"] == {"x": 0, "y": 0}
        union = data["edges"][-1]
        assert union["kind"] == "union"
        assert union["selectable"] is True
        assert union["label"] == "1972"


def test_render_mermaid():
    """Test the mermaid export draws every node and edge."""
    graph = make_graph(
        ["A", "B", "C"],
        parents=[("A", "C")],
        unions=[{"person1_id": "A", "person2_id": "B", "status": "divorced"}],
    )
    text = render_mermaid(build_view(graph, layout_graph(graph, CONFIG), CONFIG))
    lines = text.splitlines()
    assert lines[0] == "flowchart TD"
    assert '  N_A["A"]' in lines
    assert "  N_A --> N_C" in lines
    assert "  N_A -.- N_B" in lines


def test_controller_satisfies_gesture_handler():
    assert isinstance(TreeController(InMemoryTreeStore()), GestureHandler)
