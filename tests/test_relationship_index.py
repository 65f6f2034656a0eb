"""Tests for the relationship index."""
from __future__ import annotations

from family_tree.index import RelationshipIndex
from family_tree.models import FamilyGraph, ParentType

from .conftest import make_graph


class TestRelationshipIndex:
    """Tests for RelationshipIndex."""

    def test_parents_children_spouses(self, family):
        """Test the three relation kinds around the sample family."""
        index = RelationshipIndex(family)

        parents = index.parents("C")
        assert [p.person.id for p in parents] == ["A", "B"]
        assert all(p.parent_type == ParentType.BIOLOGICAL for p in parents)

        assert [c.person.id for c in index.children("A")] == ["C"]
        assert index.children("C") == []

        spouses = index.spouses("B")
        assert [s.person.id for s in spouses] == ["A"]
        assert spouses[0].union.start_year == 1972

    def test_union_is_symmetric(self, family):
        """Test both partners see each other."""
        index = RelationshipIndex(family)
        assert index.spouses("A")[0].person.id == "B"
        assert index.spouses("B")[0].person.id == "A"

    def test_unrelated_person_is_empty(self):
        """Test a person with no relationships."""
        graph = make_graph(["X", "Y"], parents=[("X", "Y")])
        rels = RelationshipIndex(graph).for_person("Z")
        assert rels.is_empty
        assert rels.person_id == "Z"

    def test_dangling_endpoints_skipped(self):
        """Test relationships pointing at missing people are ignored."""
        graph = make_graph(["A"], parents=[("ghost", "A"), ("A", "ghost")], unions=[("A", "ghost")])
        rels = RelationshipIndex(graph).for_person("A")
        assert rels.parents == []
        assert rels.children == []
        assert rels.spouses == []

    def test_parent_type_carried(self):
        graph = FamilyGraph.model_validate(
            {
                "nodes": [{"id": "P"}, {"id": "K"}],
                "parentOf": [{"parent_id": "P", "child_id": "K", "parent_type": "adoptive"}],
            }
        )
        index = RelationshipIndex(graph)
        assert index.parents("K")[0].parent_type == ParentType.ADOPTIVE
        assert index.children("P")[0].parent_type == ParentType.ADOPTIVE

    def test_multiple_spouses(self):
        graph = make_graph(["A", "B", "C"], unions=[("A", "B"), ("C", "A")])
        spouses = RelationshipIndex(graph).spouses("A")
        assert [s.person.id for s in spouses] == ["B", "C"]
