from __future__ import annotations

from dataclasses import dataclass

from family_tree.config import _f, _i


@dataclass(frozen=True)
class LayoutConfig:
    # Node bounding box, layout units
    node_width: float = _f("FAMILY_TREE_NODE_WIDTH", 200.0)
    node_height: float = _f("FAMILY_TREE_NODE_HEIGHT", 150.0)

    # Gaps between boxes: same rank, adjacent ranks
    node_sep: float = _f("FAMILY_TREE_NODE_SEP", 80.0)
    rank_sep: float = _f("FAMILY_TREE_RANK_SEP", 150.0)

    # Heuristic iteration counts
    ordering_passes: int = _i("FAMILY_TREE_ORDERING_PASSES", 4)
    coordinate_passes: int = _i("FAMILY_TREE_COORDINATE_PASSES", 4)

    @property
    def horizontal_spacing(self) -> float:
        """Distance between centers of adjacent nodes in a rank."""
        return self.node_width + self.node_sep

    @property
    def vertical_spacing(self) -> float:
        """Distance between centers of adjacent ranks."""
        return self.node_height + self.rank_sep


DEFAULT_LAYOUT = LayoutConfig()
