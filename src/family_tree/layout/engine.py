"""Layered (Sugiyama-style) layout of the parent-of hierarchy.

Pipeline, top to bottom:

1. Rank every person by longest path from a root (no incoming parent-of edge).
2. Order each rank to reduce edge crossings (median heuristic sweeps).
3. Assign coordinates with fixed node/rank separation, then convert each
   center to the top-left corner of the node box.
4. Replace the result with the persisted position for manually placed people.

Union edges never enter the hierarchy; they are drawn between whatever
positions the hierarchy produced.

Every call builds its own working graph, so concurrent or repeated calls
share no state. Identical input yields identical output.
"""
from __future__ import annotations

import heapq
from collections.abc import Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field

import networkx as nx
import structlog

from family_tree.models import FamilyGraph, Position

from .config import DEFAULT_LAYOUT, LayoutConfig

logger = structlog.get_logger(__name__)

Edge = tuple[str, str]


@dataclass(frozen=True)
class GraphLayout:
    """Result of a layout run."""
    positions: dict[str, Position] = field(default_factory=dict)
    computed: dict[str, Position] = field(default_factory=dict)  # before override
    ranks: dict[str, int] = field(default_factory=dict)
    pinned: frozenset[str] = frozenset()
    broken_edges: tuple[Edge, ...] = ()

    @property
    def rank_count(self) -> int:
        return max(self.ranks.values(), default=-1) + 1

    def position_of(self, person_id: str) -> Position | None:
        return self.positions.get(person_id)

    def is_pinned(self, person_id: str) -> bool:
        return person_id in self.pinned


def _median(values: list[float]) -> float:
    values = sorted(values)
    mid = len(values) // 2
    if len(values) % 2:
        return values[mid]
    return (values[mid - 1] + values[mid]) / 2


def _resolve(layer: list[Hashable], desired: dict[Hashable, float], spacing: float) -> dict[Hashable, float]:
    """Closest positions to `desired` keeping order and minimum spacing.

    Averages a left-to-right and a right-to-left packing; both respect the
    spacing constraint so their mean does too.
    """
    left: list[float] = []
    prev = float("-inf")
    for node in layer:
        prev = max(desired[node], prev + spacing)
        left.append(prev)

    right: list[float] = [0.0] * len(layer)
    nxt = float("inf")
    for i in range(len(layer) - 1, -1, -1):
        nxt = min(desired[layer[i]], nxt - spacing)
        right[i] = nxt

    return {node: (left[i] + right[i]) / 2 for i, node in enumerate(layer)}


class _LayeredLayout:
    """Working state for a single layout run. Never reused across calls."""

    def __init__(self, node_ids: Sequence[str], edges: Iterable[Edge], config: LayoutConfig) -> None:
        self.config = config
        self.node_ids = list(dict.fromkeys(node_ids))
        self.order = {n: i for i, n in enumerate(self.node_ids)}

        self.graph = nx.DiGraph()
        self.graph.add_nodes_from(self.node_ids)
        skipped = 0
        for parent, child in edges:
            if parent == child or parent not in self.order or child not in self.order:
                skipped += 1
                continue
            self.graph.add_edge(parent, child)
        if skipped:
            logger.debug("layout.edges_skipped", count=skipped)

        # Layer graph with virtual nodes on long edges
        self.layered = nx.DiGraph()
        self.seq: dict[Hashable, int] = {}
        self.level: dict[Hashable, int] = {}

    # --- Step 1: ranking ---------------------------------------------------

    def assign_ranks(self) -> tuple[dict[str, int], list[Edge]]:
        """Longest-path ranking in Kahn order.

        Cyclic input: when no node is ready, the earliest remaining node in
        input order is forced and its unranked in-edges are recorded as
        broken. This terminates on any input but does not promise a
        meaningful layering for cycles.
        """
        g = self.graph
        indegree = {n: g.in_degree(n) for n in self.node_ids}
        heap = [(self.order[n], n) for n in self.node_ids if indegree[n] == 0]
        heapq.heapify(heap)

        ranks: dict[str, int] = {}
        broken: list[Edge] = []
        remaining = set(self.node_ids)

        while remaining:
            if not heap:
                forced = min(remaining, key=self.order.__getitem__)
                broken.extend((pred, forced) for pred in g.predecessors(forced) if pred not in ranks)
                logger.warning("layout.cycle_broken", node=forced)
                heapq.heappush(heap, (self.order[forced], forced))

            _, node = heapq.heappop(heap)
            if node in ranks:
                continue

            ranks[node] = max((ranks[p] + 1 for p in g.predecessors(node) if p in ranks), default=0)
            remaining.discard(node)

            for child in g.successors(node):
                if child in ranks:
                    continue
                indegree[child] -= 1
                if indegree[child] == 0:
                    heapq.heappush(heap, (self.order[child], child))

        return ranks, broken

    def build_layer_graph(self, ranks: dict[str, int], broken: list[Edge]) -> None:
        broken_set = set(broken)
        for node in self.node_ids:
            self._add_layer_node(node, ranks[node])

        for parent, child in self.graph.edges:
            if (parent, child) in broken_set:
                continue
            prev: Hashable = parent
            for level in range(ranks[parent] + 1, ranks[child]):
                virtual = ("virtual", parent, child, level)
                self._add_layer_node(virtual, level)
                self.layered.add_edge(prev, virtual)
                prev = virtual
            self.layered.add_edge(prev, child)

    def _add_layer_node(self, node: Hashable, level: int) -> None:
        self.layered.add_node(node)
        self.seq[node] = len(self.seq)
        self.level[node] = level

    # --- Step 2: crossing reduction ----------------------------------------

    def initial_order(self) -> list[list[Hashable]]:
        depth = max(self.level.values(), default=-1) + 1
        buckets: list[list[Hashable]] = [[] for _ in range(depth)]
        for node in self.layered.nodes:
            buckets[self.level[node]].append(node)

        layers: list[list[Hashable]] = []
        for level, bucket in enumerate(buckets):
            if level == 0:
                layers.append(sorted(bucket, key=self.seq.__getitem__))
                continue
            above = {n: i for i, n in enumerate(layers[level - 1])}

            def barycenter(node: Hashable, above: dict = above) -> tuple[float, int]:
                preds = [above[p] for p in self.layered.predecessors(node) if p in above]
                center = sum(preds) / len(preds) if preds else float(len(above))
                return (center, self.seq[node])

            layers.append(sorted(bucket, key=barycenter))
        return layers

    def _sweep(self, layers: list[list[Hashable]], downward: bool) -> None:
        levels = range(1, len(layers)) if downward else range(len(layers) - 2, -1, -1)
        for level in levels:
            fixed = layers[level - 1] if downward else layers[level + 1]
            fixed_pos = {n: i for i, n in enumerate(fixed)}
            current = {n: i for i, n in enumerate(layers[level])}
            keys: dict[Hashable, float] = {}
            for node in layers[level]:
                neighbors = self.layered.predecessors(node) if downward else self.layered.successors(node)
                pos = [fixed_pos[n] for n in neighbors if n in fixed_pos]
                keys[node] = _median(pos) if pos else float(current[node])
            layers[level].sort(key=lambda n: (keys[n], current[n]))

    def _crossings(self, layers: list[list[Hashable]]) -> int:
        total = 0
        for level in range(len(layers) - 1):
            upper = {n: i for i, n in enumerate(layers[level])}
            lower = {n: i for i, n in enumerate(layers[level + 1])}
            segments = [
                (upper[u], lower[v])
                for u in layers[level]
                for v in self.layered.successors(u)
                if v in lower
            ]
            for i, (a1, b1) in enumerate(segments):
                for a2, b2 in segments[i + 1:]:
                    if (a1 - a2) * (b1 - b2) < 0:
                        total += 1
        return total

    def reduce_crossings(self, layers: list[list[Hashable]]) -> list[list[Hashable]]:
        best = [list(layer) for layer in layers]
        best_count = self._crossings(best)
        for i in range(self.config.ordering_passes):
            if best_count == 0:
                break
            self._sweep(layers, downward=(i % 2 == 0))
            count = self._crossings(layers)
            if count < best_count:
                best = [list(layer) for layer in layers]
                best_count = count
        logger.debug("layout.ordered", crossings=best_count)
        return best

    # --- Step 3: coordinates -----------------------------------------------

    def assign_x(self, layers: list[list[Hashable]]) -> dict[Hashable, float]:
        spacing = self.config.horizontal_spacing
        x: dict[Hashable, float] = {}
        for layer in layers:
            offset = (len(layer) - 1) / 2
            for i, node in enumerate(layer):
                x[node] = (i - offset) * spacing

        for _ in range(self.config.coordinate_passes):
            for downward in (True, False):
                levels = range(1, len(layers)) if downward else range(len(layers) - 2, -1, -1)
                for level in levels:
                    layer = layers[level]
                    desired: dict[Hashable, float] = {}
                    for node in layer:
                        neighbors = list(
                            self.layered.predecessors(node) if downward else self.layered.successors(node)
                        )
                        if neighbors:
                            desired[node] = sum(x[n] for n in neighbors) / len(neighbors)
                        else:
                            desired[node] = x[node]
                    x.update(_resolve(layer, desired, spacing))
        return x

    def run(self) -> tuple[dict[str, int], dict[str, Position], list[Edge]]:
        if not self.node_ids:
            return {}, {}, []

        ranks, broken = self.assign_ranks()
        self.build_layer_graph(ranks, broken)
        layers = self.reduce_crossings(self.initial_order())
        x = self.assign_x(layers)

        cfg = self.config
        min_x = min(x[n] for n in self.node_ids)
        computed: dict[str, Position] = {}
        for node in self.node_ids:
            center_x = x[node] - min_x + cfg.node_width / 2
            center_y = ranks[node] * cfg.vertical_spacing + cfg.node_height / 2
            computed[node] = Position(center_x - cfg.node_width / 2, center_y - cfg.node_height / 2)
        return ranks, computed, broken


def compute_layout(
    node_ids: Sequence[str],
    edges: Iterable[Edge],
    persisted: Mapping[str, tuple[float, float]] | None = None,
    config: LayoutConfig | None = None,
) -> GraphLayout:
    """Lay out people from their parent -> child edges.

    Args:
        node_ids: Person ids, in a stable order (ties resolve by this order)
        edges: (parent_id, child_id) pairs; unknown endpoints are ignored
        persisted: Stored positions; these win over computed ones per node
        config: Box size, separations and pass counts

    Returns:
        GraphLayout with final and pre-override positions
    """
    config = config or DEFAULT_LAYOUT
    persisted = persisted or {}

    ranks, computed, broken = _LayeredLayout(node_ids, edges, config).run()

    positions = dict(computed)
    pinned = set()
    for node_id, (px, py) in persisted.items():
        if node_id in positions:
            positions[node_id] = Position(px, py)
            pinned.add(node_id)

    logger.debug(
        "layout.computed",
        nodes=len(positions),
        ranks=max(ranks.values(), default=-1) + 1,
        pinned=len(pinned),
        broken_edges=len(broken),
    )
    return GraphLayout(
        positions=positions,
        computed=computed,
        ranks=ranks,
        pinned=frozenset(pinned),
        broken_edges=tuple(broken),
    )


def layout_graph(graph: FamilyGraph, config: LayoutConfig | None = None) -> GraphLayout:
    """Lay out a loaded snapshot, honouring persisted positions."""
    return compute_layout(
        [p.id for p in graph.nodes],
        [rel.key for rel in graph.parent_of],
        graph.persisted_positions(),
        config,
    )
