"""
Divider Mapping

Maps a dragged window edge back onto the layout tree: which split divider
moved, and what size specs make the resolved layout follow the drag.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple, Union
import logging

from ..geometry import Edge, Rect, WindowEdges
from .model import LayoutDocument, SizeKind, Split, find_leaf_path, node_at_path, size_spec_of
from .overrides import ChildSize

logger = logging.getLogger(__name__)

MIN_DIVIDER_SIZE = 50


@dataclass(frozen=True)
class DividerInfo:
    """The divider between children divider_index and divider_index + 1."""

    split_path: Tuple[int, ...]
    divider_index: int
    direction: str


def find_divider_for_resize(
    doc: LayoutDocument, leaf_id: str, edge: Union[Edge, str]
) -> Optional[DividerInfo]:
    """
    Find the divider that moves when a zone's edge is dragged.

    Starting at the leaf's parent and moving up, the first split whose
    direction matches the edge (left/right need a col split, top/bottom a
    row split) and that has a divider on that side of the path is the
    answer. Edges on the outside of the whole layout have no divider.

    Returns:
        DividerInfo, or None if no interior divider governs the edge
    """
    edge = Edge(edge)
    leaf_path = find_leaf_path(doc.root, leaf_id)
    if leaf_path is None:
        return None

    # (path to split, split, index of the child on the way to the leaf)
    ancestors: List[Tuple[Tuple[int, ...], Split, int]] = []
    node = doc.root
    for depth, child_index in enumerate(leaf_path):
        ancestors.append((tuple(leaf_path[:depth]), node, child_index))
        node = node.children[child_index]

    for split_path, split, child_index in reversed(ancestors):
        if split.dir != edge.axis_direction:
            continue
        divider_index = child_index if edge.is_trailing else child_index - 1
        if 0 <= divider_index < len(split.children) - 1:
            return DividerInfo(split_path, divider_index, split.dir.value)

    return None


def calculate_divider_drag(
    doc: LayoutDocument,
    split_path: Sequence[int],
    divider_index: int,
    delta_pixels: float,
    axis_length: float,
    min_size: float = MIN_DIVIDER_SIZE,
) -> List[ChildSize]:
    """
    Compute new size specs for the two children around a dragged divider.

    Args:
        doc: Layout the divider belongs to
        split_path: Path to the split
        divider_index: Divider between child divider_index and the next one
        delta_pixels: Divider movement along the split axis (positive = right/down)
        axis_length: Pixel length used to estimate the children's current sizes
        min_size: Smallest pixel size either child may shrink to

    Returns:
        Updated sizes for the affected children; empty if the drag maps to
        nothing
    """
    node = node_at_path(doc.root, split_path)
    if not isinstance(node, Split):
        return []
    if not 0 <= divider_index < len(node.children) - 1:
        return []

    spec_a = size_spec_of(node.children[divider_index])
    spec_b = size_spec_of(node.children[divider_index + 1])

    if spec_a.kind == SizeKind.FRAC and spec_b.kind == SizeKind.FRAC:
        total_weight = spec_a.value + spec_b.value
        if total_weight <= 0:
            logger.warning(
                "Divider drag not mapped: %s path=%s divider=%d has no weight",
                doc.name,
                list(split_path),
                divider_index,
            )
            return []
        pixels_per_weight = axis_length / total_weight

        new_a = max(min_size, spec_a.value * pixels_per_weight + delta_pixels)
        new_b = max(min_size, spec_b.value * pixels_per_weight - delta_pixels)

        # Keep the pair's combined weight so other siblings are unaffected
        weight_a = new_a / (new_a + new_b) * total_weight
        weight_b = new_b / (new_a + new_b) * total_weight
        return [
            ChildSize(divider_index, replace(spec_a, value=weight_a)),
            ChildSize(divider_index + 1, replace(spec_b, value=weight_b)),
        ]

    if spec_a.kind == SizeKind.PX:
        floor = spec_a.min_px if spec_a.min_px is not None else min_size
        return [ChildSize(divider_index, replace(spec_a, value=max(floor, spec_a.value + delta_pixels)))]

    # Only the second child is fixed
    floor = spec_b.min_px if spec_b.min_px is not None else min_size
    return [
        ChildSize(divider_index + 1, replace(spec_b, value=max(floor, spec_b.value - delta_pixels)))
    ]


def edge_deltas(start: Rect, end: Rect, edges: WindowEdges) -> List[Tuple[Edge, float]]:
    """
    Movement of each resized edge between the start and end of a grab.

    Positive deltas point right/down, matching divider movement.
    """
    result = []
    for edge in WindowEdges(edges).edges():
        if edge == Edge.LEFT:
            delta = end.x - start.x
        elif edge == Edge.RIGHT:
            delta = end.right - start.right
        elif edge == Edge.TOP:
            delta = end.y - start.y
        else:
            delta = end.bottom - start.bottom
        result.append((edge, delta))
    return result
