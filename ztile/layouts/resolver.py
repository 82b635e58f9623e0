"""
Layout Resolver

Turns a layout tree plus a target rectangle into integer pixel rectangles
for every zone.

Each split hands its children integer sizes that add up exactly to the
space it has along its axis, so adjacent siblings never overlap and never
leave a gap other than the configured inner gap.
"""

from __future__ import annotations
import copy
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ..geometry import Insets, Rect, round_half_up
from .model import (
    AspectPolicy,
    Direction,
    LayoutDefaults,
    LayoutDocument,
    Leaf,
    Node,
    SizeKind,
    SizeSpec,
    Split,
    node_at_path,
    size_spec_of,
)
from .overrides import Override

logger = logging.getLogger(__name__)


@dataclass
class ResolvedRect:
    """Geometry for one zone."""

    tile_rect: Rect  # Full allocated cell
    window_rect: Rect  # Cell shrunk by insets and aspect-fitted


def resolve_layout(
    doc: LayoutDocument,
    target_rect: Rect,
    overrides: Iterable[Override] = (),
) -> Dict[str, ResolvedRect]:
    """
    Resolve a layout to pixel rectangles.

    Args:
        doc: A validated layout document
        target_rect: Work area to fill
        overrides: Divider overrides; only those for doc.name apply

    Returns:
        Dictionary mapping leaf id to its ResolvedRect, in depth-first order
    """
    resolved_doc = apply_overrides(doc, overrides)
    results: Dict[str, ResolvedRect] = {}
    root_rect = Rect(target_rect.x, target_rect.y, target_rect.width, target_rect.height)
    _resolve_node(resolved_doc.root, root_rect, resolved_doc.defaults, results, is_root=True)
    return results


def apply_overrides(doc: LayoutDocument, overrides: Iterable[Override]) -> LayoutDocument:
    """
    Return a copy of doc with override child sizes written into it.

    An override whose path does not lead to a split is skipped on its own;
    the remaining overrides still apply. doc itself is never modified.
    """
    overrides = list(overrides)
    modified = copy.deepcopy(doc)
    if not overrides:
        return modified

    for override in overrides:
        if override.layout_name != doc.name:
            continue

        node = node_at_path(modified.root, override.branch_path)
        if not isinstance(node, Split):
            logger.debug(
                "Skipping override for %s: no split at path %s",
                doc.name,
                list(override.branch_path),
            )
            continue

        for child_size in override.child_sizes:
            if 0 <= child_size.child_index < len(node.children):
                node.children[child_size.child_index].size = child_size.size

    return modified


def _resolve_node(
    node: Node,
    rect: Rect,
    defaults: LayoutDefaults,
    results: Dict[str, ResolvedRect],
    is_root: bool = False,
):
    if isinstance(node, Leaf):
        _resolve_leaf(node, rect, defaults, results)
    elif isinstance(node, Split):
        _resolve_split(node, rect, defaults, results, is_root)
    else:
        raise TypeError(f"Unknown layout node: {node!r}")


def _resolve_leaf(
    node: Leaf, rect: Rect, defaults: LayoutDefaults, results: Dict[str, ResolvedRect]
):
    insets = node.insets if node.insets is not None else defaults.leaf_insets
    window_rect = rect.inset(insets)

    if node.aspect is not None:
        if node.aspect.policy == AspectPolicy.FIT and node.aspect.ratio > 0:
            window_rect = fit_aspect(window_rect, node.aspect.ratio)

    results[node.id] = ResolvedRect(
        tile_rect=rect.rounded(),
        window_rect=window_rect.rounded(),
    )


def fit_aspect(rect: Rect, ratio: float) -> Rect:
    """
    Shrink rect to the width/height ratio, centred.

    Too wide: pillarbox (narrower, centred horizontally).
    Too tall: letterbox (shorter, centred vertically).
    """
    if rect.width <= 0 or rect.height <= 0:
        return rect

    current = rect.width / rect.height
    if current > ratio:
        width = rect.height * ratio
        return Rect(rect.x + (rect.width - width) / 2, rect.y, width, rect.height)
    if current < ratio:
        height = rect.width / ratio
        return Rect(rect.x, rect.y + (rect.height - height) / 2, rect.width, height)
    return rect


def _split_gaps(node: Split, defaults: LayoutDefaults, is_root: bool):
    gap_inner = node.gap_inner if node.gap_inner is not None else defaults.gap_inner
    # Default outer gap applies at the root only so it never compounds
    if node.gap_outer is not None:
        gap_outer = node.gap_outer
    elif is_root:
        gap_outer = defaults.gap_outer
    else:
        gap_outer = Insets()
    return gap_inner, gap_outer


def _axis_lengths(node: Split, usable: Rect):
    if node.dir == Direction.ROW:
        return usable.height, usable.width
    return usable.width, usable.height


def _resolve_split(
    node: Split,
    rect: Rect,
    defaults: LayoutDefaults,
    results: Dict[str, ResolvedRect],
    is_root: bool,
):
    for child, child_rect in zip(node.children, _child_rects(node, rect, defaults, is_root)):
        _resolve_node(child, child_rect, defaults, results)


def allocate_child_sizes(specs: Sequence[SizeSpec], available: float) -> List[float]:
    """
    Allocate space along a split's axis.

    Fixed (px) children are clamped and reserved first; what remains is
    shared among frac children by weight, each result clamped to its own
    min/max. Clamping is a single pass: space freed or claimed by a clamp is
    not redistributed to the other frac children.
    """
    specs = [spec.normalized() for spec in specs]
    sizes = [0.0] * len(specs)

    px_total = 0.0
    frac_indices = []
    for i, spec in enumerate(specs):
        if spec.kind == SizeKind.PX:
            sizes[i] = spec.clamp(spec.value)
            px_total += sizes[i]
        else:
            frac_indices.append(i)

    remaining = max(0, available - px_total)
    total_weight = sum(specs[i].value for i in frac_indices)

    if frac_indices and total_weight > 0:
        for i in frac_indices:
            sizes[i] = specs[i].clamp(remaining * specs[i].value / total_weight)

    return sizes


def apply_rounding(sizes: Sequence[float], available: float) -> List[int]:
    """
    Convert fractional sizes to integers deterministically.

    Every size is floored, then the pixels lost to flooring are handed out
    one per child in index order, so the first children absorb the
    remainder. For unclamped sizes the result sums to round(available).
    """
    result = [int(math.floor(size)) for size in sizes]
    leftover = round_half_up(available) - sum(result)

    for i in range(len(result)):
        if leftover <= 0:
            break
        result[i] += 1
        leftover -= 1

    return result


def split_child_sizes(
    doc: LayoutDocument,
    target_rect: Rect,
    split_path: Sequence[int],
    overrides: Iterable[Override] = (),
) -> Optional[List[float]]:
    """
    Resolved axis size of each child of the split at split_path.

    Nested splits only get part of target_rect, so this walks the same
    arithmetic as resolve_layout down the path. Returns None when the path
    does not lead to a split.
    """
    resolved_doc = apply_overrides(doc, overrides)
    defaults = resolved_doc.defaults
    node: Node = resolved_doc.root
    rect = Rect(target_rect.x, target_rect.y, target_rect.width, target_rect.height)
    is_root = True

    for index in split_path:
        if not isinstance(node, Split) or not 0 <= index < len(node.children):
            return None
        rect = _child_rects(node, rect, defaults, is_root)[index]
        node = node.children[index]
        is_root = False

    if not isinstance(node, Split):
        return None

    is_row = node.dir == Direction.ROW
    return [r.height if is_row else r.width for r in _child_rects(node, rect, defaults, is_root)]


def _child_rects(node: Split, rect: Rect, defaults: LayoutDefaults, is_root: bool) -> List[Rect]:
    """Rects a split assigns to its children, laid out along its axis."""
    gap_inner, gap_outer = _split_gaps(node, defaults, is_root)
    usable = rect.inset(gap_outer)
    axis_length, cross_length = _axis_lengths(node, usable)
    axis_available = max(0, axis_length - gap_inner * (len(node.children) - 1))

    specs = [size_spec_of(child) for child in node.children]
    sizes = apply_rounding(allocate_child_sizes(specs, axis_available), axis_available)

    is_row = node.dir == Direction.ROW
    offset = usable.y if is_row else usable.x
    rects = []
    for size in sizes:
        if is_row:
            rects.append(Rect(usable.x, offset, cross_length, size))
        else:
            rects.append(Rect(offset, usable.y, size, cross_length))
        offset += size + gap_inner
    return rects
