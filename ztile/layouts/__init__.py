"""
Layout Engine

Layout trees, validation, pixel resolution, divider mapping and overrides.
"""

from .model import (
    LayoutError,
    SizeKind,
    SizeSpec,
    Direction,
    AspectPolicy,
    Aspect,
    Leaf,
    Split,
    Node,
    LayoutDefaults,
    LayoutDocument,
    iter_leaves,
    leaf_ids,
    find_leaf_path,
    node_at_path,
)
from .validator import ValidationResult, validate_layout, validate_document, validate_size_spec
from .overrides import ChildSize, Override, OverrideStore
from .resolver import (
    ResolvedRect,
    resolve_layout,
    apply_overrides,
    allocate_child_sizes,
    apply_rounding,
    split_child_sizes,
)
from .divider import DividerInfo, find_divider_for_resize, calculate_divider_drag, edge_deltas
from .presets import PRESET_LAYOUTS
from .manager import LayoutManager, SplitLayout, ZoneHit

__all__ = [
    # Model
    "LayoutError",
    "SizeKind",
    "SizeSpec",
    "Direction",
    "AspectPolicy",
    "Aspect",
    "Leaf",
    "Split",
    "Node",
    "LayoutDefaults",
    "LayoutDocument",
    "iter_leaves",
    "leaf_ids",
    "find_leaf_path",
    "node_at_path",
    # Validation
    "ValidationResult",
    "validate_layout",
    "validate_document",
    "validate_size_spec",
    # Overrides
    "ChildSize",
    "Override",
    "OverrideStore",
    # Resolution
    "ResolvedRect",
    "resolve_layout",
    "apply_overrides",
    "allocate_child_sizes",
    "apply_rounding",
    "split_child_sizes",
    # Divider mapping
    "DividerInfo",
    "find_divider_for_resize",
    "calculate_divider_drag",
    "edge_deltas",
    # Registry
    "PRESET_LAYOUTS",
    "LayoutManager",
    "SplitLayout",
    "ZoneHit",
]
