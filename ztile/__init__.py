"""
ztile - Zone Tiling Layout Engine

Resolves declarative zone layouts into window rectangles and keeps them in
step with the user's divider drags.

This package provides:
- A layout tree model for the schema v1 layout document format
- Structural validation of layout documents
- Deterministic pixel resolution with gaps, insets and aspect fitting
- Mapping of window edge drags onto split dividers
- Persistent per-monitor divider overrides
- A layout manager tying these together for a windowing layer

Example usage:
    from ztile import LayoutManager, Rect, monitor_key

    manager = LayoutManager()
    work_area = Rect(0, 0, 2560, 1440)
    key = monitor_key(work_area)

    rects = manager.resolve_layout_rects("left-focus", work_area, key)
    manager.handle_resize("left-focus", "left", "right", 120, work_area, key)
"""

__version__ = "0.1.0"

from .geometry import Rect, Insets, Edge, WindowEdges, monitor_key, round_half_up
from .config import ZTileConfig

from .layouts import (
    LayoutError,
    SizeKind,
    SizeSpec,
    Direction,
    Leaf,
    Split,
    LayoutDocument,
    ValidationResult,
    validate_layout,
    ChildSize,
    Override,
    OverrideStore,
    ResolvedRect,
    resolve_layout,
    DividerInfo,
    find_divider_for_resize,
    calculate_divider_drag,
    PRESET_LAYOUTS,
    LayoutManager,
)

from . import topics

__all__ = [
    # Version
    "__version__",
    # Geometry
    "Rect",
    "Insets",
    "Edge",
    "WindowEdges",
    "monitor_key",
    "round_half_up",
    # Configuration
    "ZTileConfig",
    # Layout engine
    "LayoutError",
    "SizeKind",
    "SizeSpec",
    "Direction",
    "Leaf",
    "Split",
    "LayoutDocument",
    "ValidationResult",
    "validate_layout",
    "ChildSize",
    "Override",
    "OverrideStore",
    "ResolvedRect",
    "resolve_layout",
    "DividerInfo",
    "find_divider_for_resize",
    "calculate_divider_drag",
    "PRESET_LAYOUTS",
    "LayoutManager",
    # Event topics
    "topics",
]
