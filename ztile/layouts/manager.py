"""
Layout Manager

Registry of layouts plus the entry points the windowing layer calls:
resolve a layout for a work area, turn a finished window resize into a
divider override, and reset overrides.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union
import copy
import json
import logging

from pubsub import pub

from .. import topics
from ..config import ZTileConfig
from ..geometry import Edge, Rect, WindowEdges
from .divider import calculate_divider_drag, edge_deltas, find_divider_for_resize
from .model import Direction, LayoutDocument, LayoutError, Leaf, Node, SizeKind, SizeSpec, Split
from .overrides import OverrideStore
from .presets import PRESET_LAYOUTS, PRESET_NAMES
from .resolver import ResolvedRect, apply_overrides, resolve_layout, split_child_sizes
from .validator import validate_layout

logger = logging.getLogger(__name__)

LayoutRef = Union[str, LayoutDocument]
CacheKey = Tuple[str, str, Tuple[float, float, float, float]]

SPLIT_MARKER = "__split_"


@dataclass
class ZoneHit:
    """A zone found under a point."""

    id: str
    tile_rect: Rect
    window_rect: Rect


@dataclass
class SplitLayout:
    """A runtime layout in which one zone was split in two."""

    layout: LayoutDocument
    new_zone_id: str
    sibling_zone_id: str


def debug_event_logger(topic=pub.AUTO_TOPIC, **kwargs):
    """Log all events published on the event bus."""
    data_str = ", ".join(f"{k}={v}" for k, v in kwargs.items() if k != "topic")
    logger.debug("EVENT: %s | %s", topic.getName(), data_str)


class LayoutManager:
    """
    Manages layout definitions, resolution and divider overrides.

    It publishes OVERRIDE_CHANGED, OVERRIDE_RESET, LAYOUT_ADDED and
    LAYOUT_REMOVED events.

    Responsibilities:
    - Validate and register preset and custom layouts
    - Resolve layouts to zone rectangles, caching per layout/monitor/area
    - Map completed window resizes onto divider overrides
    - Keep cached resolutions consistent with the override store
    """

    def __init__(
        self,
        config: Optional[ZTileConfig] = None,
        override_store: Optional[OverrideStore] = None,
        custom_layouts: Optional[Sequence[Mapping]] = None,
    ):
        self.config = config or ZTileConfig()
        self.override_store = override_store if override_store is not None else OverrideStore()
        self._layouts: Dict[str, LayoutDocument] = {}
        self._resolved_cache: Dict[CacheKey, Dict[str, ResolvedRect]] = {}
        self._cache_revision = self.override_store.revision

        if self.config.debug:
            pub.subscribe(debug_event_logger, pub.ALL_TOPICS)

        self._load_layouts(custom_layouts or [])

    def _load_layouts(self, custom_layouts: Sequence[Mapping]):
        for data in PRESET_LAYOUTS:
            if self._validate_and_add(data):
                logger.debug("Loaded preset layout: %s", data["name"])

        for data in custom_layouts:
            if self._validate_and_add(data):
                logger.debug("Loaded custom layout: %s", data.get("name"))

    def _validate_and_add(self, data: Mapping) -> bool:
        result = validate_layout(data)
        if not result.valid:
            name = data.get("name") if isinstance(data, Mapping) else None
            logger.warning("Invalid layout %r: %s", name, "; ".join(result.errors))
            return False

        try:
            doc = LayoutDocument.from_dict(data)
        except LayoutError as e:
            logger.warning("Unusable layout %r: %s", data.get("name"), e)
            return False

        self._register(doc)
        return True

    def _register(self, doc: LayoutDocument):
        self._layouts[doc.name] = doc
        self._invalidate_layout(doc.name)
        pub.sendMessage(topics.LAYOUT_ADDED, layout_id=doc.name)

    # Registry

    def get_layout(self, layout_id: str) -> Optional[LayoutDocument]:
        return self._layouts.get(layout_id)

    def get_all_layouts(self) -> List[LayoutDocument]:
        return list(self._layouts.values())

    def get_enabled_layouts(self) -> List[LayoutDocument]:
        """Layouts offered to the user, honouring config.enabled_layouts."""
        if self.config.enabled_layouts is None:
            return [doc for doc in self._layouts.values() if SPLIT_MARKER not in doc.name]
        return [self._layouts[i] for i in self.config.enabled_layouts if i in self._layouts]

    def get_zone_ids(self, layout: LayoutRef) -> List[str]:
        doc = self._lookup(layout)
        return doc.leaf_ids() if doc else []

    def is_preset(self, layout_id: str) -> bool:
        return layout_id in PRESET_NAMES

    def add_custom_layout(self, data: Mapping) -> bool:
        """Validate and register a user layout; presets cannot be replaced."""
        if isinstance(data, Mapping) and self.is_preset(data.get("name")):
            logger.warning("Refusing to replace preset layout %s", data.get("name"))
            return False
        return self._validate_and_add(data)

    def remove_custom_layout(self, layout_id: str) -> bool:
        """Unregister a custom layout and drop its overrides on every monitor."""
        if self.is_preset(layout_id) or layout_id not in self._layouts:
            return False
        self._unregister(layout_id)
        return True

    def _unregister(self, layout_id: str):
        del self._layouts[layout_id]
        self._invalidate_layout(layout_id)
        if self.override_store.clear_layout_overrides(layout_id):
            pub.sendMessage(topics.OVERRIDE_RESET, layout_id=layout_id, monitor_key=None)
        pub.sendMessage(topics.LAYOUT_REMOVED, layout_id=layout_id)

    def export_custom_layouts(self) -> str:
        """Custom layouts as a JSON list, for the settings layer to persist."""
        custom = [
            doc.to_dict()
            for name, doc in self._layouts.items()
            if not self.is_preset(name) and SPLIT_MARKER not in name
        ]
        return json.dumps(custom)

    def _lookup(self, layout: LayoutRef) -> Optional[LayoutDocument]:
        if isinstance(layout, LayoutDocument):
            return layout
        return self._layouts.get(layout)

    # Resolution

    def resolve_layout_rects(
        self,
        layout: LayoutRef,
        work_area: Rect,
        monitor_key: Optional[str] = None,
    ) -> Dict[str, ResolvedRect]:
        """
        Resolve a layout to zone rectangles.

        Args:
            layout: Layout document or registered layout id
            work_area: Monitor work area
            monitor_key: Monitor whose overrides apply (None = no overrides)

        Returns:
            Dictionary mapping zone id to its ResolvedRect, empty if the
            layout is unknown
        """
        doc = self._lookup(layout)
        if doc is None:
            logger.debug("Layout not found: %s", layout)
            return {}

        registered = self._layouts.get(doc.name) is doc
        self._sync_cache()
        key = (doc.name, monitor_key or "", tuple(work_area.as_tuple()))
        if registered and key in self._resolved_cache:
            return copy.deepcopy(self._resolved_cache[key])

        overrides = []
        if monitor_key is not None:
            overrides = self.override_store.get_overrides(doc.name, monitor_key)

        rects = resolve_layout(doc, work_area, overrides)
        if registered:
            self._resolved_cache[key] = copy.deepcopy(rects)
        return rects

    def get_zone_window_rect(
        self, layout: LayoutRef, zone_id: str, work_area: Rect, monitor_key: Optional[str] = None
    ) -> Optional[Rect]:
        rects = self.resolve_layout_rects(layout, work_area, monitor_key)
        return rects[zone_id].window_rect if zone_id in rects else None

    def get_zone_tile_rect(
        self, layout: LayoutRef, zone_id: str, work_area: Rect, monitor_key: Optional[str] = None
    ) -> Optional[Rect]:
        rects = self.resolve_layout_rects(layout, work_area, monitor_key)
        return rects[zone_id].tile_rect if zone_id in rects else None

    def find_zone_at_point(
        self,
        layout: LayoutRef,
        x: float,
        y: float,
        work_area: Rect,
        monitor_key: Optional[str] = None,
    ) -> Optional[ZoneHit]:
        """Find the zone whose tile rect contains the point."""
        for zone_id, rects in self.resolve_layout_rects(layout, work_area, monitor_key).items():
            if rects.tile_rect.contains(x, y):
                return ZoneHit(zone_id, rects.tile_rect, rects.window_rect)
        return None

    # Resizing

    def handle_resize(
        self,
        layout_id: str,
        zone_id: str,
        edge: Union[Edge, str],
        delta_pixels: float,
        work_area: Rect,
        monitor_key: str,
    ) -> bool:
        """
        Turn a completed resize of one zone edge into a divider override.

        Args:
            layout_id: Layout the window is tiled in
            zone_id: Zone the window occupies
            edge: Edge that was dragged
            delta_pixels: How far the edge moved (positive = right/down)
            work_area: Monitor work area
            monitor_key: Monitor the layout is shown on

        Returns:
            True if an override was created or updated
        """
        logger.debug(
            "handle_resize: layout=%s zone=%s edge=%s delta=%s",
            layout_id,
            zone_id,
            edge,
            delta_pixels,
        )

        if abs(delta_pixels) <= self.config.resize_threshold:
            return False

        doc = self._layouts.get(layout_id)
        if doc is None:
            logger.debug("Layout not found: %s", layout_id)
            return False

        divider = find_divider_for_resize(doc, zone_id, edge)
        if divider is None:
            logger.debug("No divider found for resize: %s %s", zone_id, edge)
            return False

        # Earlier drags on this monitor are the starting point
        current = apply_overrides(doc, self.override_store.get_overrides(layout_id, monitor_key))

        # Pixels currently held by the two children either side of the divider
        child_sizes = split_child_sizes(current, work_area, divider.split_path)
        if child_sizes is None:
            return False
        axis_length = child_sizes[divider.divider_index] + child_sizes[divider.divider_index + 1]

        sizes = calculate_divider_drag(
            current,
            divider.split_path,
            divider.divider_index,
            delta_pixels,
            axis_length,
            min_size=self.config.min_divider_px,
        )
        if not sizes:
            logger.debug("No size changes calculated")
            return False

        if not self.override_store.set_override(layout_id, monitor_key, divider.split_path, sizes):
            logger.debug("Override for %s unchanged", layout_id)
            return False

        self._invalidate(layout_id, monitor_key)
        pub.sendMessage(
            topics.OVERRIDE_CHANGED,
            layout_id=layout_id,
            monitor_key=monitor_key,
            split_path=list(divider.split_path),
        )
        logger.debug("Updated override for %s divider %d", layout_id, divider.divider_index)
        return True

    def handle_grab_end(
        self,
        layout_id: str,
        zone_id: str,
        start_rect: Rect,
        end_rect: Rect,
        edges: WindowEdges,
        work_area: Rect,
        monitor_key: str,
    ) -> bool:
        """
        Apply every edge moved by a finished resize grab.

        Returns:
            True if at least one override was updated
        """
        updated = False
        for edge, delta in edge_deltas(start_rect, end_rect, edges):
            if self.handle_resize(layout_id, zone_id, edge, delta, work_area, monitor_key):
                updated = True
        return updated

    def reset_overrides(self, layout_id: str, monitor_key: str) -> bool:
        """Drop all divider overrides of a layout on one monitor."""
        cleared = self.override_store.clear_overrides(layout_id, monitor_key)
        self._invalidate(layout_id, monitor_key)
        if cleared:
            pub.sendMessage(topics.OVERRIDE_RESET, layout_id=layout_id, monitor_key=monitor_key)
        return cleared

    # Cache

    def _sync_cache(self):
        """Drop cached rects if the override store changed behind our back."""
        revision = self.override_store.revision
        if revision != self._cache_revision:
            self._resolved_cache.clear()
            self._cache_revision = revision

    def _invalidate(self, layout_id: str, monitor_key: str):
        for key in [k for k in self._resolved_cache if k[0] == layout_id and k[1] == monitor_key]:
            del self._resolved_cache[key]

    def _invalidate_layout(self, layout_id: str):
        for key in [k for k in self._resolved_cache if k[0] == layout_id]:
            del self._resolved_cache[key]

    # Runtime split layouts

    def create_split_layout(
        self, layout_id: str, zone_id: str, split_edge: Union[Edge, str]
    ) -> Optional[SplitLayout]:
        """
        Register a variant of a layout with one zone split in two.

        The zone becomes a split of "{zone}-1" and "{zone}-2" along the axis
        of split_edge; the returned new_zone_id is the half on that edge.
        """
        split_edge = Edge(split_edge)
        leading = not split_edge.is_trailing
        new_zone_id = f"{zone_id}-1" if leading else f"{zone_id}-2"
        sibling_zone_id = f"{zone_id}-2" if leading else f"{zone_id}-1"
        split_id = f"{layout_id}{SPLIT_MARKER}{split_edge.value}_{zone_id}"

        existing = self._layouts.get(split_id)
        if existing is not None:
            return SplitLayout(existing, new_zone_id, sibling_zone_id)

        doc = self._layouts.get(layout_id)
        if doc is None:
            logger.debug("Layout not found: %s", layout_id)
            return None

        variant = copy.deepcopy(doc)
        variant.name = split_id
        direction = Direction(split_edge.axis_direction)
        variant.root, replaced = _replace_leaf_with_split(
            variant.root, zone_id, direction, f"{zone_id}-1", f"{zone_id}-2"
        )
        if not replaced:
            logger.debug("Zone %s not found in layout %s", zone_id, layout_id)
            return None

        if not self._validate_and_add(variant.to_dict()):
            return None

        logger.debug("Created split layout: %s", split_id)
        return SplitLayout(self._layouts[split_id], new_zone_id, sibling_zone_id)

    def remove_split_layout(self, layout_id: str) -> bool:
        """Remove a runtime split variant and its overrides."""
        if SPLIT_MARKER not in layout_id or layout_id not in self._layouts:
            return False
        self._unregister(layout_id)
        return True

    # Persistence

    def save_overrides(self) -> bool:
        return self.override_store.save(self.config.overrides_path)

    def load_overrides(self) -> bool:
        loaded = self.override_store.load(self.config.overrides_path)
        if loaded:
            self._resolved_cache.clear()
        return loaded


def _replace_leaf_with_split(
    node: Node, target_id: str, direction: Direction, first_id: str, second_id: str
) -> Tuple[Node, bool]:
    if isinstance(node, Leaf):
        if node.id != target_id:
            return node, False
        half = SizeSpec(SizeKind.FRAC, 1.0)
        return (
            Split(
                dir=direction,
                children=[Leaf(first_id, size=half), Leaf(second_id, size=half)],
                size=node.size,
            ),
            True,
        )

    for i, child in enumerate(node.children):
        new_child, replaced = _replace_leaf_with_split(child, target_id, direction, first_id, second_id)
        if replaced:
            node.children[i] = new_child
            return node, True
    return node, False
