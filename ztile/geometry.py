"""
Geometry Primitives

Rectangles, insets and edges shared by the layout engine and its callers.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import List, Mapping, Optional, Union
import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return int(math.floor(value + 0.5))


class Edge(str, Enum):
    """A single window edge."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"

    @property
    def axis_direction(self) -> str:
        """Split direction whose dividers move this edge."""
        if self in (Edge.LEFT, Edge.RIGHT):
            return "col"
        return "row"

    @property
    def is_trailing(self) -> bool:
        """Whether the edge is the right or bottom side."""
        return self in (Edge.RIGHT, Edge.BOTTOM)


class WindowEdges(IntFlag):
    """Window edge flags, as reported for a grab operation."""

    NONE = 0
    TOP = 1
    BOTTOM = 2
    LEFT = 4
    RIGHT = 8

    def edges(self) -> List[Edge]:
        """Expand the flags into individual edges."""
        result = []
        if self & WindowEdges.LEFT:
            result.append(Edge.LEFT)
        if self & WindowEdges.RIGHT:
            result.append(Edge.RIGHT)
        if self & WindowEdges.TOP:
            result.append(Edge.TOP)
        if self & WindowEdges.BOTTOM:
            result.append(Edge.BOTTOM)
        return result


@dataclass
class Insets:
    """Per-side insets in pixels."""

    l: int = 0
    r: int = 0
    t: int = 0
    b: int = 0

    @classmethod
    def coerce(cls, value: Union["Insets", int, float, Mapping, None]) -> "Insets":
        """Build insets from an int (all sides), a partial mapping or None."""
        if value is None:
            return cls()
        if isinstance(value, Insets):
            return cls(value.l, value.r, value.t, value.b)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls(value, value, value, value)
        if isinstance(value, Mapping):
            return cls(
                value.get("l", 0) or 0,
                value.get("r", 0) or 0,
                value.get("t", 0) or 0,
                value.get("b", 0) or 0,
            )
        raise ValueError(f"Invalid insets: {value!r}. Use a number or {{l, r, t, b}}")

    def to_dict(self) -> dict:
        return {"l": self.l, "r": self.r, "t": self.t, "b": self.b}

    @property
    def is_zero(self) -> bool:
        return not (self.l or self.r or self.t or self.b)


@dataclass
class Rect:
    """
    Rectangle with position and dimensions.

    Coordinates may be fractional while a layout is being resolved; every
    rect handed back by the resolver is integral.
    """

    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, px: float, py: float) -> bool:
        """Point containment, half-open on the right and bottom."""
        return self.x <= px < self.right and self.y <= py < self.bottom

    def inset(self, insets: Insets) -> "Rect":
        """Shrink by insets; width and height never go negative."""
        return Rect(
            self.x + insets.l,
            self.y + insets.t,
            max(0, self.width - insets.l - insets.r),
            max(0, self.height - insets.t - insets.b),
        )

    def rounded(self) -> "Rect":
        """Round each component independently."""
        return Rect(
            round_half_up(self.x),
            round_half_up(self.y),
            round_half_up(self.width),
            round_half_up(self.height),
        )

    def as_tuple(self):
        return (self.x, self.y, self.width, self.height)

    def as_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Mapping) -> "Rect":
        return cls(data["x"], data["y"], data["width"], data["height"])


def monitor_key(monitor: Optional[Rect]) -> str:
    """
    Stable key for a monitor derived from its geometry.

    Monitor indices change when displays are reordered or reconnected, so
    the key only uses size and position.
    """
    if monitor is None:
        return "default"
    return (
        f"{round_half_up(monitor.width)}x{round_half_up(monitor.height)}"
        f"@{round_half_up(monitor.x)},{round_half_up(monitor.y)}"
    )
