"""
Layout Tree Model

Typed representation of the layout document format:

    {
        "schema_version": 1,
        "name": "left-focus",
        "defaults": {"gap_inner": 8, "gap_outer": 8, "leaf_insets": 0},
        "root": {"type": "split", "dir": "col", "children": [...]}
    }

A node is either a Leaf (one zone) or a Split dividing its rectangle among
children along one axis. Note the direction naming: "col" places children
side by side (the split runs along the horizontal axis), "row" stacks them
top to bottom (vertical axis).
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, List, Mapping, Optional, Sequence, Union

from ..geometry import Insets

SCHEMA_VERSION = 1


class LayoutError(ValueError):
    """Raised when layout data cannot be turned into a layout tree."""


class SizeKind(str, Enum):
    """How a child claims space along its parent's axis."""

    FRAC = "frac"  # Weighted share of the remaining space
    PX = "px"  # Fixed pixels
    AUTO = "auto"  # Same as frac 1


class Direction(str, Enum):
    """Split direction."""

    ROW = "row"  # Children stacked top to bottom
    COL = "col"  # Children side by side


class AspectPolicy(str, Enum):
    FIT = "fit"
    NONE = "none"


@dataclass(frozen=True)
class SizeSpec:
    """Sizing rule for one child of a split."""

    kind: SizeKind = SizeKind.FRAC
    value: float = 1.0
    min_px: Optional[float] = None
    max_px: Optional[float] = None

    def normalized(self) -> "SizeSpec":
        """Resolve auto into frac 1, keeping any clamps."""
        if self.kind == SizeKind.AUTO:
            return replace(self, kind=SizeKind.FRAC, value=1.0)
        return self

    def clamp(self, size: float) -> float:
        if self.min_px is not None:
            size = max(size, self.min_px)
        if self.max_px is not None:
            size = min(size, self.max_px)
        return size

    @classmethod
    def from_dict(cls, data: Mapping) -> "SizeSpec":
        try:
            kind = SizeKind(data.get("kind", "auto"))
        except ValueError:
            raise LayoutError(f"Unknown size kind: {data.get('kind')!r}")
        value = data.get("value")
        return cls(
            kind=kind,
            value=1.0 if value is None else value,
            min_px=data.get("min_px"),
            max_px=data.get("max_px"),
        )

    def to_dict(self) -> dict:
        data = {"kind": self.kind.value}
        if self.kind != SizeKind.AUTO:
            data["value"] = self.value
        if self.min_px is not None:
            data["min_px"] = self.min_px
        if self.max_px is not None:
            data["max_px"] = self.max_px
        return data


DEFAULT_SIZE = SizeSpec(SizeKind.FRAC, 1.0)


@dataclass
class Aspect:
    """Aspect constraint for a leaf's window rect (ratio is width / height)."""

    ratio: float
    policy: Optional[AspectPolicy] = None

    def to_dict(self) -> dict:
        data = {"ratio": self.ratio}
        if self.policy is not None:
            data["policy"] = self.policy.value
        return data


@dataclass
class Leaf:
    """A zone: one placeable window region."""

    id: str
    size: Optional[SizeSpec] = None
    insets: Optional[Insets] = None
    aspect: Optional[Aspect] = None
    tags: List[str] = field(default_factory=list)


@dataclass
class Split:
    """A node dividing its rectangle among children along one axis."""

    dir: Direction
    children: List["Node"]
    size: Optional[SizeSpec] = None
    gap_inner: Optional[float] = None
    gap_outer: Optional[Insets] = None


Node = Union[Leaf, Split]


def size_spec_of(node: Node) -> SizeSpec:
    """Effective size spec of a child: frac 1 when absent, auto normalized."""
    if node.size is None:
        return DEFAULT_SIZE
    return node.size.normalized()


@dataclass
class LayoutDefaults:
    gap_inner: float = 0
    gap_outer: Insets = field(default_factory=Insets)
    leaf_insets: Insets = field(default_factory=Insets)
    aspect_policy: AspectPolicy = AspectPolicy.NONE

    @classmethod
    def from_dict(cls, data: Optional[Mapping]) -> "LayoutDefaults":
        data = data or {}
        try:
            policy = AspectPolicy(data.get("aspect_policy", "none"))
        except ValueError:
            raise LayoutError(f"Unknown aspect policy: {data.get('aspect_policy')!r}")
        return cls(
            gap_inner=data.get("gap_inner", 0) or 0,
            gap_outer=Insets.coerce(data.get("gap_outer")),
            leaf_insets=Insets.coerce(data.get("leaf_insets")),
            aspect_policy=policy,
        )

    def to_dict(self) -> dict:
        return {
            "gap_inner": self.gap_inner,
            "gap_outer": self.gap_outer.to_dict(),
            "leaf_insets": self.leaf_insets.to_dict(),
            "aspect_policy": self.aspect_policy.value,
        }


@dataclass
class LayoutDocument:
    """A complete layout, identified by its unique name."""

    name: str
    root: Node
    defaults: LayoutDefaults = field(default_factory=LayoutDefaults)
    schema_version: int = SCHEMA_VERSION

    @classmethod
    def from_dict(cls, data: Mapping) -> "LayoutDocument":
        """
        Build a document from its JSON form.

        The data should already have passed validate_layout(); only problems
        that make a tree impossible to build raise LayoutError.
        """
        if not isinstance(data, Mapping):
            raise LayoutError("Layout must be a mapping")
        if "root" not in data:
            raise LayoutError("Layout root node is required")
        return cls(
            name=data.get("name", ""),
            root=node_from_dict(data["root"]),
            defaults=LayoutDefaults.from_dict(data.get("defaults")),
            schema_version=data.get("schema_version", SCHEMA_VERSION),
        )

    def to_dict(self) -> dict:
        return {
            "schema_version": self.schema_version,
            "name": self.name,
            "defaults": self.defaults.to_dict(),
            "root": node_to_dict(self.root),
        }

    def leaf_ids(self) -> List[str]:
        return leaf_ids(self.root)


def node_from_dict(data: Mapping) -> Node:
    """Parse a node (and its subtree) from JSON."""
    if not isinstance(data, Mapping):
        raise LayoutError(f"Node must be a mapping, got {type(data).__name__}")

    size = SizeSpec.from_dict(data["size"]) if data.get("size") is not None else None
    node_type = data.get("type")

    if node_type == "leaf":
        aspect = None
        if data.get("aspect") is not None:
            aspect_data = data["aspect"]
            policy = aspect_data.get("policy")
            try:
                aspect = Aspect(
                    ratio=aspect_data.get("ratio", 0),
                    policy=AspectPolicy(policy) if policy is not None else None,
                )
            except ValueError:
                raise LayoutError(f"Unknown aspect policy: {policy!r}")
        return Leaf(
            id=data.get("id"),
            size=size,
            insets=Insets.coerce(data["insets"]) if "insets" in data else None,
            aspect=aspect,
            tags=list(data.get("tags", [])),
        )

    if node_type == "split":
        try:
            direction = Direction(data.get("dir"))
        except ValueError:
            raise LayoutError(f"Split dir must be 'row' or 'col', got {data.get('dir')!r}")
        return Split(
            dir=direction,
            children=[node_from_dict(child) for child in data.get("children", [])],
            size=size,
            gap_inner=data.get("gap_inner"),
            gap_outer=Insets.coerce(data["gap_outer"]) if "gap_outer" in data else None,
        )

    raise LayoutError(f"Invalid node type {node_type!r}, must be 'leaf' or 'split'")


def node_to_dict(node: Node) -> dict:
    if isinstance(node, Leaf):
        data = {"type": "leaf", "id": node.id}
        if node.size is not None:
            data["size"] = node.size.to_dict()
        if node.insets is not None:
            data["insets"] = node.insets.to_dict()
        if node.aspect is not None:
            data["aspect"] = node.aspect.to_dict()
        if node.tags:
            data["tags"] = list(node.tags)
        return data

    data = {
        "type": "split",
        "dir": node.dir.value,
        "children": [node_to_dict(child) for child in node.children],
    }
    if node.size is not None:
        data["size"] = node.size.to_dict()
    if node.gap_inner is not None:
        data["gap_inner"] = node.gap_inner
    if node.gap_outer is not None:
        data["gap_outer"] = node.gap_outer.to_dict()
    return data


def iter_leaves(node: Node) -> Iterator[Leaf]:
    """Yield leaves in depth-first order."""
    if isinstance(node, Leaf):
        yield node
        return
    for child in node.children:
        yield from iter_leaves(child)


def leaf_ids(node: Node) -> List[str]:
    return [leaf.id for leaf in iter_leaves(node)]


def find_leaf_path(node: Node, leaf_id: str) -> Optional[List[int]]:
    """Child-index path from node to the leaf with the given id."""
    if isinstance(node, Leaf):
        return [] if node.id == leaf_id else None
    for i, child in enumerate(node.children):
        path = find_leaf_path(child, leaf_id)
        if path is not None:
            return [i] + path
    return None


def node_at_path(node: Node, path: Sequence[int]) -> Optional[Node]:
    """Follow a child-index path; None if the walk leaves the tree."""
    for index in path:
        if not isinstance(node, Split) or not 0 <= index < len(node.children):
            return None
        node = node.children[index]
    return node
