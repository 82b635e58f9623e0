"""
Layout Validator

Structural checks on layout JSON before it may be registered or resolved.
Every violation is collected so callers can report a complete list.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Set

from .model import SCHEMA_VERSION, LayoutDocument

SIZE_KINDS = ("frac", "px", "auto")
DIRECTIONS = ("row", "col")
ASPECT_POLICIES = ("fit", "none")


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_layout(layout: Any) -> ValidationResult:
    """
    Validate a layout document in its JSON (mapping) form.

    Args:
        layout: Parsed layout JSON

    Returns:
        ValidationResult with every error found; the input is not modified
    """
    if layout is None:
        return ValidationResult(False, ["Layout is null"])
    if not isinstance(layout, Mapping):
        return ValidationResult(False, ["Layout must be an object"])

    errors: List[str] = []

    if layout.get("schema_version") != SCHEMA_VERSION:
        errors.append(
            f"Invalid or missing schema_version: expected {SCHEMA_VERSION}, "
            f"got {layout.get('schema_version')!r}"
        )

    name = layout.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Layout name is required and must be a non-empty string")

    if layout.get("root") is None:
        errors.append("Layout root node is required")
        return ValidationResult(False, errors)

    defaults = layout.get("defaults")
    if defaults is not None:
        if isinstance(defaults, Mapping):
            _validate_defaults(defaults, errors)
        else:
            errors.append("defaults must be an object")

    leaf_ids: Set[str] = set()
    _validate_node(layout["root"], "root", leaf_ids, errors)

    if not leaf_ids:
        errors.append("Layout must have at least one leaf node")

    return ValidationResult(not errors, errors)


def validate_document(doc: LayoutDocument) -> ValidationResult:
    """Validate an already-built document via its JSON form."""
    return validate_layout(doc.to_dict())


def validate_size_spec(spec: Any, path: str = "size") -> List[str]:
    """Errors for a single size spec in JSON form (empty when valid)."""
    errors: List[str] = []
    _validate_size_spec(spec, path, errors)
    return errors


def _validate_defaults(defaults: Mapping, errors: List[str]):
    if "gap_inner" in defaults:
        gap = defaults["gap_inner"]
        if not _is_number(gap) or gap < 0:
            errors.append("defaults.gap_inner must be a non-negative number")

    if "gap_outer" in defaults:
        _validate_insets(defaults["gap_outer"], "defaults.gap_outer", errors)

    if "leaf_insets" in defaults:
        _validate_insets(defaults["leaf_insets"], "defaults.leaf_insets", errors)

    if "aspect_policy" in defaults and defaults["aspect_policy"] not in ASPECT_POLICIES:
        errors.append(
            f"defaults.aspect_policy must be 'fit' or 'none', "
            f"got {defaults['aspect_policy']!r}"
        )


def _validate_insets(insets: Any, path: str, errors: List[str]):
    if _is_number(insets):
        if insets < 0:
            errors.append(f"{path} must be non-negative, got {insets}")
    elif isinstance(insets, Mapping):
        for key in ("l", "r", "t", "b"):
            if key in insets and (not _is_number(insets[key]) or insets[key] < 0):
                errors.append(f"{path}.{key} must be a non-negative number")
    else:
        errors.append(f"{path} must be a number or {{l, r, t, b}} object")


def _validate_node(node: Any, path: str, leaf_ids: Set[str], errors: List[str]):
    if not isinstance(node, Mapping):
        errors.append(f"{path}: Node must be an object")
        return

    node_type = node.get("type")
    if node_type == "leaf":
        _validate_leaf(node, path, leaf_ids, errors)
    elif node_type == "split":
        _validate_split(node, path, leaf_ids, errors)
    else:
        errors.append(f"{path}: Invalid node type {node_type!r}, must be 'leaf' or 'split'")


def _validate_leaf(node: Mapping, path: str, leaf_ids: Set[str], errors: List[str]):
    leaf_id = node.get("id")
    if not isinstance(leaf_id, str) or not leaf_id.strip():
        errors.append(f"{path}: Leaf node requires a non-empty string 'id'")
    elif leaf_id in leaf_ids:
        errors.append(f"{path}: Duplicate leaf id {leaf_id!r}")
    else:
        leaf_ids.add(leaf_id)

    if node.get("size") is not None:
        _validate_size_spec(node["size"], f"{path}.size", errors)

    if "insets" in node:
        _validate_insets(node["insets"], f"{path}.insets", errors)

    if node.get("aspect") is not None:
        _validate_aspect(node["aspect"], f"{path}.aspect", errors)

    if "tags" in node:
        tags = node["tags"]
        if not isinstance(tags, list):
            errors.append(f"{path}.tags must be an array")
        else:
            for i, tag in enumerate(tags):
                if not isinstance(tag, str):
                    errors.append(f"{path}.tags[{i}] must be a string")


def _validate_split(node: Mapping, path: str, leaf_ids: Set[str], errors: List[str]):
    if node.get("dir") not in DIRECTIONS:
        errors.append(f"{path}: Split node requires dir 'row' or 'col', got {node.get('dir')!r}")

    if node.get("size") is not None:
        _validate_size_spec(node["size"], f"{path}.size", errors)

    if "gap_inner" in node:
        gap = node["gap_inner"]
        if not _is_number(gap) or gap < 0:
            errors.append(f"{path}.gap_inner must be a non-negative number")

    if "gap_outer" in node:
        _validate_insets(node["gap_outer"], f"{path}.gap_outer", errors)

    children = node.get("children")
    if not isinstance(children, list):
        errors.append(f"{path}: Split node requires children array")
        return

    if len(children) < 1:
        errors.append(f"{path}: Split node must have at least 1 child")

    for i, child in enumerate(children):
        _validate_node(child, f"{path}.children[{i}]", leaf_ids, errors)


def _validate_size_spec(spec: Any, path: str, errors: List[str]):
    if not isinstance(spec, Mapping):
        errors.append(f"{path} must be an object")
        return

    kind = spec.get("kind")
    if kind not in SIZE_KINDS:
        errors.append(f"{path}.kind must be one of {', '.join(SIZE_KINDS)}, got {kind!r}")

    if kind in ("frac", "px"):
        value = spec.get("value")
        if not _is_number(value) or value <= 0:
            errors.append(f"{path}.value must be a positive number for kind {kind!r}")

    for bound in ("min_px", "max_px"):
        if bound in spec and (not _is_number(spec[bound]) or spec[bound] < 0):
            errors.append(f"{path}.{bound} must be a non-negative number")

    min_px, max_px = spec.get("min_px"), spec.get("max_px")
    if _is_number(min_px) and _is_number(max_px) and min_px > max_px:
        errors.append(f"{path}: min_px ({min_px}) must be <= max_px ({max_px})")

    if "priority" in spec and not (
        isinstance(spec["priority"], int) and not isinstance(spec["priority"], bool)
    ):
        errors.append(f"{path}.priority must be an integer")


def _validate_aspect(aspect: Any, path: str, errors: List[str]):
    if not isinstance(aspect, Mapping):
        errors.append(f"{path} must be an object")
        return

    if "ratio" in aspect and (not _is_number(aspect["ratio"]) or aspect["ratio"] <= 0):
        errors.append(f"{path}.ratio must be a positive number")

    if "policy" in aspect and aspect["policy"] not in ASPECT_POLICIES:
        errors.append(f"{path}.policy must be 'fit' or 'none', got {aspect['policy']!r}")
