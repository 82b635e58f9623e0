"""
Built-in Layouts

Preset layouts in the schema v1 document format. They are plain JSON-style
dictionaries so they go through the same validation as user layouts.
"""

from typing import List


def _leaf(leaf_id: str, weight: float = 1) -> dict:
    return {"type": "leaf", "id": leaf_id, "size": {"kind": "frac", "value": weight}}


def _split(direction: str, children: List[dict], weight: float = None) -> dict:
    node = {"type": "split", "dir": direction, "children": children}
    if weight is not None:
        node["size"] = {"kind": "frac", "value": weight}
    return node


def _preset(name: str, root: dict) -> dict:
    return {
        "schema_version": 1,
        "name": name,
        "defaults": {"gap_inner": 0, "gap_outer": 0, "leaf_insets": 0},
        "root": root,
    }


PRESET_LAYOUTS = [
    # Left / right halves
    _preset("half-split", _split("col", [_leaf("left"), _leaf("right")])),
    # Four equal quarters
    _preset(
        "quarters",
        _split(
            "col",
            [
                _split("row", [_leaf("top-left"), _leaf("bottom-left")]),
                _split("row", [_leaf("top-right"), _leaf("bottom-right")]),
            ],
        ),
    ),
    # Three columns
    _preset(
        "thirds-vertical",
        _split("col", [_leaf("left"), _leaf("center"), _leaf("right")]),
    ),
    # Three rows
    _preset(
        "thirds-horizontal",
        _split("row", [_leaf("top"), _leaf("middle"), _leaf("bottom")]),
    ),
    # Large left, split right
    _preset(
        "left-focus",
        _split(
            "col",
            [
                _leaf("left", 2),
                _split("row", [_leaf("top-right"), _leaf("bottom-right")], weight=1),
            ],
        ),
    ),
    # Split left, large right
    _preset(
        "right-focus",
        _split(
            "col",
            [
                _split("row", [_leaf("top-left"), _leaf("bottom-left")], weight=1),
                _leaf("right", 2),
            ],
        ),
    ),
    # Large top, split bottom
    _preset(
        "top-focus",
        _split(
            "row",
            [
                _leaf("top", 2),
                _split("col", [_leaf("bottom-left"), _leaf("bottom-right")], weight=1),
            ],
        ),
    ),
    # Split top, large bottom
    _preset(
        "bottom-focus",
        _split(
            "row",
            [
                _split("col", [_leaf("top-left"), _leaf("top-right")], weight=1),
                _leaf("bottom", 2),
            ],
        ),
    ),
]

PRESET_NAMES = [preset["name"] for preset in PRESET_LAYOUTS]
