"""
Divider Overrides

When a user drags a divider the new child sizes are remembered per layout
and monitor, and replayed on top of the layout every time it is resolved.

Persisted format:

    {
        "half-split:2560x1440@0,0": [
            {
                "layout_name": "half-split",
                "monitor_key": "2560x1440@0,0",
                "path": [],
                "child_sizes": [
                    {"child_index": 0, "size": {"kind": "frac", "value": 1.2}},
                    {"child_index": 1, "size": {"kind": "frac", "value": 0.8}}
                ]
            }
        ]
    }
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Tuple, Union
import json
import logging
import os
import tempfile
import threading

from .model import SizeSpec
from .validator import validate_size_spec

logger = logging.getLogger(__name__)

StoreKey = Tuple[str, str]


@dataclass(frozen=True)
class ChildSize:
    """Replacement size spec for one child of a split."""

    child_index: int
    size: SizeSpec

    def to_dict(self) -> dict:
        return {"child_index": self.child_index, "size": self.size.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping) -> "ChildSize":
        index = data["child_index"]
        if not isinstance(index, int) or isinstance(index, bool):
            raise ValueError(f"child_index must be an integer, got {index!r}")
        errors = validate_size_spec(data["size"], f"child_sizes[{index}].size")
        if errors:
            raise ValueError("; ".join(errors))
        return cls(index, SizeSpec.from_dict(data["size"]))


@dataclass(frozen=True)
class Override:
    """Child size replacements for the split at branch_path."""

    layout_name: str
    monitor_key: str
    branch_path: Tuple[int, ...] = ()
    child_sizes: Tuple[ChildSize, ...] = field(default_factory=tuple)

    @property
    def path_key(self) -> str:
        """Identity of the overridden split within its layout."""
        return ".".join(str(i) for i in self.branch_path)

    def to_dict(self) -> dict:
        return {
            "layout_name": self.layout_name,
            "monitor_key": self.monitor_key,
            "path": list(self.branch_path),
            "child_sizes": [cs.to_dict() for cs in self.child_sizes],
        }

    @classmethod
    def from_dict(cls, data: Mapping, layout_name: str = "", monitor_key: str = "") -> "Override":
        path = data.get("path", [])
        if not isinstance(path, list) or not all(
            isinstance(i, int) and not isinstance(i, bool) for i in path
        ):
            raise ValueError(f"Override path must be a list of integers, got {path!r}")
        sizes = data.get("child_sizes", [])
        if not isinstance(sizes, list):
            raise ValueError("Override child_sizes must be a list")
        return cls(
            layout_name=data.get("layout_name", layout_name),
            monitor_key=data.get("monitor_key", monitor_key),
            branch_path=tuple(path),
            child_sizes=tuple(ChildSize.from_dict(cs) for cs in sizes),
        )


def _storage_key(layout_id: str, monitor_key: str) -> str:
    return f"{layout_id}:{monitor_key}"


class OverrideStore:
    """
    In-memory override map with JSON persistence.

    Overrides are keyed by (layout id, monitor key); within a key the split
    path identifies an override, so writing the same path again replaces it.
    """

    def __init__(self):
        self._overrides: Dict[StoreKey, List[Override]] = {}
        self._revision = 0
        self._lock = threading.RLock()

    @property
    def revision(self) -> int:
        """Counter bumped by every change to the stored overrides."""
        with self._lock:
            return self._revision

    def get_overrides(self, layout_id: str, monitor_key: str) -> List[Override]:
        """Get overrides for a layout on a specific monitor."""
        with self._lock:
            return list(self._overrides.get((layout_id, monitor_key), []))

    def get_layout_overrides(self, layout_id: str) -> List[Override]:
        """Get overrides for a layout across all monitors."""
        with self._lock:
            return [
                override
                for (lid, _), overrides in self._overrides.items()
                if lid == layout_id
                for override in overrides
            ]

    def set_override(
        self,
        layout_id: str,
        monitor_key: str,
        path: Sequence[int],
        sizes: Sequence[ChildSize],
    ) -> bool:
        """
        Add or replace the override for the split at path.

        Returns:
            True if stored overrides changed, meaning any cached resolution
            for (layout_id, monitor_key) is now stale
        """
        override = Override(layout_id, monitor_key, tuple(path), tuple(sizes))
        key = (layout_id, monitor_key)

        with self._lock:
            overrides = self._overrides.setdefault(key, [])
            for i, existing in enumerate(overrides):
                if existing.path_key == override.path_key:
                    if existing == override:
                        return False
                    overrides[i] = override
                    break
            else:
                overrides.append(override)
            self._revision += 1

        logger.debug(
            "Override set: layout=%s monitor=%s path=%s sizes=%d",
            layout_id,
            monitor_key,
            override.path_key or "<root>",
            len(override.child_sizes),
        )
        return True

    def clear_overrides(self, layout_id: str, monitor_key: str) -> bool:
        """Remove all overrides for a layout on a monitor."""
        with self._lock:
            removed = self._overrides.pop((layout_id, monitor_key), None)
            if removed:
                self._revision += 1
        if removed:
            logger.debug("Overrides cleared: layout=%s monitor=%s", layout_id, monitor_key)
        return bool(removed)

    def clear_layout_overrides(self, layout_id: str) -> bool:
        """Remove all overrides for a layout on every monitor."""
        with self._lock:
            keys = [key for key in self._overrides if key[0] == layout_id]
            removed = sum(len(self._overrides.pop(key)) for key in keys)
            if removed:
                self._revision += 1
        if removed:
            logger.debug("Overrides cleared for layout %s (%d)", layout_id, removed)
        return removed > 0

    def clear_all(self):
        with self._lock:
            count = len(self._overrides)
            self._overrides.clear()
            self._revision += 1
        logger.debug("All overrides cleared (%d keys)", count)

    def has_overrides(self, layout_id: str, monitor_key: str) -> bool:
        with self._lock:
            return bool(self._overrides.get((layout_id, monitor_key)))

    def keys(self) -> List[StoreKey]:
        with self._lock:
            return list(self._overrides.keys())

    def total_override_count(self) -> int:
        with self._lock:
            return sum(len(overrides) for overrides in self._overrides.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._overrides)

    # Per-layout exchange

    def export_layout(self, layout_id: str) -> Dict[str, List[dict]]:
        """Overrides of one layout as {monitor_key: [override, ...]}."""
        with self._lock:
            return {
                mkey: [o.to_dict() for o in overrides]
                for (lid, mkey), overrides in self._overrides.items()
                if lid == layout_id and overrides
            }

    def import_layout(self, layout_id: str, data: Mapping) -> bool:
        """
        Replace a layout's overrides on the monitors present in data.

        data has the export_layout() shape. Monitors not mentioned keep their
        overrides. Nothing is changed if any entry is malformed.
        """
        try:
            if not isinstance(data, Mapping):
                raise ValueError("layout overrides must be an object")
            imported: Dict[StoreKey, List[Override]] = {}
            for mkey, entries in data.items():
                imported[(layout_id, mkey)] = [
                    replace(o, layout_name=layout_id, monitor_key=mkey)
                    for o in _parse_entries(entries, layout_id, mkey)
                ]
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error("Failed to import overrides for %s: %s", layout_id, e)
            return False

        with self._lock:
            self._overrides.update(imported)
            self._revision += 1
        logger.debug("Imported overrides for %s (%d monitors)", layout_id, len(imported))
        return True

    # Persistence

    def serialize(self) -> str:
        """Serialize all overrides to a JSON string."""
        with self._lock:
            data = {
                _storage_key(lid, mkey): [o.to_dict() for o in overrides]
                for (lid, mkey), overrides in self._overrides.items()
                if overrides
            }
        return json.dumps(data, indent=2, sort_keys=True)

    def deserialize(self, text: str) -> bool:
        """
        Replace the store's contents with serialized overrides.

        Returns:
            True on success. On malformed input the error is logged, the
            store keeps its previous contents and False is returned.
        """
        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ValueError("top level must be an object")

            loaded: Dict[StoreKey, List[Override]] = {}
            for raw_key, entries in data.items():
                layout_id, _, mkey = raw_key.rpartition(":")
                for override in _parse_entries(entries, layout_id, mkey):
                    key = (override.layout_name, override.monitor_key)
                    bucket = loaded.setdefault(key, [])
                    bucket[:] = [o for o in bucket if o.path_key != override.path_key]
                    bucket.append(override)
        except (ValueError, TypeError, KeyError, AttributeError, RecursionError) as e:
            logger.error("Failed to deserialize overrides: %s", e)
            return False

        with self._lock:
            self._overrides = loaded
            self._revision += 1
        logger.debug("Overrides deserialized (%d keys)", len(loaded))
        return True

    def save(self, path: Union[str, Path]) -> bool:
        """Write overrides to disk atomically."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=".overrides-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(self.serialize())
                os.replace(tmp_name, path)
            except OSError:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.error("Failed to save overrides to %s: %s", path, e)
            return False
        return True

    def load(self, path: Union[str, Path]) -> bool:
        """Load overrides from disk; a missing or corrupt file leaves the store as is."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No override file at %s", path)
            return False
        except OSError as e:
            logger.error("Failed to read overrides from %s: %s", path, e)
            return False
        return self.deserialize(text)


def _parse_entries(entries, layout_id: str, monitor_key: str) -> List[Override]:
    if not isinstance(entries, list):
        raise ValueError(f"overrides for {layout_id}:{monitor_key} must be a list")
    parsed = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise ValueError(f"override in {layout_id}:{monitor_key} must be an object")
        parsed.append(Override.from_dict(entry, layout_id, monitor_key))
    return parsed
