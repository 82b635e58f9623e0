"""
Configuration

Runtime settings for the layout manager.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import os


def default_config_dir() -> Path:
    """$XDG_CONFIG_HOME/ztile, falling back to ~/.config/ztile."""
    base = os.getenv("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "ztile"
    return Path.home() / ".config" / "ztile"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ZTileConfig:
    """Layout manager configuration."""

    # Resizes whose edge moved this many pixels or fewer are ignored
    resize_threshold: int = 5

    # Smallest size a divider drag may shrink a zone to
    min_divider_px: int = 50

    # Layout names offered to the user, in order (None = all registered)
    enabled_layouts: Optional[List[str]] = None

    # Where overrides are persisted
    config_dir: Path = field(default_factory=default_config_dir)

    # Log every event published on the bus
    debug: bool = False

    def __post_init__(self):
        """Check numeric settings and normalize paths."""
        if self.resize_threshold < 0:
            raise ValueError(f"resize_threshold must be >= 0, got {self.resize_threshold}")
        if self.min_divider_px < 0:
            raise ValueError(f"min_divider_px must be >= 0, got {self.min_divider_px}")
        self.config_dir = Path(self.config_dir)

    @property
    def overrides_path(self) -> Path:
        return self.config_dir / "overrides.json"

    @classmethod
    def from_env(cls, **kwargs) -> "ZTileConfig":
        """
        Build a config honouring environment variables.

        ZTILE_DEBUG enables event logging, ZTILE_CONFIG_DIR moves the
        storage directory. Explicit keyword arguments win.
        """
        if "debug" not in kwargs and _env_flag("ZTILE_DEBUG"):
            kwargs["debug"] = True
        config_dir = os.getenv("ZTILE_CONFIG_DIR")
        if "config_dir" not in kwargs and config_dir:
            kwargs["config_dir"] = Path(config_dir)
        return cls(**kwargs)
