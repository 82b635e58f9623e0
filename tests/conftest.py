"""
Shared pytest fixtures for ztile tests.
"""

import pytest
from pubsub import pub

from ztile.config import ZTileConfig
from ztile.geometry import Rect
from ztile.layouts import LayoutDocument, LayoutManager, OverrideStore


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external state")


@pytest.fixture
def leaf():
    """Factory for leaf node JSON."""

    def make(leaf_id, size=None, **extra):
        node = {"type": "leaf", "id": leaf_id}
        if size is not None:
            node["size"] = size
        node.update(extra)
        return node

    return make


@pytest.fixture
def split():
    """Factory for split node JSON."""

    def make(direction, children, **extra):
        node = {"type": "split", "dir": direction, "children": children}
        node.update(extra)
        return node

    return make


@pytest.fixture
def layout_data():
    """Factory for a full layout document in JSON form."""

    def make(root, name="test", **defaults):
        return {"schema_version": 1, "name": name, "defaults": defaults, "root": root}

    return make


@pytest.fixture
def make_doc(layout_data):
    """Factory building a LayoutDocument from a root node."""

    def make(root, name="test", **defaults):
        return LayoutDocument.from_dict(layout_data(root, name=name, **defaults))

    return make


@pytest.fixture
def two_columns(make_doc, split, leaf):
    """Col split with two equal zones L and R."""
    return make_doc(split("col", [leaf("L"), leaf("R")]), name="two-columns")


@pytest.fixture
def standard_area():
    """Standard 1920x1080 area for layout tests."""
    return Rect(0, 0, 1920, 1080)


@pytest.fixture
def small_area():
    """1000x800 area, convenient for exact arithmetic."""
    return Rect(0, 0, 1000, 800)


@pytest.fixture
def config(tmp_path):
    """Config storing everything under a temporary directory."""
    return ZTileConfig(config_dir=tmp_path / "ztile")


@pytest.fixture
def manager(config):
    """Layout manager with presets only and an empty override store."""
    return LayoutManager(config=config, override_store=OverrideStore())


@pytest.fixture(autouse=True)
def clean_bus():
    """Drop listeners left on the global pubsub bus by a test."""
    yield
    pub.unsubAll()
