"""
Unit tests for the divider override store.
"""

import json

import pytest
from ztile.layouts import ChildSize, Override, OverrideStore, SizeKind, SizeSpec


def frac_sizes(*weights):
    return [ChildSize(i, SizeSpec(SizeKind.FRAC, w)) for i, w in enumerate(weights)]


@pytest.fixture
def store():
    return OverrideStore()


@pytest.mark.unit
class TestOverrideStore:
    """Test storing and replacing overrides."""

    def test_empty(self, store):
        assert store.get_overrides("half-split", "m1") == []
        assert not store.has_overrides("half-split", "m1")
        assert len(store) == 0

    def test_set_and_get(self, store):
        assert store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))

        overrides = store.get_overrides("half-split", "m1")

        assert len(overrides) == 1
        assert overrides[0] == Override("half-split", "m1", (), tuple(frac_sizes(1.2, 0.8)))

    def test_same_path_replaces(self, store):
        store.set_override("quarters", "m1", [0], frac_sizes(1, 2))
        store.set_override("quarters", "m1", [0], frac_sizes(2, 1))

        overrides = store.get_overrides("quarters", "m1")

        assert len(overrides) == 1
        assert overrides[0].child_sizes == tuple(frac_sizes(2, 1))

    def test_different_paths_coexist(self, store):
        store.set_override("quarters", "m1", [0], frac_sizes(1, 2))
        store.set_override("quarters", "m1", [1], frac_sizes(1, 2))
        store.set_override("quarters", "m1", [], frac_sizes(1, 2))
        assert store.total_override_count() == 3

    def test_unchanged_write_reports_false(self, store):
        store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))
        assert not store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))

    def test_monitors_are_independent(self, store):
        store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))
        assert store.get_overrides("half-split", "m2") == []

    def test_returned_list_is_a_copy(self, store):
        store.set_override("half-split", "m1", [], frac_sizes(1, 1))
        store.get_overrides("half-split", "m1").clear()
        assert store.has_overrides("half-split", "m1")

    def test_clear_overrides(self, store):
        store.set_override("half-split", "m1", [], frac_sizes(1, 1))
        store.set_override("half-split", "m2", [], frac_sizes(1, 1))

        assert store.clear_overrides("half-split", "m1")
        assert not store.clear_overrides("half-split", "m1")
        assert store.has_overrides("half-split", "m2")

    def test_clear_layout_overrides(self, store):
        store.set_override("custom", "m1", [], frac_sizes(1, 1))
        store.set_override("custom", "m2", [0], frac_sizes(1, 1))
        store.set_override("half-split", "m1", [], frac_sizes(1, 1))

        assert len(store.get_layout_overrides("custom")) == 2
        assert store.clear_layout_overrides("custom")
        assert store.get_layout_overrides("custom") == []
        assert store.keys() == [("half-split", "m1")]

    def test_clear_all(self, store):
        store.set_override("custom", "m1", [], frac_sizes(1, 1))
        store.clear_all()
        assert len(store) == 0


@pytest.mark.unit
class TestOverridePersistence:
    """Test serialization and file persistence."""

    def test_serialize_round_trip(self, store):
        store.set_override("half-split", "2560x1440@0,0", [], frac_sizes(1.2, 0.8))
        store.set_override("quarters", "default", [1], frac_sizes(3, 1))

        restored = OverrideStore()
        assert restored.deserialize(store.serialize())

        assert restored.keys() == store.keys()
        for layout_id, mkey in store.keys():
            assert restored.get_overrides(layout_id, mkey) == store.get_overrides(layout_id, mkey)

    def test_serialized_format(self, store):
        store.set_override("half-split", "m1", [], frac_sizes(1.5, 0.5))

        data = json.loads(store.serialize())

        assert data == {
            "half-split:m1": [
                {
                    "layout_name": "half-split",
                    "monitor_key": "m1",
                    "path": [],
                    "child_sizes": [
                        {"child_index": 0, "size": {"kind": "frac", "value": 1.5}},
                        {"child_index": 1, "size": {"kind": "frac", "value": 0.5}},
                    ],
                }
            ]
        }

    def test_names_containing_colons(self, store):
        """The entries carry their own names, so colons in keys are harmless."""
        store.set_override("work:main", "1920x1080@0,0", [], frac_sizes(1, 2))

        restored = OverrideStore()
        restored.deserialize(store.serialize())

        assert restored.keys() == [("work:main", "1920x1080@0,0")]

    def test_empty_store(self, store):
        assert store.serialize() == "{}"
        assert store.deserialize("{}")
        assert len(store) == 0

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            "[]",
            '{"a:b": {}}',
            '{"a:b": [{"path": "0", "child_sizes": []}]}',
            '{"a:b": [{"path": [], "child_sizes": [{"child_index": 0}]}]}',
            '{"a:b": [{"path": [], "child_sizes": [{"child_index": 0, "size": {"kind": "em"}}]}]}',
            '{"a:b": [{"path": [], "child_sizes": [{"child_index": 0, "size": {"kind": "frac", "value": "abc"}}]}]}',
            '{"a:b": [{"path": [], "child_sizes": [{"child_index": 0, "size": {"kind": "px", "value": -5}}]}]}',
            "[" * 100000,
        ],
    )
    def test_corrupt_input_keeps_contents(self, store, text):
        store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))

        assert not store.deserialize(text)

        assert store.keys() == [("half-split", "m1")]

    def test_save_and_load(self, store, tmp_path):
        path = tmp_path / "nested" / "overrides.json"
        store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))

        assert store.save(path)
        assert path.exists()

        restored = OverrideStore()
        assert restored.load(path)
        assert restored.get_overrides("half-split", "m1") == store.get_overrides("half-split", "m1")

    def test_load_missing_file(self, store, tmp_path):
        assert not store.load(tmp_path / "absent.json")

    def test_load_corrupt_file(self, store, tmp_path):
        path = tmp_path / "overrides.json"
        path.write_text("{broken", encoding="utf-8")
        assert not store.load(path)
        assert len(store) == 0

    def test_failed_save_leaves_no_temp_file(self, store, tmp_path):
        target = tmp_path / "overrides.json"
        target.mkdir()
        store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))

        assert not store.save(target)

        assert sorted(p.name for p in tmp_path.iterdir()) == ["overrides.json"]


@pytest.mark.unit
class TestRevision:
    """Test the change counter used to spot stale resolutions."""

    def test_every_change_bumps_revision(self, store):
        revisions = [store.revision]

        store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))
        revisions.append(store.revision)
        store.clear_overrides("half-split", "m1")
        revisions.append(store.revision)
        store.set_override("custom", "m1", [], frac_sizes(1, 2))
        store.clear_layout_overrides("custom")
        revisions.append(store.revision)
        store.deserialize("{}")
        revisions.append(store.revision)
        store.clear_all()
        revisions.append(store.revision)

        assert revisions == sorted(set(revisions))

    def test_no_op_writes_keep_revision(self, store):
        store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))
        revision = store.revision

        store.set_override("half-split", "m1", [], frac_sizes(1.2, 0.8))
        store.clear_overrides("half-split", "m2")
        store.deserialize("not json")

        assert store.revision == revision


@pytest.mark.unit
class TestLayoutExchange:
    """Test exporting and importing one layout's overrides."""

    def test_export_layout(self, store):
        store.set_override("quarters", "m1", [0], frac_sizes(1, 2))
        store.set_override("quarters", "m2", [1], frac_sizes(2, 1))
        store.set_override("half-split", "m1", [], frac_sizes(1, 1))

        exported = store.export_layout("quarters")

        assert sorted(exported) == ["m1", "m2"]
        assert exported["m1"][0]["path"] == [0]

    def test_import_under_another_name(self, store):
        store.set_override("quarters", "m1", [0], frac_sizes(1, 2))

        other = OverrideStore()
        assert other.import_layout("my-quarters", store.export_layout("quarters"))

        overrides = other.get_overrides("my-quarters", "m1")
        assert overrides == [Override("my-quarters", "m1", (0,), tuple(frac_sizes(1, 2)))]
        assert other.get_layout_overrides("quarters") == []

    def test_import_replaces_listed_monitors_only(self, store):
        store.set_override("quarters", "m1", [0], frac_sizes(1, 2))
        store.set_override("quarters", "m2", [0], frac_sizes(1, 2))
        data = {"m1": [Override("quarters", "m1", (1,), tuple(frac_sizes(3, 1))).to_dict()]}

        assert store.import_layout("quarters", data)

        assert [o.branch_path for o in store.get_overrides("quarters", "m1")] == [(1,)]
        assert store.has_overrides("quarters", "m2")

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"m1": {}},
            {"m1": [{"path": [], "child_sizes": [{"child_index": 0, "size": {"kind": "frac"}}]}]},
        ],
    )
    def test_malformed_import_changes_nothing(self, store, data):
        store.set_override("quarters", "m1", [0], frac_sizes(1, 2))

        assert not store.import_layout("quarters", data)

        assert store.get_overrides("quarters", "m1")[0].branch_path == (0,)
