"""Unit tests for store layout and target resolution (src/viewer/layout.py)."""

from __future__ import annotations

import json

import pytest

from viewer.layout import DEFAULT_ZONES, EXIT_POSITION, StoreLayout, Zone, load_layout

pytestmark = pytest.mark.unit


class TestZone:

    def test_centroid(self):
        assert Zone("Молочный отдел", 200, 100, 100, 200).centroid == (250, 200)

    def test_to_dict(self):
        d = Zone("A", 1, 2, 3, 4).to_dict()
        assert d == {"name": "A", "x": 1, "y": 2, "width": 3, "height": 4}


class TestResolve:

    def test_substring_match(self):
        layout = StoreLayout()
        assert layout.resolve("Молочный") == (250, 200)

    def test_unknown_category_goes_to_exit(self):
        layout = StoreLayout()
        assert layout.resolve("Неизвестная категория") == (750.0, 575.0)
        assert layout.resolve("Неизвестная категория") == EXIT_POSITION

    def test_full_name_match(self):
        assert StoreLayout().resolve("Отдел сахара") == (450, 450)

    def test_case_sensitive(self):
        assert StoreLayout().resolve("молочный") == EXIT_POSITION

    def test_first_declared_zone_wins(self):
        layout = StoreLayout([
            Zone("Отдел А", 0, 0, 10, 10),
            Zone("Отдел АБ", 100, 100, 10, 10),
        ])
        assert layout.resolve("Отдел А") == (5, 5)
        assert layout.resolve("АБ") == (105, 105)

    def test_empty_category_matches_first_zone(self):
        assert StoreLayout().resolve("") == DEFAULT_ZONES[0].centroid

    def test_resolve_is_memoryless(self):
        layout = StoreLayout()
        first = layout.resolve("Отдел мяса")
        layout.resolve("Неизвестная")
        assert layout.resolve("Отдел мяса") == first == (650, 200)

    def test_find_zone(self):
        layout = StoreLayout()
        assert layout.find_zone("хлеба").name == "Отдел хлеба"
        assert layout.find_zone("рыбы") is None

    def test_custom_exit(self):
        layout = StoreLayout(exit_position=(10, 20))
        assert layout.resolve("nothing") == (10.0, 20.0)

    def test_no_zones_everything_exits(self):
        layout = StoreLayout([])
        assert layout.zones == ()
        assert layout.resolve("Молочный") == EXIT_POSITION


class TestLoadLayout:

    def test_load_zones_and_exit(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text(json.dumps({
            "zones": [{"name": "Рыбный отдел", "x": 10, "y": 20, "width": 40, "height": 60}],
            "exit": {"x": 5, "y": 6},
        }), encoding="utf-8")
        layout = load_layout(path)
        assert [z.name for z in layout.zones] == ["Рыбный отдел"]
        assert layout.resolve("Рыбный") == (30, 50)
        assert layout.exit_position == (5.0, 6.0)

    def test_missing_file_uses_defaults(self, tmp_path):
        layout = load_layout(tmp_path / "absent.json")
        assert layout.zones == DEFAULT_ZONES
        assert layout.exit_position == EXIT_POSITION

    def test_missing_zones_key_uses_default_zones(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text(json.dumps({"exit": {"x": 1, "y": 2}}), encoding="utf-8")
        layout = load_layout(path)
        assert layout.zones == DEFAULT_ZONES
        assert layout.exit_position == (1.0, 2.0)

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_layout(path)

    def test_zone_missing_field_raises(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text(json.dumps({"zones": [{"name": "X", "x": 1}]}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_layout(path)
