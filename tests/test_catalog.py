"""
Unit tests for the strain catalog service.

Covers loading/filtering of the dataset, substring search semantics and the
display labels used by result cards.
"""

import json

import pytest

from strain_scanner.services import catalog
from tests.conftest import SAMPLE_STRAINS, VALID_SAMPLE_COUNT


class TestLoadStrains:
    """Test dataset loading."""

    def test_keeps_only_named_records(self, strain_file):
        strains = catalog.load_strains(strain_file)

        assert len(strains) == VALID_SAMPLE_COUNT
        assert all(isinstance(s["name"], str) for s in strains)
        assert [s["name"] for s in strains][:2] == ["Blue Dream", "OG Kush"]

    def test_non_list_top_level_yields_empty(self, tmp_path):
        path = tmp_path / "strains.json"
        path.write_text(json.dumps({"name": "Blue Dream"}), encoding="utf-8")

        assert catalog.load_strains(str(path)) == []

    def test_missing_file_yields_empty(self, tmp_path):
        assert catalog.load_strains(str(tmp_path / "nope.json")) == []

    def test_malformed_json_yields_empty(self, tmp_path):
        path = tmp_path / "strains.json"
        path.write_text("[{\"name\": ", encoding="utf-8")

        assert catalog.load_strains(str(path)) == []

    def test_packaged_dataset_loads(self):
        from strain_scanner.config import DEFAULT_STRAIN_DATA_PATH

        strains = catalog.load_strains(DEFAULT_STRAIN_DATA_PATH)
        assert len(strains) > 10

    def test_init_catalog_attaches_to_app(self, app):
        with app.app_context():
            assert len(catalog.get_strains()) == VALID_SAMPLE_COUNT

    def test_get_strains_without_app_context(self):
        assert catalog.get_strains() == []


class TestSearchStrains:
    """Test the substring search."""

    @pytest.fixture
    def strains(self, strain_file):
        return catalog.load_strains(strain_file)

    def test_matches_name_case_insensitive(self, strains):
        results = catalog.search_strains("DIESEL", strains)
        assert [s["name"] for s in results] == ["Sour Diesel"]

    def test_matches_flavor(self, strains):
        results = catalog.search_strains("berry", strains)
        # Blueberry flavor and Berry flavor, in catalog order
        assert [s["name"] for s in results] == ["Blue Dream", "Granddaddy Purple"]

    def test_matches_description(self, strains):
        results = catalog.search_strains("skunk", strains)
        assert [s["name"] for s in results] == ["OG Kush"]

    def test_records_without_optional_fields_only_match_on_name(self, strains):
        assert [s["name"] for s in catalog.search_strains("details", strains)] == ["No Details"]
        assert catalog.search_strains("zzz-no-match", strains) == []

    def test_empty_query_matches_everything(self, strains):
        results = catalog.search_strains("", strains)
        assert len(results) == VALID_SAMPLE_COUNT

    def test_results_capped_at_default_limit(self):
        many = [{"name": f"Haze #{i}", "flavors": ["Citrus"]} for i in range(40)]

        results = catalog.search_strains("haze", many)

        assert len(results) == 15
        assert results[0]["name"] == "Haze #0"
        assert results[-1]["name"] == "Haze #14"

    def test_limit_uses_app_config(self, app):
        many = [{"name": f"Kush {i}"} for i in range(40)]
        app.config["SEARCH_RESULT_LIMIT"] = 3

        with app.app_context():
            assert len(catalog.search_strains("kush", many)) == 3

    def test_explicit_limit(self, strains):
        assert len(catalog.search_strains("", strains, limit=2)) == 2
        assert catalog.search_strains("", strains, limit=0) == []

    def test_non_string_flavors_are_ignored(self):
        strains = [{"name": "Odd", "flavors": [None, 7, "Mint"]}]
        assert catalog.search_strains("mint", strains) == strains
        assert catalog.search_strains("7", strains) == []

    def test_search_does_not_mutate_catalog(self, strains):
        before = json.dumps(strains, sort_keys=True)
        catalog.search_strains("berry", strains)
        assert json.dumps(strains, sort_keys=True) == before


class TestFindAndFormat:
    """Test lookups and display labels."""

    def test_find_strain_exact_name(self, app):
        with app.app_context():
            assert catalog.find_strain("OG Kush")["type"] == "Hybrid"
            assert catalog.find_strain("og kush") is None
            assert catalog.find_strain("") is None

    def test_format_full_record(self):
        card = catalog.format_strain(SAMPLE_STRAINS[0])

        assert card["name"] == "Blue Dream"
        assert card["type_label"] == "Hybrid"
        assert card["flavors_label"] == "Blueberry, Sweet"
        assert card["effects_label"] == "relaxed (56%), happy (52%)"
        assert card["description_preview"].startswith("A sativa-dominant hybrid")

    def test_format_missing_fields_uses_placeholders(self):
        card = catalog.format_strain({"name": "No Details", "type": ""})

        assert card["type_label"] == "Unknown Type"
        assert card["flavors_label"] == "N/A"
        assert card["effects_label"] == "N/A"
        assert card["description_preview"] == "No description available."

    def test_empty_collections_render_blank_labels(self):
        card = catalog.format_strain({"name": "Sparse", "effects": {}, "flavors": []})

        assert card["effects_label"] == ""
        assert card["flavors_label"] == ""

    def test_description_preview_truncated(self):
        card = catalog.format_strain({"name": "Long", "description": "x" * 300})
        assert len(card["description_preview"]) == 120

    def test_format_returns_copy(self):
        record = {"name": "Copy", "flavors": ["Mint"]}
        card = catalog.format_strain(record)
        card["flavors"].append("Lime")
        assert record["flavors"] == ["Mint"]

    def test_catalog_stats(self, strain_file):
        stats = catalog.catalog_stats(catalog.load_strains(strain_file))

        assert stats["total"] == VALID_SAMPLE_COUNT
        assert stats["by_type"]["Hybrid"] == 2
        assert stats["by_type"]["Unknown Type"] == 1
        assert stats["distinct_flavors"] == 8
