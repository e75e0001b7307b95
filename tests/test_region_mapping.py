from __future__ import annotations

import pandas as pd
import pytest

from transformations.region_mapping import (
    DEFAULT_REGION_PATCHES,
    RegionPatch,
    assign_regions,
    load_region_lookup,
    lookup_region,
    normalize_country_name,
    raw_region_fallbacks,
)


def test_normalize_country_name_strips_accents_and_punctuation():
    assert normalize_country_name("Côte d'Ivoire") == "cote d ivoire"
    assert normalize_country_name("  Micronesia (country) ") == "micronesia country"
    assert normalize_country_name(None) == ""


def test_default_lookup_covers_continents():
    lookup = load_region_lookup()
    assert lookup["united states"] == "Americas"
    assert lookup["germany"] == "Europe"
    assert lookup[normalize_country_name("Côte d'Ivoire")] == "Africa"
    assert set(lookup.values()) == {"Africa", "Americas", "Asia", "Europe", "Oceania"}


def test_lookup_rejects_file_without_required_columns(tmp_path):
    path = tmp_path / "regions.csv"
    path.write_text("name,continent\nFrance,Europe\n", encoding="utf-8")
    with pytest.raises(ValueError, match="missing required columns"):
        load_region_lookup(path)


def test_patch_splits_only_its_region():
    patch = RegionPatch("Americas", "South America", frozenset({"Peru"}), "North America")
    assert patch.apply("Peru", "Americas") == "South America"
    assert patch.apply("Mexico", "Americas") == "North America"
    assert patch.apply("Spain", "Europe") == "Europe"
    assert patch.apply("Nowhere", None) is None


def test_lookup_region_uses_fallback_then_patches():
    lookup = {"chile": "Americas"}
    assert lookup_region("Chile", lookup) == "South America"
    assert lookup_region("Mexico", lookup, fallback="Americas") == "North America"
    assert lookup_region("Mexico", lookup, patches=()) is None


def test_assign_regions_without_patches_keeps_continent():
    df = pd.DataFrame({"country": ["Brazil", "Canada", "World"], "region": [None, None, None]})
    out = assign_regions(df, patches=())
    assert out["region"].tolist()[:2] == ["Americas", "Americas"]
    assert pd.isna(out["region"].iloc[2])


def test_assign_regions_default_patches():
    df = pd.DataFrame({"country": ["Brazil", "Canada"]})
    out = assign_regions(df, patches=DEFAULT_REGION_PATCHES)
    assert out["region"].tolist() == ["South America", "North America"]


def test_raw_region_fallbacks_first_non_empty_value():
    df = pd.DataFrame(
        {
            "country": ["Atlantis", "Atlantis", "Atlantis", "Lemuria"],
            "region": [None, " ", "Oceania", None],
        }
    )
    assert raw_region_fallbacks(df) == {"Atlantis": "Oceania"}


def test_assign_regions_uses_explicit_fallbacks_over_frame_values():
    df = pd.DataFrame({"country": ["Atlantis", "Atlantis"], "region": [None, None]})
    out = assign_regions(df, lookup={}, patches=(), fallbacks={"Atlantis": "Oceania"})
    assert out["region"].tolist() == ["Oceania", "Oceania"]
