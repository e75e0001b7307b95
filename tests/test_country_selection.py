from __future__ import annotations

import pandas as pd

from analysis.country_selection import (
    build_regional_selection,
    select_largest_change,
    select_top_n,
    tag_regional_categories,
)
from transformations.health_expenditure_processed import country_categories


def _panel(rows):
    return pd.DataFrame(rows, columns=["region", "country", "year", "life_exp", "health_exp"])


def test_top_n_sorted_descending_with_first_encountered_ties():
    df = _panel(
        [
            ("R", "Low", 2000, 70.0, 100.0),
            ("R", "TieFirst", 2000, 80.0, 100.0),
            ("R", "TieSecond", 2000, 80.0, 100.0),
            ("R", "High", 2000, 82.0, 100.0),
        ]
    )
    top = select_top_n(df, 3)
    assert top["country"].tolist() == ["High", "TieFirst", "TieSecond"]
    assert top["mean_life_exp"].is_monotonic_decreasing


def test_top_n_uses_mean_over_years():
    df = _panel(
        [
            ("R", "A", 2000, 70.0, 1.0),
            ("R", "A", 2001, 90.0, 1.0),
            ("R", "B", 2000, 79.0, 1.0),
            ("R", "B", 2001, 79.0, 1.0),
        ]
    )
    top = select_top_n(df, 1)
    assert top["country"].tolist() == ["A"]
    assert top["mean_life_exp"].iloc[0] == 80.0


def test_top_n_returns_min_of_n_and_group_size_per_group():
    df = _panel(
        [
            ("Europe", "A", 2000, 80.0, 1.0),
            ("Europe", "B", 2000, 81.0, 1.0),
            ("Europe", "C", 2000, 79.0, 1.0),
            ("Asia", "D", 2000, 75.0, 1.0),
        ]
    )
    top = select_top_n(df, 2, group_col="region")
    assert top.groupby("region").size().to_dict() == {"Asia": 1, "Europe": 2}
    assert top["country"].tolist() == ["B", "A", "D"]


def test_largest_change_one_country_per_group_even_on_ties():
    df = _panel(
        [
            ("Europe", "A", 2000, 80.0, 1000.0),
            ("Europe", "A", 2010, 80.0, 3000.0),
            ("Europe", "B", 2000, 80.0, 500.0),
            ("Europe", "B", 2010, 80.0, 2500.0),
            ("Asia", "C", 2000, 75.0, 10.0),
            ("Asia", "C", 2010, 75.0, 20.0),
        ]
    )
    changed = select_largest_change(df, group_col="region")
    assert changed["country"].tolist() == ["A", "C"]
    assert changed["health_exp_change"].tolist() == [2000.0, 10.0]


def test_highlighted_wins_over_top_n():
    df = _panel(
        [
            ("R", "A", 2000, 82.0, 100.0),
            ("R", "A", 2010, 83.0, 900.0),
            ("R", "B", 2000, 81.0, 100.0),
            ("R", "B", 2010, 81.0, 200.0),
            ("R", "C", 2000, 60.0, 100.0),
            ("R", "C", 2010, 61.0, 110.0),
        ]
    )
    top = select_top_n(df, 2, group_col="region")
    changed = select_largest_change(df, group_col="region")
    tags = country_categories(tag_regional_categories(df, top, changed))
    assert {k: v.value for k, v in tags.items()} == {
        "A": "highlighted",
        "B": "top_n",
        "C": "rest",
    }


def test_build_regional_selection_tags_every_row():
    df = _panel(
        [
            ("R", "A", 2000, 82.0, 100.0),
            ("R", "B", 2000, 81.0, 300.0),
            ("S", "C", 2000, 60.0, 100.0),
        ]
    )
    tagged = build_regional_selection(df, n=1)
    assert tagged["category"].notna().all()
    assert len(tagged) == len(df)
