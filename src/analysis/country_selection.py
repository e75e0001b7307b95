"""
Per-country selections used to emphasise lines in the regional chart.

- Top-N: countries with the highest mean life expectancy over the retained
  years, N per group (region).
- Largest change: the single country per group whose health expenditure
  moved the most (max - min) over the retained years.

Both selections break exact ties by first appearance in the input: groups
are built with `sort=False` and ranked with a stable sort, so the earlier
country stays ahead.
"""

from __future__ import annotations

from typing import List, Optional

import pandas as pd

from transformations.categories import Category, tag_frame

TOP_N_DEFAULT = 10


def _group_keys(group_col: Optional[str], country_col: str) -> List[str]:
    return [group_col, country_col] if group_col else [country_col]


def _rank_within_groups(
    stats: pd.DataFrame,
    value_col: str,
    *,
    n: int,
    group_col: Optional[str],
) -> pd.DataFrame:
    ranked = stats.sort_values(value_col, ascending=False, kind="stable")
    if group_col:
        picked = ranked.groupby(group_col, sort=False).head(n)
        # Regiões na ordem de primeira aparição, ranking preservado dentro de cada uma
        order = {g: i for i, g in enumerate(dict.fromkeys(stats[group_col]))}
        picked = picked.sort_values(group_col, key=lambda s: s.map(order), kind="stable")
    else:
        picked = ranked.head(n)
    return picked.reset_index(drop=True)


def mean_life_expectancy(
    df: pd.DataFrame,
    *,
    group_col: Optional[str] = None,
    country_col: str = "country",
) -> pd.DataFrame:
    keys = _group_keys(group_col, country_col)
    return df.groupby(keys, sort=False)["life_exp"].mean().reset_index(name="mean_life_exp")


def expenditure_change(
    df: pd.DataFrame,
    *,
    group_col: Optional[str] = None,
    country_col: str = "country",
) -> pd.DataFrame:
    keys = _group_keys(group_col, country_col)
    grouped = df.groupby(keys, sort=False)["health_exp"]
    stats = (grouped.max() - grouped.min()).reset_index(name="health_exp_change")
    return stats


def select_top_n(
    df: pd.DataFrame,
    n: int = TOP_N_DEFAULT,
    *,
    group_col: Optional[str] = None,
    country_col: str = "country",
) -> pd.DataFrame:
    """
    Top `n` countries by mean life expectancy, per `group_col` when given.

    Returns one row per selected country (group, country, mean_life_exp),
    `min(n, group size)` rows per group, descending within each group.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    stats = mean_life_expectancy(df, group_col=group_col, country_col=country_col)
    return _rank_within_groups(stats, "mean_life_exp", n=n, group_col=group_col)


def select_largest_change(
    df: pd.DataFrame,
    *,
    group_col: Optional[str] = None,
    country_col: str = "country",
) -> pd.DataFrame:
    """
    The one country per group with the largest health expenditure range.

    Exactly one row per group even under ties (first-encountered wins).
    """
    stats = expenditure_change(df, group_col=group_col, country_col=country_col)
    return _rank_within_groups(stats, "health_exp_change", n=1, group_col=group_col)


def tag_regional_categories(
    df: pd.DataFrame,
    top_n: pd.DataFrame,
    largest_change: pd.DataFrame,
    *,
    country_col: str = "country",
) -> pd.DataFrame:
    """Tag countries highlighted > top_n > rest from the two selections."""
    rules = [
        (Category.HIGHLIGHTED, set(largest_change[country_col].astype(str))),
        (Category.TOP_N, set(top_n[country_col].astype(str))),
    ]
    out = df.copy()
    out[country_col] = out[country_col].astype(str)
    return tag_frame(out, rules, country_col=country_col)


def build_regional_selection(
    df: pd.DataFrame,
    *,
    n: int = TOP_N_DEFAULT,
    group_col: str = "region",
) -> pd.DataFrame:
    """Run both selections per region and return the tagged frame."""
    top = select_top_n(df, n, group_col=group_col)
    changed = select_largest_change(df, group_col=group_col)
    tagged = tag_regional_categories(df, top, changed)
    print(
        f"[selection] {len(top)} top-{n} countries, "
        f"{len(changed)} highlighted across {tagged[group_col].nunique()} regions"
    )
    return tagged


__all__ = [
    "TOP_N_DEFAULT",
    "build_regional_selection",
    "expenditure_change",
    "mean_life_expectancy",
    "select_largest_change",
    "select_top_n",
    "tag_regional_categories",
]
