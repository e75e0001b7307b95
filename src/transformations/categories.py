from __future__ import annotations

from enum import Enum
from typing import Collection, Dict, Iterable, Sequence, Tuple

import pandas as pd


class Category(str, Enum):
    """Rendering class of a country within one chart build."""

    FOCUS = "focus"
    HIGHLIGHTED = "highlighted"
    TOP_N = "top_n"
    REST = "rest"


# (category, members) pairs evaluated in order; first match wins.
CategoryRule = Tuple[Category, Collection[str]]


def categorize_country(
    country: str,
    rules: Sequence[CategoryRule],
    default: Category = Category.REST,
) -> Category:
    for category, members in rules:
        if country in members:
            return category
    return default


def assign_categories(
    countries: Iterable[str],
    rules: Sequence[CategoryRule],
    default: Category = Category.REST,
) -> Dict[str, Category]:
    """Tag each distinct country exactly once using the ordered `rules`."""
    return {
        country: categorize_country(country, rules, default)
        for country in dict.fromkeys(countries)
    }


def tag_frame(
    df: pd.DataFrame,
    rules: Sequence[CategoryRule],
    *,
    country_col: str = "country",
    default: Category = Category.REST,
) -> pd.DataFrame:
    """Return a copy of `df` with a `category` column (string values)."""
    mapping = assign_categories(df[country_col].tolist(), rules, default)
    out = df.copy()
    out["category"] = out[country_col].map(lambda c: mapping[c].value).astype("string")
    return out


__all__ = [
    "Category",
    "CategoryRule",
    "assign_categories",
    "categorize_country",
    "tag_frame",
]
