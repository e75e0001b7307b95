"""
Static label placement for the line charts.

Every label is anchored on the country's most recent retained point
(health_exp, life_exp) unless a manual override pins it. Overlaps are
avoided only through the static per-country tables below; there is no
collision detection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Collection, Dict, Mapping, Optional, Tuple

import pandas as pd

from transformations.categories import Category

Offset = Tuple[float, float]

LABEL_COLUMNS = ["country", "x", "y", "label", "category"]


@dataclass(frozen=True)
class ManualLabel:
    country: str
    x: float
    y: float


# Replication chart
REPLICATION_LABEL_CATEGORIES = frozenset({Category.FOCUS, Category.HIGHLIGHTED})

REPLICATION_MANUAL_LABELS: Mapping[str, ManualLabel] = {
    "United States": ManualLabel("United States", 8700.0, 77.2),
}

# Vertical nudges (years of life expectancy)
REPLICATION_NUDGES: Mapping[str, float] = {
    "United Kingdom": -0.5,
    "Sweden": 0.4,
}

# Regional chart
REGIONAL_LABEL_CATEGORIES = frozenset({Category.HIGHLIGHTED})

REGIONAL_DEFAULT_OFFSET: Offset = (600.0, 1.0)

REGIONAL_OFFSETS: Mapping[str, Offset] = {
    "Luxembourg": (-1800.0, 1.5),
    "Switzerland": (600.0, -1.5),
}


def latest_points(df: pd.DataFrame, *, country_col: str = "country") -> pd.DataFrame:
    """One row per country: its most recent year."""
    ordered = df.sort_values("year", kind="stable")
    latest = ordered.groupby(country_col, sort=False).tail(1)
    return latest.sort_values(country_col, kind="stable").reset_index(drop=True)


def place_labels(
    df: pd.DataFrame,
    *,
    label_categories: Collection[Category],
    manual: Mapping[str, ManualLabel],
    offset_for: Callable[[str], Offset],
    country_col: str = "country",
) -> pd.DataFrame:
    """
    Build the label table for every country whose category is in
    `label_categories` and which still has data.

    Extra grouping columns present in `df` (e.g. region) are carried over so
    faceted charts can split the table.
    """
    wanted = {c.value for c in label_categories}
    candidates = df[df["category"].astype(str).isin(wanted)]
    if candidates.empty:
        return pd.DataFrame(columns=LABEL_COLUMNS)

    rows = []
    for _, point in latest_points(candidates, country_col=country_col).iterrows():
        country = str(point[country_col])
        override = manual.get(country)
        if override is not None:
            x, y = override.x, override.y
        else:
            dx, dy = offset_for(country)
            x = float(point["health_exp"]) + dx
            y = float(point["life_exp"]) + dy
        row = {
            "country": country,
            "x": float(x),
            "y": float(y),
            "label": country,
            "category": str(point["category"]),
        }
        if "region" in point.index:
            row["region"] = point["region"]
        rows.append(row)

    return pd.DataFrame(rows)


def place_replication_labels(
    df: pd.DataFrame,
    *,
    label_categories: Collection[Category] = REPLICATION_LABEL_CATEGORIES,
    manual: Mapping[str, ManualLabel] = REPLICATION_MANUAL_LABELS,
    nudges: Mapping[str, float] = REPLICATION_NUDGES,
) -> pd.DataFrame:
    """Latest point plus an optional vertical nudge per country."""
    return place_labels(
        df,
        label_categories=label_categories,
        manual=manual,
        offset_for=lambda country: (0.0, nudges.get(country, 0.0)),
    )


def place_regional_labels(
    df: pd.DataFrame,
    *,
    label_categories: Collection[Category] = REGIONAL_LABEL_CATEGORIES,
    manual: Optional[Mapping[str, ManualLabel]] = None,
    default_offset: Offset = REGIONAL_DEFAULT_OFFSET,
    offsets: Mapping[str, Offset] = REGIONAL_OFFSETS,
) -> pd.DataFrame:
    """Latest point shifted by a fixed (dx, dy), with per-country exceptions."""
    return place_labels(
        df,
        label_categories=label_categories,
        manual=manual or {},
        offset_for=lambda country: offsets.get(country, default_offset),
    )


def labels_by_category(labels: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    if labels.empty:
        return {}
    return {str(cat): part for cat, part in labels.groupby("category", sort=False)}


__all__ = [
    "LABEL_COLUMNS",
    "ManualLabel",
    "REGIONAL_DEFAULT_OFFSET",
    "REGIONAL_LABEL_CATEGORIES",
    "REGIONAL_OFFSETS",
    "REPLICATION_LABEL_CATEGORIES",
    "REPLICATION_MANUAL_LABELS",
    "REPLICATION_NUDGES",
    "labels_by_category",
    "latest_points",
    "place_labels",
    "place_regional_labels",
    "place_replication_labels",
]
