"""
Processamento do painel país-ano de gasto em saúde x expectativa de vida.

Two normalisation paths feed the two chart variants:

- Replication (`normalize_replication_frame`):
    - columns located by the rule table in `column_resolver`;
    - `year >= 2000`;
    - countries tagged focus (United States) > highlighted (peer list) > rest.

- Regional (`normalize_regional_frame`):
    - positional contract of exactly seven columns
      (country, code, year, life_exp, health_exp, population, region);
    - `2000 <= year <= 2017`;
    - region resolved by `region_mapping`; countries without a region
      (OWID aggregates like "World") are dropped;
    - tagging is done later, after the per-region selections.

Both paths coerce numeric fields with `errors="coerce"` and silently drop
rows missing life expectancy or health expenditure.

Schema resultante (colunas):
    country:    string
    year:       int64
    life_exp:   float
    health_exp: float
    (regional) code, population, region
    (replication) category
"""

from __future__ import annotations

from typing import Collection, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from adapters import StorageAdapter
from .categories import Category, CategoryRule, tag_frame
from .column_resolver import rename_map, resolve_schema
from .region_mapping import DEFAULT_REGION_PATCHES, RegionPatch, assign_regions, raw_region_fallbacks

REPLICATION_MIN_YEAR = 2000
REGIONAL_MIN_YEAR = 2000
REGIONAL_MAX_YEAR = 2017

FOCUS_COUNTRY = "United States"

# Países de comparação destacados no gráfico original
KEY_COUNTRIES: Sequence[str] = (
    "United Kingdom",
    "Germany",
    "France",
    "Japan",
    "Canada",
    "Australia",
    "Sweden",
    "Switzerland",
    "Spain",
    "Italy",
)

# Ordem posicional obrigatória do arquivo usado na variante regional
REGIONAL_COLUMNS: List[str] = [
    "country",
    "code",
    "year",
    "life_exp",
    "health_exp",
    "population",
    "region",
]

REQUIRED_VALUE_COLUMNS = ["life_exp", "health_exp"]


class SchemaError(ValueError):
    """Raised when the raw table does not satisfy the positional column contract."""


def load_raw_health_table(key: str, storage: StorageAdapter) -> pd.DataFrame:
    """
    Lê o CSV RAW (UTF-8, separado por vírgulas, com cabeçalho) sem tipagem.

    Everything is read as text so that coercion happens in one place.
    """
    df = storage.read_csv(key, dtype=str, keep_default_na=True)
    print(f"[load] {key}: {len(df)} rows, {len(df.columns)} columns")
    return df


def _coerce_numeric(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Non-numeric and non-finite values become NaN."""
    out = df.copy()
    for col in columns:
        if col not in out.columns:
            continue
        values = pd.to_numeric(out[col], errors="coerce").astype("float64")
        out[col] = values.replace([np.inf, -np.inf], np.nan)
    return out


def _coerce_year(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out["year"] = pd.to_numeric(out["year"], errors="coerce")
    out = out.dropna(subset=["year"])
    out = out[np.isclose(out["year"] % 1, 0)].copy()
    out["year"] = out["year"].astype("int64")
    return out


def filter_years(
    df: pd.DataFrame,
    *,
    min_year: Optional[int] = None,
    max_year: Optional[int] = None,
) -> pd.DataFrame:
    """Keep rows with min_year <= year <= max_year (either bound optional)."""
    mask = pd.Series(True, index=df.index)
    if min_year is not None:
        mask &= df["year"] >= min_year
    if max_year is not None:
        mask &= df["year"] <= max_year
    return df[mask]


def drop_incomplete(df: pd.DataFrame, columns: Sequence[str] = REQUIRED_VALUE_COLUMNS) -> pd.DataFrame:
    return df.dropna(subset=list(columns))


def replication_category_rules(
    focus_country: str = FOCUS_COUNTRY,
    key_countries: Collection[str] = KEY_COUNTRIES,
) -> List[CategoryRule]:
    return [
        (Category.FOCUS, {focus_country}),
        (Category.HIGHLIGHTED, set(key_countries)),
    ]


def normalize_replication_frame(
    raw: pd.DataFrame,
    *,
    min_year: int = REPLICATION_MIN_YEAR,
    focus_country: str = FOCUS_COUNTRY,
    key_countries: Collection[str] = KEY_COUNTRIES,
) -> pd.DataFrame:
    """
    Normalise the raw table for the replication chart.

    Raises ColumnResolutionError (from `resolve_schema`) before touching any
    row when a required column cannot be found.
    """
    schema = resolve_schema(list(raw.columns))
    df = raw[list(schema.values())].rename(columns=rename_map(schema))
    df = df.dropna(subset=["country"]).copy()
    df["country"] = df["country"].astype("string")

    df = _coerce_numeric(df, REQUIRED_VALUE_COLUMNS)
    df = _coerce_year(df)
    df = filter_years(df, min_year=min_year)
    df = drop_incomplete(df)

    df = tag_frame(df, replication_category_rules(focus_country, key_countries))
    df = df[["country", "year", "life_exp", "health_exp", "category"]].reset_index(drop=True)

    print(
        f"[normalize] replication: kept {len(df)} of {len(raw)} rows, "
        f"{df['country'].nunique()} countries (year >= {min_year})"
    )
    return df


def apply_regional_columns(raw: pd.DataFrame) -> pd.DataFrame:
    """Rename the seven positional columns or raise SchemaError."""
    if len(raw.columns) != len(REGIONAL_COLUMNS):
        raise SchemaError(
            f"Regional chart expects exactly {len(REGIONAL_COLUMNS)} columns "
            f"({', '.join(REGIONAL_COLUMNS)}), got {len(raw.columns)}: {list(raw.columns)}",
        )
    df = raw.copy()
    df.columns = REGIONAL_COLUMNS
    return df


def normalize_regional_frame(
    raw: pd.DataFrame,
    *,
    min_year: int = REGIONAL_MIN_YEAR,
    max_year: int = REGIONAL_MAX_YEAR,
    region_lookup: Optional[Mapping[str, str]] = None,
    region_patches: Sequence[RegionPatch] = DEFAULT_REGION_PATCHES,
) -> pd.DataFrame:
    """
    Normalise the raw table for the regional (faceted) chart.

    Rows whose country has no resolvable region are dropped along with the
    incomplete ones.
    """
    df = apply_regional_columns(raw)
    df = df.dropna(subset=["country"]).copy()
    df["country"] = df["country"].astype("string")
    df["code"] = df["code"].astype("string")
    # raw regions are read before any row is filtered out
    raw_regions = raw_region_fallbacks(df)

    df = _coerce_numeric(df, REQUIRED_VALUE_COLUMNS + ["population"])
    df = _coerce_year(df)
    df = filter_years(df, min_year=min_year, max_year=max_year)
    df = drop_incomplete(df)

    df = assign_regions(df, lookup=region_lookup, patches=region_patches, fallbacks=raw_regions)
    df = df.dropna(subset=["region"]).reset_index(drop=True)

    print(
        f"[normalize] regional: kept {len(df)} of {len(raw)} rows, "
        f"{df['country'].nunique()} countries in {df['region'].nunique()} regions "
        f"({min_year}-{max_year})"
    )
    return df


def country_categories(df: pd.DataFrame) -> Dict[str, Category]:
    """Per-country category of an already tagged frame."""
    pairs = df[["country", "category"]].drop_duplicates(subset=["country"])
    return {str(c): Category(str(cat)) for c, cat in zip(pairs["country"], pairs["category"])}


__all__ = [
    "FOCUS_COUNTRY",
    "KEY_COUNTRIES",
    "REGIONAL_COLUMNS",
    "REGIONAL_MAX_YEAR",
    "REGIONAL_MIN_YEAR",
    "REPLICATION_MIN_YEAR",
    "SchemaError",
    "apply_regional_columns",
    "country_categories",
    "drop_incomplete",
    "filter_years",
    "load_raw_health_table",
    "normalize_regional_frame",
    "normalize_replication_frame",
    "replication_category_rules",
]
