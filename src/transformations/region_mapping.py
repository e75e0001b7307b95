"""
Region mapping
--------------

Atribuição de região (continente) por país, usada para facetar o gráfico
regional:

- Base: tabela `region_mapping.csv` (country_name, region) distribuída junto
  com o pacote, com os continentes Africa / Americas / Asia / Europe / Oceania.
- Join por nome normalizado (`normalize_country_name`), para tolerar
  acentos e pontuação ("Côte d'Ivoire" == "Cote d'Ivoire").
- Fallback: quando o país não está na tabela, usa o primeiro valor não nulo
  da coluna de região do próprio arquivo RAW.
- Patches: lista explícita de `RegionPatch` aplicada por último. O patch
  padrão divide "Americas" em "South America" (allow-list) e
  "North America" (todos os demais).

Países sem região ao final (agregados como "World", "OECD members") ficam
com região nula e são descartados pelo chamador.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional, Sequence

import pandas as pd

REGION_MAPPING_CSV = Path(__file__).with_name("region_mapping.csv")


@dataclass(frozen=True)
class RegionPatch:
    """Split `region` in two: listed countries get `sub_region`, the rest `otherwise`."""

    region: str
    sub_region: str
    countries: FrozenSet[str]
    otherwise: str

    def apply(self, country: str, region: Optional[str]) -> Optional[str]:
        if region != self.region:
            return region
        return self.sub_region if country in self.countries else self.otherwise


SOUTH_AMERICA = frozenset(
    {
        "Argentina",
        "Bolivia",
        "Brazil",
        "Chile",
        "Colombia",
        "Ecuador",
        "Guyana",
        "Paraguay",
        "Peru",
        "Suriname",
        "Uruguay",
        "Venezuela",
    }
)

DEFAULT_REGION_PATCHES: Sequence[RegionPatch] = (
    RegionPatch(
        region="Americas",
        sub_region="South America",
        countries=SOUTH_AMERICA,
        otherwise="North America",
    ),
)


def normalize_country_name(name: str) -> str:
    """
    Normaliza nomes de países para facilitar joins.

    Estratégia:
    - lower case
    - remoção de acentos
    - remoção de caracteres não alfanuméricos (exceto espaço)
    - colapsar múltiplos espaços
    - trim nas pontas
    """
    if name is None:
        return ""

    s = str(name).lower()
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = re.sub(r"[^a-z0-9 ]", " ", s)
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def load_region_lookup(path: Path | str = REGION_MAPPING_CSV) -> Dict[str, str]:
    """
    Carrega a tabela país -> região.

    CSV esperado:
        country_name,region

    Retorna um dict indexado pelo nome normalizado.
    """
    table = pd.read_csv(Path(path), dtype="string")
    required_cols = {"country_name", "region"}
    missing = required_cols - set(table.columns)
    if missing:
        raise ValueError(
            f"Region mapping file is missing required columns: {sorted(missing)}",
        )

    table = table.dropna(subset=["country_name", "region"])
    lookup: Dict[str, str] = {}
    for name, region in zip(table["country_name"], table["region"]):
        lookup.setdefault(normalize_country_name(name), str(region))
    return lookup


def lookup_region(
    country: str,
    lookup: Mapping[str, str],
    *,
    fallback: Optional[str] = None,
    patches: Sequence[RegionPatch] = DEFAULT_REGION_PATCHES,
) -> Optional[str]:
    region = lookup.get(normalize_country_name(country))
    if region is None:
        region = fallback
    for patch in patches:
        region = patch.apply(country, region)
    return region


def raw_region_fallbacks(
    df: pd.DataFrame,
    *,
    country_col: str = "country",
    region_col: str = "region",
) -> Dict[str, str]:
    """First non-empty raw region value per country, in row order."""
    if region_col not in df.columns:
        return {}
    raw = df[[country_col, region_col]].dropna(subset=[region_col])
    raw = raw[raw[region_col].astype(str).str.strip() != ""]
    first = raw.drop_duplicates(subset=[country_col], keep="first")
    return {str(c): str(r) for c, r in zip(first[country_col], first[region_col])}


def assign_regions(
    df: pd.DataFrame,
    *,
    lookup: Optional[Mapping[str, str]] = None,
    patches: Sequence[RegionPatch] = DEFAULT_REGION_PATCHES,
    country_col: str = "country",
    region_col: str = "region",
    fallbacks: Optional[Mapping[str, str]] = None,
) -> pd.DataFrame:
    """
    Return a copy of `df` whose `region_col` holds the resolved region of
    each row's country (lookup table, then raw-column fallback, then patches).

    `fallbacks` overrides the raw-column values read from `df` itself; pass
    it when `df` has already lost rows that carried the raw region.
    """
    if lookup is None:
        lookup = load_region_lookup()

    if fallbacks is None:
        fallbacks = raw_region_fallbacks(df, country_col=country_col, region_col=region_col)
    countries = dict.fromkeys(df[country_col].astype(str).tolist())
    resolved = {
        country: lookup_region(
            country,
            lookup,
            fallback=fallbacks.get(country),
            patches=patches,
        )
        for country in countries
    }

    out = df.copy()
    out[region_col] = out[country_col].astype(str).map(resolved).astype("string")
    return out


__all__ = [
    "DEFAULT_REGION_PATCHES",
    "REGION_MAPPING_CSV",
    "RegionPatch",
    "SOUTH_AMERICA",
    "assign_regions",
    "load_region_lookup",
    "lookup_region",
    "normalize_country_name",
    "raw_region_fallbacks",
]
