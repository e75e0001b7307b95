"""
Resolução dinâmica de colunas do arquivo RAW.

The source CSV (an Our World in Data style export) does not have fixed
column names: "Life expectancy at birth, total (years)" in one download,
"life_expectancy" in another. Each canonical role is located by a small
rule table of matchers over the lower-cased header:

    entity              -> header == "entity" | "country"
    year                -> header == "year"
    life_expectancy     -> contains "life" and "expectancy"
    health_expenditure  -> contains health + expenditure/spending + per-capita

The first header satisfying a role's matcher wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence


class ColumnRole(str, Enum):
    ENTITY = "entity"
    YEAR = "year"
    LIFE_EXPECTANCY = "life_expectancy"
    HEALTH_EXPENDITURE = "health_expenditure"


# Nome canônico de cada papel depois do rename
CANONICAL_NAMES: Dict[ColumnRole, str] = {
    ColumnRole.ENTITY: "country",
    ColumnRole.YEAR: "year",
    ColumnRole.LIFE_EXPECTANCY: "life_exp",
    ColumnRole.HEALTH_EXPENDITURE: "health_exp",
}


class ColumnResolutionError(ValueError):
    """Raised when one or more required column roles cannot be found."""

    def __init__(self, missing: Sequence[ColumnRole], headers: Sequence[str]) -> None:
        self.missing = list(missing)
        self.headers = list(headers)
        names = ", ".join(role.value for role in self.missing)
        super().__init__(
            f"Could not resolve required column role(s): {names}. "
            f"Available headers: {self.headers}"
        )


def _normalize_header(header: str) -> str:
    return re.sub(r"\s+", " ", str(header).strip().lower())


def _exact(*names: str) -> Callable[[str], bool]:
    wanted = {n.lower() for n in names}

    def match(header: str) -> bool:
        return header in wanted

    return match


def _contains_all(*token_groups: Sequence[str]) -> Callable[[str], bool]:
    """Matcher requiring at least one token from every group."""

    def match(header: str) -> bool:
        return all(any(tok in header for tok in group) for group in token_groups)

    return match


@dataclass(frozen=True)
class ColumnRule:
    role: ColumnRole
    matcher: Callable[[str], bool]
    description: str


DEFAULT_COLUMN_RULES: List[ColumnRule] = [
    ColumnRule(
        ColumnRole.ENTITY,
        _exact("entity", "country"),
        'header equal to "Entity" or "Country"',
    ),
    ColumnRule(
        ColumnRole.YEAR,
        _exact("year"),
        'header equal to "Year"',
    ),
    ColumnRule(
        ColumnRole.LIFE_EXPECTANCY,
        _contains_all(("life",), ("expectancy",)),
        'header containing "life" and "expectancy"',
    ),
    ColumnRule(
        ColumnRole.HEALTH_EXPENDITURE,
        _contains_all(
            ("health",),
            ("expenditure", "spending"),
            ("per capita", "per_capita", "percapita", "per-capita"),
        ),
        'header containing "health", "expenditure" and "per capita"',
    ),
]


def _rule_for(role: ColumnRole, rules: Iterable[ColumnRule]) -> ColumnRule:
    for rule in rules:
        if rule.role == role:
            return rule
    raise KeyError(f"No column rule registered for role {role.value!r}")


def resolve_column(
    headers: Sequence[str],
    role: ColumnRole,
    *,
    rules: Iterable[ColumnRule] = DEFAULT_COLUMN_RULES,
) -> Optional[str]:
    """Return the first header matching `role`, or None."""
    rule = _rule_for(role, rules)
    for header in headers:
        if rule.matcher(_normalize_header(header)):
            return header
    return None


def resolve_schema(
    headers: Sequence[str],
    *,
    roles: Sequence[ColumnRole] = tuple(ColumnRole),
    rules: Iterable[ColumnRule] = DEFAULT_COLUMN_RULES,
) -> Dict[ColumnRole, str]:
    """
    Resolve every role in `roles` against `headers`.

    Raises ColumnResolutionError naming all roles that failed; a partial
    mapping is never returned.
    """
    rules = list(rules)
    headers = list(headers)
    resolved: Dict[ColumnRole, str] = {}
    missing: List[ColumnRole] = []
    for role in roles:
        header = resolve_column(headers, role, rules=rules)
        if header is None:
            missing.append(role)
        else:
            resolved[role] = header

    if missing:
        raise ColumnResolutionError(missing, headers)
    return resolved


def rename_map(schema: Mapping[ColumnRole, str]) -> Dict[str, str]:
    """Map actual header -> canonical column name for `DataFrame.rename`."""
    return {header: CANONICAL_NAMES[role] for role, header in schema.items()}


__all__ = [
    "CANONICAL_NAMES",
    "ColumnResolutionError",
    "ColumnRole",
    "ColumnRule",
    "DEFAULT_COLUMN_RULES",
    "rename_map",
    "resolve_column",
    "resolve_schema",
]
