"""
Transformations layer
----------------------

Módulos responsáveis por converter o CSV RAW (painel país-ano) em um
DataFrame tipado, filtrado e classificado, pronto para a camada de análise
e para os gráficos.
"""

from .categories import (  # noqa: F401
    Category,
    assign_categories,
    tag_frame,
)
from .column_resolver import (  # noqa: F401
    ColumnResolutionError,
    ColumnRole,
    resolve_column,
    resolve_schema,
)
from .health_expenditure_processed import (  # noqa: F401
    REGIONAL_COLUMNS,
    SchemaError,
    load_raw_health_table,
    normalize_regional_frame,
    normalize_replication_frame,
)
from .region_mapping import (  # noqa: F401
    DEFAULT_REGION_PATCHES,
    RegionPatch,
    assign_regions,
    load_region_lookup,
    normalize_country_name,
    raw_region_fallbacks,
)

__all__ = [
    "Category",
    "ColumnResolutionError",
    "ColumnRole",
    "DEFAULT_REGION_PATCHES",
    "REGIONAL_COLUMNS",
    "RegionPatch",
    "SchemaError",
    "assign_categories",
    "assign_regions",
    "load_raw_health_table",
    "load_region_lookup",
    "normalize_country_name",
    "normalize_regional_frame",
    "normalize_replication_frame",
    "raw_region_fallbacks",
    "resolve_column",
    "resolve_schema",
    "tag_frame",
]
