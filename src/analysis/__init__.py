"""
Analysis layer
--------------

Derived aggregates and label tables computed from the normalized panel:

- per-region top-N / largest-change country selections
- static label placement for both chart variants
"""

from .country_selection import (  # noqa: F401
    TOP_N_DEFAULT,
    build_regional_selection,
    select_largest_change,
    select_top_n,
    tag_regional_categories,
)
from .label_placement import (  # noqa: F401
    ManualLabel,
    place_regional_labels,
    place_replication_labels,
)

__all__ = [
    "TOP_N_DEFAULT",
    "ManualLabel",
    "build_regional_selection",
    "place_regional_labels",
    "place_replication_labels",
    "select_largest_change",
    "select_top_n",
    "tag_regional_categories",
]
