"""
Charts layer
------------

Theme configuration, web font registration, layer descriptors and the
composition of the replication and regional charts.
"""

from .composer import (  # noqa: F401
    EmptyChartError,
    compose_faceted_chart,
    compose_replication_chart,
    render_png,
    save_chart,
)
from .fonts import register_theme_fonts  # noqa: F401
from .layers import compose_layers  # noqa: F401
from .theme import DEFAULT_THEME, ChartTheme  # noqa: F401

__all__ = [
    "ChartTheme",
    "DEFAULT_THEME",
    "EmptyChartError",
    "compose_faceted_chart",
    "compose_layers",
    "compose_replication_chart",
    "register_theme_fonts",
    "render_png",
    "save_chart",
]
