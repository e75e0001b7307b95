from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Tuple


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


# Google Fonts families fetched at render time, keyed by short alias
DEFAULT_WEB_FONTS = _frozen(
    {
        "title": "Roboto Condensed",
        "body": "Lato",
    }
)

DEFAULT_REGION_PALETTE = _frozen(
    {
        "Africa": "#D1495B",
        "Asia": "#EDAE49",
        "Europe": "#00798C",
        "North America": "#30638E",
        "South America": "#66A182",
        "Oceania": "#8D6A9F",
    }
)


@dataclass(frozen=True)
class ChartTheme:
    """
    Immutable styling configuration handed to the chart composer.

    `fonts` maps a short alias ("title", "body") to the family name used when
    drawing; it starts as the requested web font families and is replaced by
    the families that actually registered (or the default face).
    """

    fonts: Mapping[str, str] = field(default_factory=lambda: DEFAULT_WEB_FONTS)
    fallback_font: str = "DejaVu Sans"

    figsize: Tuple[float, float] = (10.0, 7.5)
    facet_figsize: Tuple[float, float] = (14.0, 10.0)
    dpi: int = 150
    footnote_height_ratio: Tuple[int, int] = (14, 1)
    right_margin: float = 0.84

    figure_color: str = "#FFFFFF"
    background_color: str = "#F3F1ED"
    text_color: str = "#2B2B2B"
    muted_text_color: str = "#7A7A7A"
    tick_color: str = "#8C8C8C"
    tick_size: float = 9.0

    rest_color: str = "#A9A9A9"
    rest_alpha: float = 0.25
    rest_linewidth: float = 0.6

    key_color: str = "#4F6D8F"
    key_alpha: float = 0.75
    key_linewidth: float = 1.4

    top_n_alpha: float = 0.55
    top_n_linewidth: float = 1.1

    highlight_linewidth: float = 2.6
    focus_linewidth: float = 3.4
    focus_gradient: Tuple[str, str] = ("#F4A582", "#B2182B")
    focus_color: str = "#B2182B"

    region_palette: Mapping[str, str] = field(default_factory=lambda: DEFAULT_REGION_PALETTE)

    title_size: float = 16.0
    subtitle_size: float = 11.0
    label_size: float = 9.0
    caption_size: float = 8.0

    def font(self, alias: str) -> str:
        return self.fonts.get(alias, self.fallback_font)

    def region_color(self, region: str) -> str:
        return self.region_palette.get(region, self.key_color)

    def with_fonts(self, fonts: Mapping[str, str]) -> "ChartTheme":
        merged = dict(self.fonts)
        merged.update(fonts)
        return replace(self, fonts=_frozen(merged))


DEFAULT_THEME = ChartTheme()


__all__ = ["ChartTheme", "DEFAULT_THEME", "DEFAULT_REGION_PALETTE", "DEFAULT_WEB_FONTS"]
