"""
Chart composition for both variants.

- Replication: one panel, fixed axes (0-10,000 int-$ x 40-86 years),
  United States drawn as a gradient line over the key-country and
  background lines.
- Regional: the same stack faceted by region, axes scaled per facet,
  regional colours for top-N and highlighted countries.

Each main chart gets an independently composed footnote panel stacked
underneath with a fixed height ratio.
"""

from __future__ import annotations

import io
import math
from typing import List, Optional, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from adapters import StorageAdapter  # noqa: E402
from transformations.categories import Category  # noqa: E402
from .layers import (  # noqa: E402
    BackgroundLayer,
    CaptionLayer,
    GradientLineLayer,
    Layer,
    LineLayer,
    ScaleLayer,
    TextLayer,
    ThemeLayer,
    compose_layers,
)
from .theme import ChartTheme  # noqa: E402

REPLICATION_XLIM = (0.0, 10_000.0)
REPLICATION_YLIM = (40.0, 86.0)
REPLICATION_XTICKS = (0, 2_000, 4_000, 6_000, 8_000, 10_000)
REPLICATION_YTICKS = (40, 50, 60, 70, 80)
REPLICATION_X_TERMINAL = "$10,000"
REPLICATION_Y_TERMINAL = "80 years"

REPLICATION_TITLE = "Life expectancy vs. health expenditure, 2000 onwards"
REPLICATION_SUBTITLE = (
    "Health expenditure per capita (PPP, international-$) against period life "
    "expectancy at birth. The United States spends far more for fewer years."
)
REGIONAL_TITLE = "Health spending and life expectancy by region, 2000-2017"
REGIONAL_SUBTITLE = (
    "Ten longest-lived countries per region in colour; the country whose "
    "spending grew the most is labelled."
)
FOOTNOTE_TEXT = (
    "Source: World Bank World Development Indicators via Our World in Data. "
    "Health expenditure per capita, PPP (current international $)."
)

FACET_COLUMNS = 3


class EmptyChartError(ValueError):
    """Nothing left to draw after normalisation."""


def _by_category(df: pd.DataFrame, category: Category) -> pd.DataFrame:
    return df[df["category"].astype(str) == category.value]


def _labels_by_category(labels: pd.DataFrame, category: Category) -> pd.DataFrame:
    if labels.empty:
        return labels
    return labels[labels["category"].astype(str) == category.value]


def build_replication_layers(
    df: pd.DataFrame,
    labels: pd.DataFrame,
    theme: ChartTheme,
) -> List[Layer]:
    """Ordered layer stack of the replication chart."""
    return [
        BackgroundLayer(REPLICATION_XLIM, REPLICATION_YLIM),
        LineLayer(
            _by_category(df, Category.REST),
            color=theme.rest_color,
            linewidth=theme.rest_linewidth,
            alpha=theme.rest_alpha,
            name="rest",
        ),
        LineLayer(
            _by_category(df, Category.HIGHLIGHTED),
            color=theme.key_color,
            linewidth=theme.key_linewidth,
            alpha=theme.key_alpha,
            name="key",
        ),
        GradientLineLayer(
            _by_category(df, Category.FOCUS),
            colors=theme.focus_gradient,
            linewidth=theme.focus_linewidth,
            name="focus",
        ),
        TextLayer(
            _labels_by_category(labels, Category.HIGHLIGHTED),
            color=theme.muted_text_color,
            size=theme.label_size,
            name="key labels",
        ),
        TextLayer(
            _labels_by_category(labels, Category.FOCUS),
            color=theme.focus_color,
            size=theme.label_size + 2,
            fontweight="bold",
            name="focus labels",
        ),
        ScaleLayer(
            REPLICATION_XLIM,
            REPLICATION_YLIM,
            xticks=REPLICATION_XTICKS,
            yticks=REPLICATION_YTICKS,
            x_terminal_label=REPLICATION_X_TERMINAL,
            y_terminal_label=REPLICATION_Y_TERMINAL,
        ),
        ThemeLayer(right_margin=theme.right_margin),
        CaptionLayer(
            REPLICATION_TITLE,
            x=0.0,
            y=1.10,
            size=theme.title_size,
            font_alias="title",
            fontweight="bold",
        ),
        CaptionLayer(
            REPLICATION_SUBTITLE,
            x=0.0,
            y=1.03,
            size=theme.subtitle_size,
            color=theme.muted_text_color,
        ),
        CaptionLayer(
            "Health expenditure per capita",
            x=1.0,
            y=-0.08,
            size=theme.caption_size,
            color=theme.muted_text_color,
            ha="right",
            va="top",
        ),
    ]


def facet_domain(df: pd.DataFrame, labels: pd.DataFrame) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Per-facet (xlim, ylim) covering the lines and their labels with padding."""
    xs = [df["health_exp"].min(), df["health_exp"].max()]
    ys = [df["life_exp"].min(), df["life_exp"].max()]
    if not labels.empty:
        xs += [labels["x"].min(), labels["x"].max()]
        ys += [labels["y"].min(), labels["y"].max()]
    x0, x1 = min(0.0, float(min(xs))), float(max(xs))
    y0, y1 = float(min(ys)), float(max(ys))
    x_pad = max((x1 - x0) * 0.05, 100.0)
    y_pad = max((y1 - y0) * 0.05, 0.5)
    return (x0, x1 + x_pad), (math.floor(y0 - y_pad), math.ceil(y1 + y_pad))


def build_facet_layers(
    df: pd.DataFrame,
    labels: pd.DataFrame,
    theme: ChartTheme,
    region: str,
) -> List[Layer]:
    """Ordered layer stack of one region facet."""
    xlim, ylim = facet_domain(df, labels)
    color = theme.region_color(region)
    return [
        BackgroundLayer(xlim, ylim),
        LineLayer(
            _by_category(df, Category.REST),
            color=theme.rest_color,
            linewidth=theme.rest_linewidth,
            alpha=theme.rest_alpha,
            name="rest",
        ),
        LineLayer(
            _by_category(df, Category.TOP_N),
            color=color,
            linewidth=theme.top_n_linewidth,
            alpha=theme.top_n_alpha,
            color_by="region",
            palette=theme.region_palette,
            name="top_n",
        ),
        LineLayer(
            _by_category(df, Category.HIGHLIGHTED),
            color=color,
            linewidth=theme.highlight_linewidth,
            alpha=1.0,
            color_by="region",
            palette=theme.region_palette,
            name="highlighted",
        ),
        TextLayer(
            _labels_by_category(labels, Category.TOP_N),
            color=theme.muted_text_color,
            size=theme.label_size - 1,
            name="top_n labels",
        ),
        TextLayer(
            _labels_by_category(labels, Category.HIGHLIGHTED),
            color=color,
            size=theme.label_size,
            fontweight="bold",
            color_by="region",
            palette=theme.region_palette,
            name="highlighted labels",
        ),
        ScaleLayer(xlim, ylim),
        ThemeLayer(right_margin=theme.right_margin),
        CaptionLayer(
            region,
            x=0.0,
            y=1.02,
            size=theme.subtitle_size + 1,
            color=color,
            font_alias="title",
            fontweight="bold",
        ),
    ]


def build_footnote_layers(theme: ChartTheme, text: str = FOOTNOTE_TEXT) -> List[Layer]:
    return [
        ThemeLayer(hide_ticks=True),
        CaptionLayer(
            text,
            x=0.0,
            y=0.5,
            size=theme.caption_size,
            color=theme.muted_text_color,
            va="center",
        ),
    ]


def compose_with_footnote(
    theme: ChartTheme,
    *,
    rows: int = 1,
    cols: int = 1,
    figsize: Optional[Tuple[float, float]] = None,
    footnote: str = FOOTNOTE_TEXT,
) -> Tuple[Figure, List, object]:
    """
    Create a figure whose grid holds `rows x cols` chart axes above a
    footnote panel. Returns (figure, chart axes, footnote axes).
    """
    fig = plt.figure(figsize=figsize or theme.figsize, facecolor=theme.figure_color)
    main_ratio, foot_ratio = theme.footnote_height_ratio
    outer = fig.add_gridspec(2, 1, height_ratios=[main_ratio, foot_ratio], hspace=0.15)
    inner = outer[0].subgridspec(rows, cols, hspace=0.45, wspace=0.3)
    chart_axes = [fig.add_subplot(inner[r, c]) for r in range(rows) for c in range(cols)]
    foot_ax = fig.add_subplot(outer[1])
    compose_layers(foot_ax, build_footnote_layers(theme, footnote), theme)
    return fig, chart_axes, foot_ax


def compose_replication_chart(
    df: pd.DataFrame,
    labels: pd.DataFrame,
    theme: ChartTheme,
) -> Figure:
    fig, (ax,), _ = compose_with_footnote(theme)
    compose_layers(ax, build_replication_layers(df, labels, theme), theme)
    fig.subplots_adjust(top=0.86)
    print(f"[chart] replication: {df['country'].nunique()} lines, {len(labels)} labels")
    return fig


def facet_regions(df: pd.DataFrame, theme: ChartTheme) -> List[str]:
    """Regions present in `df`, in palette order first, then alphabetical."""
    present = set(df["region"].astype(str))
    ordered = [r for r in theme.region_palette if r in present]
    return ordered + sorted(present - set(ordered))


def compose_faceted_chart(
    df: pd.DataFrame,
    labels: pd.DataFrame,
    theme: ChartTheme,
    *,
    ncols: int = FACET_COLUMNS,
    regions: Optional[Sequence[str]] = None,
) -> Figure:
    """One facet per region, each with independently scaled axes."""
    regions = list(regions) if regions is not None else facet_regions(df, theme)
    if not regions:
        raise EmptyChartError("No regions to facet; the normalized table is empty")
    ncols = max(1, min(ncols, len(regions)))
    nrows = math.ceil(len(regions) / ncols)

    fig, axes, _ = compose_with_footnote(
        theme,
        rows=nrows,
        cols=ncols,
        figsize=theme.facet_figsize,
    )
    for ax, region in zip(axes, regions):
        region_df = df[df["region"].astype(str) == region]
        region_labels = labels[labels["region"].astype(str) == region] if not labels.empty else labels
        compose_layers(ax, build_facet_layers(region_df, region_labels, theme, region), theme)
    for ax in axes[len(regions):]:
        ax.set_visible(False)

    fig.suptitle(
        REGIONAL_TITLE,
        x=0.06,
        ha="left",
        fontsize=theme.title_size,
        fontweight="bold",
        fontfamily=theme.font("title"),
        color=theme.text_color,
    )
    fig.text(
        0.06,
        0.935,
        REGIONAL_SUBTITLE,
        fontsize=theme.subtitle_size,
        fontfamily=theme.font("body"),
        color=theme.muted_text_color,
    )
    fig.subplots_adjust(left=0.06, top=0.88)
    print(f"[chart] regional: {len(regions)} facets, {len(labels)} labels")
    return fig


def render_png(fig: Figure, *, dpi: int = 150) -> bytes:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, facecolor=fig.get_facecolor())
    plt.close(fig)
    buf.seek(0)
    return buf.getvalue()


def save_chart(fig: Figure, key: str, storage: StorageAdapter, *, dpi: int = 150) -> str:
    """Render `fig` to PNG and write it through `storage`; returns the location."""
    return storage.write_raw(key, render_png(fig, dpi=dpi))


__all__ = [
    "EmptyChartError",
    "FOOTNOTE_TEXT",
    "REPLICATION_XLIM",
    "REPLICATION_XTICKS",
    "REPLICATION_X_TERMINAL",
    "REPLICATION_YLIM",
    "build_facet_layers",
    "build_footnote_layers",
    "build_replication_layers",
    "compose_faceted_chart",
    "compose_replication_chart",
    "compose_with_footnote",
    "facet_domain",
    "facet_regions",
    "render_png",
    "save_chart",
]
