"""
Layer descriptors and the single function that draws them.

A chart is an ordered list of layer values; `compose_layers` walks the
list and draws each one with a z-order taken from its position, so later
layers always sit on top of earlier ones regardless of artist type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple, Type

import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection
from matplotlib.colors import LinearSegmentedColormap, Normalize, to_rgba
from matplotlib.patches import Rectangle
from matplotlib.ticker import FixedLocator, FuncFormatter, MaxNLocator

from .theme import ChartTheme

Range = Tuple[float, float]

ZORDER_BASE = 1.0
ZORDER_STEP = 1.0


@dataclass(frozen=True, eq=False)
class BackgroundLayer:
    """Filled rectangle over the whole axis domain."""

    xlim: Range
    ylim: Range
    color: Optional[str] = None


@dataclass(frozen=True, eq=False)
class LineLayer:
    """One line per country, x = health_exp, y = life_exp, ordered by year."""

    data: pd.DataFrame
    color: str
    linewidth: float
    alpha: float
    color_by: Optional[str] = None
    palette: Optional[Mapping[str, str]] = None
    name: str = ""


@dataclass(frozen=True, eq=False)
class GradientLineLayer:
    """
    Line(s) whose segment colour follows a continuous gradient over
    `value_col` and whose opacity is `value / max(value)`.
    """

    data: pd.DataFrame
    colors: Tuple[str, str]
    linewidth: float
    value_col: str = "health_exp"
    name: str = ""


@dataclass(frozen=True, eq=False)
class TextLayer:
    """Country labels from a label table (country, x, y, label, ...)."""

    labels: pd.DataFrame
    color: str
    size: float
    fontweight: str = "normal"
    font_alias: str = "body"
    color_by: Optional[str] = None
    palette: Optional[Mapping[str, str]] = None
    name: str = ""


@dataclass(frozen=True, eq=False)
class ScaleLayer:
    """
    Fixed domain and ticks per axis.

    Tick labels get thousands separators; the last tick of an axis is
    replaced by its `*_terminal_label` when given. `None` ticks fall back to
    a MaxNLocator (used by the independently scaled facets).
    """

    xlim: Range
    ylim: Range
    xticks: Optional[Sequence[float]] = None
    yticks: Optional[Sequence[float]] = None
    x_terminal_label: Optional[str] = None
    y_terminal_label: Optional[str] = None


@dataclass(frozen=True, eq=False)
class ThemeLayer:
    """Strip default chrome and style the remaining tick labels."""

    hide_ticks: bool = False
    right_margin: Optional[float] = None


@dataclass(frozen=True, eq=False)
class CaptionLayer:
    """Free text positioned in axes coordinates (may lie outside 0..1)."""

    text: str
    x: float
    y: float
    size: float
    color: Optional[str] = None
    font_alias: str = "body"
    fontweight: str = "normal"
    ha: str = "left"
    va: str = "bottom"


Layer = object


def thousands_formatter(terminal_value: Optional[float], terminal_label: Optional[str]) -> FuncFormatter:
    def fmt(value: float, _pos: Optional[int] = None) -> str:
        if terminal_label is not None and terminal_value is not None and np.isclose(value, terminal_value):
            return terminal_label
        return f"{value:,.0f}"

    return FuncFormatter(fmt)


def _lines_by_country(data: pd.DataFrame):
    if data.empty:
        return
    for country, part in data.groupby("country", sort=False):
        part = part.sort_values("year", kind="stable")
        yield country, part


def _draw_background(ax: Axes, layer: BackgroundLayer, theme: ChartTheme, zorder: float) -> None:
    (x0, x1), (y0, y1) = layer.xlim, layer.ylim
    ax.add_patch(
        Rectangle(
            (x0, y0),
            x1 - x0,
            y1 - y0,
            facecolor=layer.color or theme.background_color,
            edgecolor="none",
            zorder=zorder,
        )
    )


def _draw_lines(ax: Axes, layer: LineLayer, theme: ChartTheme, zorder: float) -> None:
    for _, part in _lines_by_country(layer.data):
        color = layer.color
        if layer.color_by and layer.palette is not None:
            color = layer.palette.get(str(part[layer.color_by].iloc[0]), layer.color)
        ax.plot(
            part["health_exp"].to_numpy(),
            part["life_exp"].to_numpy(),
            color=color,
            linewidth=layer.linewidth,
            alpha=layer.alpha,
            solid_capstyle="round",
            zorder=zorder,
        )


def gradient_segments(part: pd.DataFrame, value_col: str = "health_exp") -> Tuple[np.ndarray, np.ndarray]:
    """Segments between consecutive points and the mean value of each segment."""
    points = part[["health_exp", "life_exp"]].to_numpy(dtype=float)
    if len(points) < 2:
        return np.empty((0, 2, 2)), np.empty(0)
    segments = np.stack([points[:-1], points[1:]], axis=1)
    values = part[value_col].to_numpy(dtype=float)
    return segments, (values[:-1] + values[1:]) / 2.0


def gradient_rgba(values: np.ndarray, colors: Tuple[str, str]) -> np.ndarray:
    """RGBA per value: colour along `colors`, alpha = value / max(value)."""
    if values.size == 0:
        return np.empty((0, 4))
    cmap = LinearSegmentedColormap.from_list("focus_gradient", list(colors))
    vmax = float(np.max(values))
    norm = Normalize(vmin=float(np.min(values)), vmax=vmax)
    rgba = cmap(norm(values))
    rgba[:, 3] = np.clip(values / vmax, 0.0, 1.0) if vmax > 0 else 1.0
    return rgba


def _draw_gradient(ax: Axes, layer: GradientLineLayer, theme: ChartTheme, zorder: float) -> None:
    for _, part in _lines_by_country(layer.data):
        segments, values = gradient_segments(part, layer.value_col)
        if len(segments) == 0:
            ax.plot(
                part["health_exp"].to_numpy(),
                part["life_exp"].to_numpy(),
                marker="o",
                color=to_rgba(layer.colors[-1]),
                zorder=zorder,
            )
            continue
        collection = LineCollection(
            segments,
            colors=gradient_rgba(values, layer.colors),
            linewidths=layer.linewidth,
            capstyle="round",
            zorder=zorder,
        )
        ax.add_collection(collection)


def _draw_text(ax: Axes, layer: TextLayer, theme: ChartTheme, zorder: float) -> None:
    for _, row in layer.labels.iterrows():
        color = layer.color
        if layer.color_by and layer.palette is not None and layer.color_by in row.index:
            color = layer.palette.get(str(row[layer.color_by]), layer.color)
        ax.text(
            row["x"],
            row["y"],
            str(row["label"]),
            color=color,
            fontsize=layer.size,
            fontweight=layer.fontweight,
            fontfamily=theme.font(layer.font_alias),
            ha="left",
            va="center",
            clip_on=False,
            zorder=zorder,
        )


def _apply_scale(ax: Axes, layer: ScaleLayer, theme: ChartTheme, zorder: float) -> None:
    ax.set_xlim(*layer.xlim)
    ax.set_ylim(*layer.ylim)
    for axis, ticks, terminal in (
        (ax.xaxis, layer.xticks, layer.x_terminal_label),
        (ax.yaxis, layer.yticks, layer.y_terminal_label),
    ):
        if ticks is not None:
            axis.set_major_locator(FixedLocator(list(ticks)))
            axis.set_major_formatter(thousands_formatter(max(ticks), terminal))
        else:
            axis.set_major_locator(MaxNLocator(nbins=4))
            axis.set_major_formatter(thousands_formatter(None, None))


def _apply_theme(ax: Axes, layer: ThemeLayer, theme: ChartTheme, zorder: float) -> None:
    for spine in ax.spines.values():
        spine.set_visible(False)
    ax.set_facecolor("none")
    ax.grid(False)
    if layer.hide_ticks:
        ax.set_xticks([])
        ax.set_yticks([])
    else:
        ax.tick_params(
            axis="both",
            length=0,
            pad=4,
            colors=theme.tick_color,
            labelsize=theme.tick_size,
            labelfontfamily=theme.font("body"),
        )
    if layer.right_margin is not None:
        ax.figure.subplots_adjust(right=layer.right_margin)


def _draw_caption(ax: Axes, layer: CaptionLayer, theme: ChartTheme, zorder: float) -> None:
    ax.text(
        layer.x,
        layer.y,
        layer.text,
        transform=ax.transAxes,
        fontsize=layer.size,
        color=layer.color or theme.text_color,
        fontfamily=theme.font(layer.font_alias),
        fontweight=layer.fontweight,
        ha=layer.ha,
        va=layer.va,
        clip_on=False,
        zorder=zorder,
    )


LAYER_DRAWERS: Dict[Type, Callable[[Axes, object, ChartTheme, float], None]] = {
    BackgroundLayer: _draw_background,
    LineLayer: _draw_lines,
    GradientLineLayer: _draw_gradient,
    TextLayer: _draw_text,
    ScaleLayer: _apply_scale,
    ThemeLayer: _apply_theme,
    CaptionLayer: _draw_caption,
}


def compose_layers(ax: Axes, layers: Sequence[Layer], theme: ChartTheme) -> Axes:
    """Draw `layers` on `ax` in list order."""
    for i, layer in enumerate(layers):
        drawer = LAYER_DRAWERS.get(type(layer))
        if drawer is None:
            raise TypeError(f"Unsupported layer type: {type(layer).__name__}")
        drawer(ax, layer, theme, ZORDER_BASE + i * ZORDER_STEP)
    return ax


__all__ = [
    "BackgroundLayer",
    "CaptionLayer",
    "GradientLineLayer",
    "LAYER_DRAWERS",
    "LineLayer",
    "ScaleLayer",
    "TextLayer",
    "ThemeLayer",
    "compose_layers",
    "gradient_rgba",
    "gradient_segments",
    "thousands_formatter",
]
