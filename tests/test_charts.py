from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from matplotlib.collections import LineCollection
from matplotlib.patches import Rectangle

from analysis import build_regional_selection, place_regional_labels, place_replication_labels
from charts.composer import (
    REPLICATION_XLIM,
    EmptyChartError,
    build_facet_layers,
    build_replication_layers,
    compose_faceted_chart,
    compose_replication_chart,
    facet_domain,
    render_png,
)
from charts.layers import (
    BackgroundLayer,
    CaptionLayer,
    GradientLineLayer,
    LineLayer,
    ScaleLayer,
    TextLayer,
    ThemeLayer,
    compose_layers,
    gradient_rgba,
    gradient_segments,
    thousands_formatter,
)
from charts.theme import DEFAULT_THEME, ChartTheme
from transformations.health_expenditure_processed import (
    normalize_regional_frame,
    normalize_replication_frame,
)


@pytest.fixture
def replication(owid_raw):
    df = normalize_replication_frame(owid_raw)
    return df, place_replication_labels(df)


@pytest.fixture
def regional(owid_raw):
    df = build_regional_selection(normalize_regional_frame(owid_raw))
    return df, place_regional_labels(df)


def test_replication_layer_order(replication):
    df, labels = replication
    layers = build_replication_layers(df, labels, DEFAULT_THEME)
    kinds = [type(layer) for layer in layers]
    assert kinds[:8] == [
        BackgroundLayer,
        LineLayer,
        LineLayer,
        GradientLineLayer,
        TextLayer,
        TextLayer,
        ScaleLayer,
        ThemeLayer,
    ]
    assert all(k is CaptionLayer for k in kinds[8:])
    assert [layer.name for layer in layers[1:4]] == ["rest", "key", "focus"]


def test_compose_layers_draws_later_layers_on_top(replication):
    df, labels = replication
    fig, ax = plt.subplots()
    compose_layers(ax, build_replication_layers(df, labels, DEFAULT_THEME), DEFAULT_THEME)

    background = [p for p in ax.patches if isinstance(p, Rectangle)][0]
    lines = ax.get_lines()
    focus = [c for c in ax.collections if isinstance(c, LineCollection)][0]
    texts = [t for t in ax.texts if t.get_text() == "United States"]

    assert background.get_zorder() < min(line.get_zorder() for line in lines)
    assert max(line.get_zorder() for line in lines) < focus.get_zorder()
    assert focus.get_zorder() < texts[0].get_zorder()
    assert ax.get_xlim() == REPLICATION_XLIM
    plt.close(fig)


def test_terminal_tick_gets_literal_label():
    fmt = thousands_formatter(10_000, "$10,000")
    assert fmt(10_000, 5) == "$10,000"
    assert fmt(2_000, 1) == "2,000"
    assert fmt(0, 0) == "0"
    assert thousands_formatter(None, None)(12_345.0, 0) == "12,345"


def test_gradient_opacity_is_value_over_max():
    rgba = gradient_rgba(np.array([100.0, 200.0, 400.0]), ("#ffffff", "#000000"))
    assert rgba[:, 3].tolist() == [0.25, 0.5, 1.0]
    assert tuple(rgba[-1, :3]) == (0.0, 0.0, 0.0)


def test_gradient_segments_join_consecutive_points():
    part = pd.DataFrame({"health_exp": [1.0, 2.0, 4.0], "life_exp": [70.0, 71.0, 72.0]})
    segments, values = gradient_segments(part)
    assert segments.shape == (2, 2, 2)
    assert values.tolist() == [1.5, 3.0]


def test_unknown_layer_type_is_rejected():
    fig, ax = plt.subplots()
    with pytest.raises(TypeError, match="Unsupported layer type"):
        compose_layers(ax, [object()], DEFAULT_THEME)
    plt.close(fig)


def test_replication_chart_has_footnote_panel(replication):
    df, labels = replication
    fig = compose_replication_chart(df, labels, DEFAULT_THEME)
    main, foot = fig.axes
    assert main.get_position().height > foot.get_position().height
    assert main.get_position().y0 > foot.get_position().y0
    assert main.xaxis.get_major_formatter()(10_000, 5) == "$10,000"
    assert any("Source:" in t.get_text() for t in foot.texts)
    png = render_png(fig, dpi=40)
    assert png[:8] == b"\x89PNG\r\n\x1a\n"


def test_faceted_chart_one_panel_per_region(regional):
    df, labels = regional
    fig = compose_faceted_chart(df, labels, DEFAULT_THEME)
    titles = {
        t.get_text()
        for ax in fig.axes
        for t in ax.texts
        if t.get_text() in {"North America", "South America", "Europe", "Asia"}
    }
    assert titles == {"North America", "South America", "Europe", "Asia"}
    visible = [ax for ax in fig.axes if ax.get_visible()]
    # 4 facets + footnote; the two spare grid cells stay hidden
    assert len(visible) == 5
    plt.close(fig)


def test_faceted_chart_rejects_empty_table(regional):
    df, labels = regional
    with pytest.raises(EmptyChartError, match="No regions"):
        compose_faceted_chart(df.iloc[0:0], labels.iloc[0:0], DEFAULT_THEME)


def test_facets_are_scaled_independently(regional):
    df, labels = regional
    europe = df[df["region"] == "Europe"]
    south = df[df["region"] == "South America"]
    assert facet_domain(europe, labels.iloc[0:0]) != facet_domain(south, labels.iloc[0:0])


def test_facet_title_uses_region_colour(regional):
    df, labels = regional
    layers = build_facet_layers(df[df["region"] == "Europe"], labels, DEFAULT_THEME, "Europe")
    title = layers[-1]
    assert isinstance(title, CaptionLayer)
    assert title.text == "Europe"
    assert title.color == DEFAULT_THEME.region_color("Europe")


def test_theme_is_immutable_and_with_fonts_returns_copy():
    theme = ChartTheme()
    updated = theme.with_fonts({"title": "DejaVu Serif"})
    assert theme.font("title") == "Roboto Condensed"
    assert updated.font("title") == "DejaVu Serif"
    assert updated.font("body") == "Lato"
    with pytest.raises(Exception):
        theme.dpi = 10
    with pytest.raises(TypeError):
        theme.fonts["title"] = "x"
