"""
Local entrypoint for the health expenditure x life expectancy charts.

Runs, for the same raw CSV:

1. Load RAW table (all columns as text)
2. Font registration (web fonts, falls back to the default face)
3. Replication chart: resolve columns -> normalize (year >= 2000) -> tag ->
   labels -> compose -> PNG
4. Regional chart: positional 7-column contract -> normalize (2000-2017) ->
   regions -> top-N / largest-change selection -> labels -> faceted
   compose -> PNG

Intended usage (local):

    PYTHONPATH=src python -m local_pipeline

    PYTHONPATH=src python -m local_pipeline --variant regional --no-fonts

Environment variables (optionally from .env):

- HEALTH_DATA_PATH   input CSV (default: data/life-expectancy-vs-health-expenditure.csv)
- CHART_OUTPUT_DIR   output root (default: output)
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple

import pandas as pd
from matplotlib.figure import Figure

from adapters import LocalStorageAdapter, StorageAdapter
from analysis import (
    TOP_N_DEFAULT,
    build_regional_selection,
    place_regional_labels,
    place_replication_labels,
)
from charts import (
    DEFAULT_THEME,
    ChartTheme,
    EmptyChartError,
    compose_faceted_chart,
    compose_replication_chart,
    register_theme_fonts,
    save_chart,
)
from env_loader import env_path, load_dotenv_if_present
from transformations import (
    load_raw_health_table,
    normalize_regional_frame,
    normalize_replication_frame,
)

load_dotenv_if_present()

DATA_PATH = env_path("HEALTH_DATA_PATH", Path("data") / "life-expectancy-vs-health-expenditure.csv")
OUTPUT_DIR = env_path("CHART_OUTPUT_DIR", Path("output"))

REPLICATION_PNG_NAME = "health_vs_life_expectancy.png"
REGIONAL_PNG_NAME = "health_vs_life_expectancy_by_region.png"

VARIANTS = ("replication", "regional", "both")


def build_replication_chart(
    raw: pd.DataFrame,
    theme: ChartTheme = DEFAULT_THEME,
) -> Tuple[Figure, pd.DataFrame, pd.DataFrame]:
    """Returns (figure, normalized tagged table, label table)."""
    df = normalize_replication_frame(raw)
    labels = place_replication_labels(df)
    return compose_replication_chart(df, labels, theme), df, labels


def build_regional_chart(
    raw: pd.DataFrame,
    theme: ChartTheme = DEFAULT_THEME,
    *,
    top_n: int = TOP_N_DEFAULT,
) -> Tuple[Figure, pd.DataFrame, pd.DataFrame]:
    """Returns (figure, normalized tagged table, label table)."""
    df = normalize_regional_frame(raw)
    tagged = build_regional_selection(df, n=top_n)
    labels = place_regional_labels(tagged)
    return compose_faceted_chart(tagged, labels, theme), tagged, labels


def run_local_pipeline(
    *,
    data_path: Path | str = DATA_PATH,
    output_dir: Path | str = OUTPUT_DIR,
    variant: str = "both",
    fonts: bool = True,
    storage: StorageAdapter | None = None,
    theme: ChartTheme = DEFAULT_THEME,
) -> Dict[str, str]:
    """
    Run the chart pipeline end-to-end.

    Returns
    -------
    artefacts:
        Dictionary mapping variant name to the written PNG location.
    """
    if variant not in VARIANTS:
        raise ValueError(f"variant must be one of {VARIANTS}, got {variant!r}")

    source = LocalStorageAdapter()
    output = storage or LocalStorageAdapter(output_dir)
    artefacts: Dict[str, str] = {}

    print("[1/4] Loading RAW table...")
    raw = load_raw_health_table(str(data_path), source)

    print("[2/4] Registering fonts...")
    theme = register_theme_fonts(theme, enabled=fonts)

    if variant in ("replication", "both"):
        print("[3/4] Building replication chart...")
        fig, _, _ = build_replication_chart(raw, theme)
        artefacts["replication"] = save_chart(fig, REPLICATION_PNG_NAME, output, dpi=theme.dpi)
        print(f"      PNG: {artefacts['replication']}")

    if variant in ("regional", "both"):
        print("[4/4] Building regional chart...")
        try:
            fig, _, _ = build_regional_chart(raw, theme)
        except EmptyChartError as exc:
            print(f"[chart] regional skipped: {exc}")
        else:
            artefacts["regional"] = save_chart(fig, REGIONAL_PNG_NAME, output, dpi=theme.dpi)
            print(f"      PNG: {artefacts['regional']}")

    print("\nPipeline completed successfully.")
    return artefacts


if __name__ == "__main__":
    import argparse

    from transformations import ColumnResolutionError, SchemaError

    parser = argparse.ArgumentParser(
        description="Render the health expenditure vs. life expectancy charts.",
    )
    parser.add_argument(
        "--data-path",
        type=str,
        default=str(DATA_PATH),
        help="Input CSV (default: $HEALTH_DATA_PATH or data/life-expectancy-vs-health-expenditure.csv).",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(OUTPUT_DIR),
        help="Directory where the PNG files are written (default: $CHART_OUTPUT_DIR or output).",
    )
    parser.add_argument(
        "--variant",
        choices=VARIANTS,
        default="both",
        help="Which chart(s) to render.",
    )
    parser.add_argument(
        "--no-fonts",
        action="store_true",
        help="Skip web font download and use the default face.",
    )

    args = parser.parse_args()
    try:
        run_local_pipeline(
            data_path=Path(args.data_path),
            output_dir=Path(args.output_dir),
            variant=args.variant,
            fonts=not args.no_fonts,
        )
    except (ColumnResolutionError, SchemaError) as exc:
        raise SystemExit(f"[pipeline] aborted: {exc}")


__all__ = [
    "build_regional_chart",
    "build_replication_chart",
    "run_local_pipeline",
]
