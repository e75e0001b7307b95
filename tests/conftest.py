from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pandas as pd  # noqa: E402
import pytest  # noqa: E402

OWID_HEADERS = [
    "Entity",
    "Code",
    "Year",
    "Life expectancy at birth, total (years)",
    "Current health expenditure per capita, PPP (current international $)",
    "Population (historical estimates)",
    "Continent",
]


def make_owid_frame(rows):
    """Raw table as read from the CSV: every cell a string (or None)."""
    records = []
    for country, code, year, life, health, population, continent in rows:
        records.append(
            [
                country,
                code,
                None if year is None else str(year),
                None if life is None else str(life),
                None if health is None else str(health),
                None if population is None else str(population),
                continent,
            ]
        )
    return pd.DataFrame(records, columns=OWID_HEADERS)


@pytest.fixture
def owid_rows():
    rows = []
    series = {
        "United States": ("USA", 76.8, 4800.0, 600.0, 0.15),
        "Canada": ("CAN", 79.2, 2500.0, 200.0, 0.2),
        "Brazil": ("BRA", 70.1, 700.0, 60.0, 0.3),
        "Germany": ("DEU", 78.0, 2700.0, 250.0, 0.2),
        "France": ("FRA", 79.0, 2600.0, 210.0, 0.2),
        "Japan": ("JPN", 81.1, 1900.0, 180.0, 0.18),
    }
    for country, (code, life0, health0, dh, dl) in series.items():
        for i, year in enumerate(range(1999, 2019)):
            rows.append(
                (country, code, year, round(life0 + dl * i, 2), health0 + dh * i, 1_000_000, None)
            )
    for year in range(2000, 2018):
        rows.append(("World", "OWID_WRL", year, 70.0, 1000.0, 7_000_000_000, None))
    return rows


@pytest.fixture
def owid_raw(owid_rows):
    return make_owid_frame(owid_rows)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    import matplotlib.pyplot as plt

    plt.close("all")
