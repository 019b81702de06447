import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

COUNTRIES = ['US', 'Burma', 'Taiwan*', 'Canada', 'Canada', 'Yemen', 'Narnia', 'France', 'Japan', 'Atlantis']
PROVINCES = [None, None, None, 'Ontario', 'Quebec', None, None, None, None, None]


def _wide(first_day, last_day):
    return pd.DataFrame({
        'Province/State': PROVINCES,
        'Country/Region': COUNTRIES,
        'Lat': np.zeros(len(COUNTRIES)),
        'Long': np.zeros(len(COUNTRIES)),
        '12/31/20': first_day,
        '1/2/21': last_day,
    })


@pytest.fixture
def cases_wide():
    return _wide(
        [900, 150, 90, 250, 150, 40, 0, 350, 280, 60],
        [1000, 200, 100, 300, 200, 50, 0, 400, 300, 80],
    )


@pytest.fixture
def deaths_wide():
    return _wide(
        [15, 5, 1, 7, 9, 8, 0, 10, 2, 3],
        [20, 6, 1, 9, 11, 10, 0, 12, 3, 4],
    )


@pytest.fixture
def socio_raw():
    """Gapminder-style labels, two years, Japan missing income in 2021."""
    rows = [
        ('United States', 2021, 63000.0, 78.5, 331e6, 'Americas'),
        ('Myanmar', 2021, 4800.0, 67.1, 54e6, 'Asia'),
        ('Taiwan', 2021, 55000.0, 80.9, 23.5e6, 'Asia'),
        ('Canada', 2021, 48000.0, 82.4, 38e6, 'Americas'),
        ('France', 2021, 45000.0, 82.5, 67e6, 'Europe'),
        ('Japan', 2021, np.nan, 84.6, 125.8e6, 'Asia'),
        ('Yemen', 2021, 2500.0, 66.1, 30e6, 'Asia'),
        ('United States', 2020, 60000.0, 78.8, 329e6, 'Americas'),
        ('Japan', 2020, 40000.0, 84.5, 126e6, 'Asia'),
    ]
    return pd.DataFrame(rows, columns=['country', 'year', 'gdpPercap', 'lifeExp', 'pop', 'continent'])


@pytest.fixture
def socio(socio_raw):
    return socio_raw.rename(columns={
        'gdpPercap': 'income_per_capita',
        'lifeExp': 'life_expectancy',
        'pop': 'population',
        'continent': 'region',
    })


@pytest.fixture
def source_files(tmp_path, cases_wide, deaths_wide, socio_raw):
    paths = {
        'cases_source': tmp_path / "cases.csv",
        'deaths_source': tmp_path / "deaths.csv",
        'socio_source': tmp_path / "socio.csv",
    }
    cases_wide.to_csv(paths['cases_source'], index=False)
    deaths_wide.to_csv(paths['deaths_source'], index=False)
    socio_raw.to_csv(paths['socio_source'], index=False)
    return {k: str(v) for k, v in paths.items()}
