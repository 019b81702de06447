#!/usr/bin/env python3
"""
preprocess.py

This module loads the raw inputs of the report:

1. JHU CSSE cumulative confirmed cases (wide, one column per day)
2. JHU CSSE cumulative deaths (same layout)
3. Socioeconomic indicators (long, one row per country and year)

and transforms the two time series into a per-country snapshot at the most
recent date reported, which is what the mortality ratio engine consumes.
"""

import io
import re
from pathlib import Path
from typing import Dict, Iterable, Tuple

import numpy as np
import pandas as pd
import requests
from tqdm import tqdm

from covid_mortality.config import AnalysisConfig


class SourceUnavailable(RuntimeError):
    """A remote or local input could not be read or parsed."""


class SchemaMismatch(ValueError):
    """An input table does not have the columns the report relies on."""


SOCIO_INDICATORS = ['income_per_capita', 'life_expectancy', 'population', 'region']


def fetch_table(source: str, timeout: float = 60.0) -> pd.DataFrame:
    """
    Read a CSV table from a URL or a local path.

    Args:
        source: http(s) URL or filesystem path
        timeout: Seconds to wait for a remote read

    Returns:
        The raw table

    Raises:
        SourceUnavailable: If the read fails or the content is not a non-empty CSV
    """
    try:
        if source.startswith(("http://", "https://")):
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
            df = pd.read_csv(io.StringIO(response.text))
        else:
            path = Path(source)
            if not path.exists():
                raise SourceUnavailable(f"File {path} not found")
            df = pd.read_csv(path)
    except requests.exceptions.RequestException as e:
        raise SourceUnavailable(f"Failed to fetch {source}: {e}") from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise SourceUnavailable(f"Could not parse {source} as CSV: {e}") from e
    except OSError as e:
        raise SourceUnavailable(f"Could not read {source}: {e}") from e

    if df.empty:
        raise SourceUnavailable(f"Source {source} contains no rows")
    return df


def tidy_time_series(wide: pd.DataFrame, metric: str,
                     province_col: str = "Province/State",
                     country_col: str = "Country/Region",
                     metadata_cols: Iterable[str] = ("Lat", "Long"),
                     date_pattern: str = r"^\d{1,2}/\d{1,2}/\d{2}$",
                     date_format: str = "%m/%d/%y") -> pd.DataFrame:
    """
    Reshape a wide date-columned table into long (province, country, date, metric) records.

    Every column must be an identifier, a known metadata column or a date
    column named M/D/YY; anything else is rejected rather than guessed at.

    Args:
        wide: Raw table with one column per calendar date
        metric: Name of the value column in the output (e.g. 'cases')
        province_col: Sub-national identifier column
        country_col: National identifier column
        metadata_cols: Columns that are known and dropped
        date_pattern: Regular expression identifying date columns
        date_format: Exact format used to parse date columns

    Returns:
        Long DataFrame with columns province, country, date, <metric>

    Raises:
        SchemaMismatch: On missing identifiers, unknown columns or no date columns
    """
    id_cols = [province_col, country_col]
    missing = [col for col in id_cols if col not in wide.columns]
    if missing:
        raise SchemaMismatch(f"{metric} table is missing identifier columns: {missing}")

    date_cols = [col for col in wide.columns if re.match(date_pattern, str(col))]
    if not date_cols:
        raise SchemaMismatch(f"{metric} table has no columns matching {date_pattern}")

    known = set(id_cols) | set(metadata_cols) | set(date_cols)
    unknown = [col for col in wide.columns if col not in known]
    if unknown:
        raise SchemaMismatch(f"{metric} table has unrecognised columns: {unknown}")

    long_df = pd.melt(
        wide,
        id_vars=id_cols,
        value_vars=date_cols,
        var_name='date',
        value_name=metric
    )
    long_df = long_df.rename(columns={province_col: 'province', country_col: 'country'})
    long_df['province'] = long_df['province'].fillna('')

    try:
        long_df['date'] = pd.to_datetime(long_df['date'], format=date_format)
    except ValueError as e:
        raise SchemaMismatch(f"{metric} table has a date column not in {date_format} format: {e}") from e

    long_df[metric] = pd.to_numeric(long_df[metric], errors='coerce')
    return long_df


def merge_series(cases: pd.DataFrame, deaths: pd.DataFrame) -> pd.DataFrame:
    """
    Join tidy cases and deaths on (province, country, date).

    Rows present on one side only get zero for the missing measure; rows
    without a positive case count are dropped.

    Returns:
        DataFrame with columns province, country, date, cases, deaths, combined_key
    """
    keys = ['province', 'country', 'date']
    merged = pd.merge(cases, deaths, on=keys, how='outer')
    merged[['cases', 'deaths']] = merged[['cases', 'deaths']].fillna(0)

    dropped = merged[merged['cases'] <= 0]
    deaths_without_cases = int((dropped['deaths'] > 0).sum())
    if deaths_without_cases:
        print(f"Warning: dropping {deaths_without_cases} rows that report deaths but no cases")

    merged = merged[merged['cases'] > 0].copy()
    merged['combined_key'] = merged['country'].where(
        merged['province'] == '',
        merged['province'] + ', ' + merged['country']
    )
    return merged.reset_index(drop=True)


def normalize_country_names(snapshot: pd.DataFrame, aliases: Dict[str, str]) -> pd.DataFrame:
    """
    Rename countries using the alias table.

    Idempotent: aliases never map onto other aliases. Should a target already
    be present, the two rows are summed.
    """
    renamed = snapshot.assign(country=snapshot['country'].replace(aliases))
    if renamed['country'].duplicated().any():
        renamed = renamed.groupby('country', as_index=False)[['cases', 'deaths']].sum()
    return renamed.sort_values('country').reset_index(drop=True)


def latest_snapshot(merged: pd.DataFrame, aliases: Dict[str, str]) -> Tuple[pd.DataFrame, pd.Timestamp]:
    """
    Aggregate the merged series per country at the most recent date.

    Args:
        merged: Output of `merge_series`
        aliases: Country name corrections applied after aggregation

    Returns:
        Tuple of (snapshot with columns country, cases, deaths; snapshot date)
    """
    if merged.empty:
        raise ValueError("Merged series has no rows with positive case counts")

    snapshot_date = merged['date'].max()
    latest = merged[merged['date'] == snapshot_date]

    # Provinces roll up into their country
    snapshot = latest.groupby('country', as_index=False)[['cases', 'deaths']].sum()
    snapshot = snapshot[snapshot['cases'] > 0]

    snapshot = normalize_country_names(snapshot, aliases)
    snapshot[['cases', 'deaths']] = snapshot[['cases', 'deaths']].astype(np.int64)
    return snapshot, snapshot_date


class DataProcessor:
    """Loads the report inputs and builds the country snapshot."""

    def __init__(self, config: AnalysisConfig = None):
        self.config = config or AnalysisConfig()

    def load_time_series(self) -> Dict[str, pd.DataFrame]:
        """Fetch the cases and deaths tables and tidy them into long format."""
        sources = self.config.sources
        cleaning = self.config.cleaning
        urls = {'cases': sources.cases_source, 'deaths': sources.deaths_source}

        tidy = {}
        for metric, url in tqdm(urls.items(), desc="Fetching time series"):
            wide = fetch_table(url, timeout=sources.timeout)
            tidy[metric] = tidy_time_series(
                wide, metric,
                province_col=sources.province_col,
                country_col=sources.country_col,
                metadata_cols=sources.metadata_cols,
                date_pattern=cleaning.date_pattern,
                date_format=cleaning.date_format
            )
            print(f"Loaded {metric}: {len(tidy[metric])} records")
        return tidy

    def load_socioeconomic(self) -> pd.DataFrame:
        """
        Fetch the socioeconomic table and rename its columns to indicator names.

        Returns:
            DataFrame with columns country, year, income_per_capita,
            life_expectancy, population, region

        Raises:
            SchemaMismatch: If a configured column label is absent
        """
        sources = self.config.sources
        raw = fetch_table(sources.socio_source, timeout=sources.timeout)

        labels = sources.socio_columns
        missing = [label for label in labels.values() if label not in raw.columns]
        if missing:
            raise SchemaMismatch(f"Socioeconomic table is missing columns: {missing}")

        socio = raw[list(labels.values())].rename(columns={v: k for k, v in labels.items()})
        socio = socio[['country', 'year'] + SOCIO_INDICATORS].copy()
        socio['year'] = pd.to_numeric(socio['year'], errors='coerce')
        for col in ['income_per_capita', 'life_expectancy', 'population']:
            socio[col] = pd.to_numeric(socio[col], errors='coerce')

        print(f"Loaded socioeconomic indicators: {len(socio)} records, "
              f"{socio['country'].nunique()} countries")
        return socio

    def run_all_processing(self) -> Dict[str, object]:
        """Run all loading and preprocessing steps."""
        tidy = self.load_time_series()
        merged = merge_series(tidy['cases'], tidy['deaths'])
        print(f"Merged series: {len(merged)} region-days with positive cases")

        snapshot, snapshot_date = latest_snapshot(merged, self.config.cleaning.country_aliases)
        print(f"Snapshot {snapshot_date.date()}: {len(snapshot)} countries")

        socio = self.load_socioeconomic()
        return {
            'merged': merged,
            'snapshot': snapshot,
            'snapshot_date': snapshot_date,
            'socio': socio,
        }
