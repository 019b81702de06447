#!/usr/bin/env python3
"""Analysis Module.

This module turns the per-country COVID-19 snapshot into the table the
regressions are fitted on:

1. Mortality ratios: deaths per case, normalized by the global ratio so that
   1.0 means "exactly world average".
2. Socioeconomic join: attach income, life expectancy, population and region,
   drop incomplete rows and declared outliers, and keep an audit of every
   country removed along the way.
3. Regressions of the normalized ratio on income and on life expectancy.

Example:
    >>> from covid_mortality.analysis import run_analysis
    >>> result = run_analysis()
    >>> result.audit.removed_countries
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from covid_mortality.config import AnalysisConfig
from covid_mortality.model import RegressionModel, attach_predictions, fit_regression
from covid_mortality.paths import COMBINED_RECORDS_FILE, OUTPUT_DIR, REGRESSION_SUMMARY_FILE
from covid_mortality.preprocess import SOCIO_INDICATORS, DataProcessor, SchemaMismatch

REQUIRED_FIELDS: List[str] = SOCIO_INDICATORS + ['normalized_deaths_per_case']

PREDICTORS: Dict[str, str] = {
    'income': 'income_per_capita',
    'life_expectancy': 'life_expectancy',
}

MISSING_VALUE = 'missing_value'
DECLARED_OUTLIER = 'declared_outlier'
UNKNOWN_POPULATION = 'unknown'


@dataclass(frozen=True)
class MortalityRatios:
    """Per-country ratios together with the normalization constant they share."""
    table: pd.DataFrame
    global_avg_ratio: float
    snapshot_date: pd.Timestamp = None


@dataclass(frozen=True)
class ExclusionAudit:
    """Countries removed by the join & filter stage and why."""
    removed_countries: List[str] = field(default_factory=list)
    removed_population: Union[float, str] = 0
    reasons: Dict[str, str] = field(default_factory=dict)

    @property
    def population_unknown(self) -> bool:
        return self.removed_population == UNKNOWN_POPULATION


@dataclass
class AnalysisResult:
    """Everything the reporting layer needs."""
    ratios: MortalityRatios
    combined: pd.DataFrame
    audit: ExclusionAudit
    models: Dict[str, RegressionModel]
    indicator_year: int = None


def compute_mortality_ratios(snapshot: pd.DataFrame, snapshot_date: pd.Timestamp = None) -> MortalityRatios:
    """
    Compute deaths per case and its normalization by the global ratio.

    The global ratio is total deaths over total cases across exactly the rows
    that receive a ratio, so the deaths-weighted normalized ratio is 1.0.

    Args:
        snapshot: DataFrame with columns country, cases, deaths
        snapshot_date: Date of the snapshot, carried along for reporting

    Returns:
        MortalityRatios with columns country, cases, deaths, deaths_per_case,
        normalized_deaths_per_case

    Raises:
        ValueError: If no country has a defined ratio
    """
    df = snapshot[snapshot['cases'] > 0].copy()
    df['deaths_per_case'] = df['deaths'] / df['cases']
    df = df[np.isfinite(df['deaths_per_case'])]
    if df.empty:
        raise ValueError("No country has a defined deaths per case ratio")

    global_avg_ratio = df['deaths'].sum() / df['cases'].sum()
    if global_avg_ratio <= 0:
        raise ValueError("Global deaths per case is zero; cannot normalize")

    df['normalized_deaths_per_case'] = df['deaths_per_case'] / global_avg_ratio
    return MortalityRatios(
        table=df.reset_index(drop=True),
        global_avg_ratio=float(global_avg_ratio),
        snapshot_date=snapshot_date
    )


def select_indicator_year(socio: pd.DataFrame, year: int,
                          allow_earlier: bool = False) -> Tuple[pd.DataFrame, int]:
    """
    Keep the socioeconomic rows of the snapshot year.

    Args:
        socio: Socioeconomic indicators with a year column
        year: Snapshot year
        allow_earlier: Fall back to the most recent earlier year when `year` is absent

    Returns:
        Tuple of (rows of the selected year without the year column, selected year)

    Raises:
        SchemaMismatch: If the table has no data for `year` (or, with
            allow_earlier, for any year up to `year`)
    """
    years = socio['year'].dropna()
    if (years == year).any():
        selected = int(year)
    elif not allow_earlier:
        latest = int(years.max()) if not years.empty else None
        raise SchemaMismatch(f"Socioeconomic table has no data for {year} (latest year: {latest})")
    else:
        available = years[years <= year]
        if available.empty:
            raise SchemaMismatch(f"Socioeconomic table has no data for {year} or earlier")
        selected = int(available.max())
        print(f"Warning: no socioeconomic data for {year}; using {selected}")

    rows = socio[socio['year'] == selected].drop(columns='year')
    return rows.reset_index(drop=True), selected


def _removed_population(pre: pd.DataFrame, removed: List[str]) -> Union[float, str]:
    if not removed:
        return 0
    populations = pre.loc[pre['country'].isin(removed), 'population']
    if populations.isna().all():
        return UNKNOWN_POPULATION
    return float(populations.sum())


def join_socioeconomic(ratios: pd.DataFrame, socio: pd.DataFrame,
                       declared_outliers: Sequence[str] = ('Yemen',)) -> Tuple[pd.DataFrame, ExclusionAudit]:
    """
    Attach socioeconomic indicators to the mortality ratios and filter.

    Every ratio row is kept through the left join. Afterwards rows missing any
    required field are removed, as are declared outliers whatever their
    completeness. The removed set is the difference between the countries
    before and after filtering.

    Args:
        ratios: Mortality ratio table
        socio: Socioeconomic indicators for a single year
        declared_outliers: Countries excluded by editorial decision

    Returns:
        Tuple of (combined records, exclusion audit)
    """
    if socio['country'].duplicated().any():
        raise SchemaMismatch("Socioeconomic table has more than one row per country for the selected year")

    pre = pd.merge(ratios, socio, on='country', how='left', validate='one_to_one')

    incomplete = pre[REQUIRED_FIELDS].isna().any(axis=1)
    outlier = pre['country'].isin(declared_outliers)
    combined = pre[~incomplete & ~outlier].reset_index(drop=True)

    removed = sorted(set(pre['country']) - set(combined['country']))
    reasons = {}
    for country in removed:
        reasons[country] = DECLARED_OUTLIER if country in declared_outliers else MISSING_VALUE

    audit = ExclusionAudit(
        removed_countries=removed,
        removed_population=_removed_population(pre, removed),
        reasons=reasons
    )
    return combined, audit


def fit_models(combined: pd.DataFrame) -> Dict[str, RegressionModel]:
    """Fit one univariate model per predictor."""
    return {name: fit_regression(combined, predictor) for name, predictor in PREDICTORS.items()}


def run_analysis(config: AnalysisConfig = None, processed: Dict[str, object] = None) -> AnalysisResult:
    """
    Run the full pipeline from raw sources to fitted models.

    Args:
        config: Report configuration. Defaults to AnalysisConfig().
        processed: Output of DataProcessor.run_all_processing(); loaded when omitted.

    Returns:
        AnalysisResult
    """
    config = config or AnalysisConfig()
    print("=" * 80)
    print("COVID-19 MORTALITY AND SOCIOECONOMIC INDICATORS")
    print("=" * 80)

    if processed is None:
        processed = DataProcessor(config).run_all_processing()

    ratios = compute_mortality_ratios(processed['snapshot'], processed['snapshot_date'])
    print(f"Global deaths per case: {ratios.global_avg_ratio:.4f} "
          f"({len(ratios.table)} countries)")

    socio, indicator_year = select_indicator_year(
        processed['socio'],
        processed['snapshot_date'].year,
        allow_earlier=config.cleaning.allow_earlier_indicator_year
    )
    combined, audit = join_socioeconomic(ratios.table, socio, config.cleaning.declared_outliers)
    print(f"Combined records: {len(combined)} countries, {len(audit.removed_countries)} removed")

    models = fit_models(combined)
    combined = attach_predictions(combined, models)
    for name, model in models.items():
        print(f"  {name}: slope={model.slope:.4g}, p={model.slope_pvalue:.3g}, "
              f"adj R²={model.adj_r_squared:.3f}")

    return AnalysisResult(
        ratios=ratios,
        combined=combined,
        audit=audit,
        models=models,
        indicator_year=indicator_year
    )


def export_results(result: AnalysisResult, output_dir: Path = OUTPUT_DIR) -> Dict[str, Path]:
    """Write the combined records and the regression summary to CSV."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        'combined': output_dir / COMBINED_RECORDS_FILE,
        'regression': output_dir / REGRESSION_SUMMARY_FILE,
    }
    result.combined.to_csv(paths['combined'], index=False)
    pd.DataFrame([m.to_dict() for m in result.models.values()]).to_csv(paths['regression'], index=False)
    for path in paths.values():
        print(f"Results exported to {path}")
    return paths
