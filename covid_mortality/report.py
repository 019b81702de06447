#!/usr/bin/env python3
"""
Narrative bias assessment built from the analysis outputs.
"""

from typing import List

from covid_mortality.analysis import DECLARED_OUTLIER, AnalysisResult, ExclusionAudit
from covid_mortality.model import RegressionModel

ALPHA = 0.05

PREDICTOR_PHRASES = {
    'income_per_capita': 'income per capita',
    'life_expectancy': 'life expectancy',
}


def describe_exclusions(audit: ExclusionAudit) -> List[str]:
    """Sentences describing the countries dropped before fitting."""
    if not audit.removed_countries:
        return ["No countries were removed: every country with COVID-19 data "
                "had complete socioeconomic indicators. Excluded population: 0."]

    lines = [f"{len(audit.removed_countries)} countries were removed before fitting: "
             f"{', '.join(audit.removed_countries)}."]
    outliers = [c for c, reason in audit.reasons.items() if reason == DECLARED_OUTLIER]
    if outliers:
        lines.append(f"Declared outliers excluded by editorial decision: {', '.join(outliers)}.")

    if audit.population_unknown:
        lines.append("Population data is missing for all removed countries, so the "
                     "size of the excluded population is unknown.")
    else:
        lines.append(f"Together they account for at least {audit.removed_population:,.0f} people "
                     "(countries without population data are not counted).")
    return lines


def describe_model(model: RegressionModel, alpha: float = ALPHA) -> str:
    """One paragraph interpreting a fitted model."""
    predictor = PREDICTOR_PHRASES.get(model.predictor_name, model.predictor_name)
    direction = "higher" if model.slope > 0 else "lower"
    if model.slope_pvalue < alpha:
        significance = f"statistically significant at the {alpha:.0%} level (p = {model.slope_pvalue:.3g})"
    else:
        significance = f"not statistically significant (p = {model.slope_pvalue:.3g})"
    return (f"Countries with higher {predictor} show {direction} normalized deaths per case "
            f"(slope {model.slope:.4g}, intercept {model.intercept:.4g}); the relation is "
            f"{significance}. It explains {model.adj_r_squared:.1%} of the variance "
            f"(adjusted R²; F = {model.f_statistic:.3g}, p = {model.f_pvalue:.3g}, n = {model.n_obs}).")


def build_bias_report(result: AnalysisResult, alpha: float = ALPHA) -> str:
    """
    Build the narrative bias assessment.

    Args:
        result: Output of run_analysis
        alpha: Significance level used in the interpretation

    Returns:
        Report text
    """
    ratios = result.ratios
    lines = ["=" * 80, "BIAS ASSESSMENT", "=" * 80]

    if ratios.snapshot_date is not None:
        lines.append(f"Snapshot date: {ratios.snapshot_date.date()}")
    if result.indicator_year is not None:
        lines.append(f"Socioeconomic indicators year: {result.indicator_year}")
    lines.append(f"Global deaths per case: {ratios.global_avg_ratio:.4f} "
                 f"(normalized ratio 1.0 = world average)")
    lines.append(f"Countries analysed: {len(result.combined)} of {len(ratios.table)}")
    lines.append("")

    lines.extend(describe_exclusions(result.audit))
    lines.append("")

    for model in result.models.values():
        lines.append(describe_model(model, alpha))
        lines.append("")

    lines.append("Caveats: deaths per case depends on how many infections each country "
                 "detects, so countries with limited testing look more lethal. Both "
                 "models are univariate in-sample fits and describe association, not cause.")
    return "\n".join(lines)
