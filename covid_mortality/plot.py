#!/usr/bin/env python3
"""Plotting Utilities for the COVID-19 Mortality Report.

One scatter plot per fitted model: countries coloured by region, the fitted
regression line over the observed predictor range, and the fit summarised in
the title. Plots are saved to the figures directory.

Usage:
    >>> from covid_mortality.plot import create_regression_plots
    >>> create_regression_plots(result.combined, result.models)
"""

from pathlib import Path
from typing import Dict

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from covid_mortality.config import PlotParameters
from covid_mortality.model import RegressionModel
from covid_mortality.paths import FIGURES_DIR

AXIS_LABELS = {
    'income_per_capita': 'Income per capita',
    'life_expectancy': 'Life expectancy (years)',
    'normalized_deaths_per_case': 'Deaths per case (1.0 = world average)',
}


def create_regression_plot(combined: pd.DataFrame, model: RegressionModel,
                           save_path: Path, params: PlotParameters = None) -> Path:
    """Scatter of the response against one predictor with the fitted line."""
    params = params or PlotParameters()
    x_col, y_col = model.predictor_name, model.response_name

    plt.style.use('default')
    fig, ax = plt.subplots(figsize=params.figsize)
    sns.scatterplot(data=combined, x=x_col, y=y_col, hue='region',
                    alpha=0.7, edgecolor='k', ax=ax)

    x_line = np.linspace(combined[x_col].min(), combined[x_col].max(), 100)
    ax.plot(x_line, model.predict(x_line), color='red', alpha=0.7,
            label=f'y = {model.slope:.3g}x + {model.intercept:.3g}')
    ax.axhline(1.0, color='gray', linestyle=':', linewidth=1)

    ax.set_xlabel(AXIS_LABELS.get(x_col, x_col))
    ax.set_ylabel(AXIS_LABELS.get(y_col, y_col))
    ax.set_title(f"{AXIS_LABELS.get(y_col, y_col)} by {AXIS_LABELS.get(x_col, x_col)}\n"
                 f"adjusted $R^2$ = {model.adj_r_squared:.2f}, p = {model.slope_pvalue:.3g}")
    ax.grid(True, linestyle='--', alpha=0.5)
    ax.legend(fontsize=8)

    fig.tight_layout()
    fig.savefig(save_path, dpi=params.dpi, bbox_inches='tight')
    plt.close(fig)
    return Path(save_path)


def create_regression_plots(combined: pd.DataFrame, models: Dict[str, RegressionModel],
                            figures_dir: Path = FIGURES_DIR,
                            params: PlotParameters = None) -> Dict[str, Path]:
    """
    Create one scatter plot per model.

    Saves the following outputs to the figures directory:
        "deaths_per_case_vs_<model name>.<format>"

    Returns:
        Mapping of model name to saved figure path
    """
    params = params or PlotParameters()
    figures_dir = Path(figures_dir)
    figures_dir.mkdir(parents=True, exist_ok=True)
    sns.set_palette("husl")

    saved = {}
    for name, model in models.items():
        path = figures_dir / f"deaths_per_case_vs_{name}.{params.file_format}"
        saved[name] = create_regression_plot(combined, model, path, params)
        print(f"Plot saved to: {path}")
    return saved
