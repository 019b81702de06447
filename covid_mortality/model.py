#!/usr/bin/env python3
"""
Regression Model for the COVID-19 Mortality Report

Univariate ordinary least squares fits of the normalized deaths per case on
one socioeconomic predictor, with the summary statistics the report
interprets (coefficients, p-values, adjusted R², F-test).
"""

from dataclasses import dataclass
from typing import Dict, Union

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

RESPONSE = 'normalized_deaths_per_case'
MIN_OBSERVATIONS = 3


@dataclass(frozen=True)
class RegressionModel:
    """Fitted linear relation response = intercept + slope * predictor"""
    predictor_name: str
    response_name: str
    intercept: float
    slope: float
    intercept_pvalue: float
    slope_pvalue: float
    r_squared: float
    adj_r_squared: float
    f_statistic: float
    f_pvalue: float
    n_obs: int

    def predict(self, x: Union[float, np.ndarray, pd.Series]) -> Union[float, np.ndarray, pd.Series]:
        """
        Estimate the response for given predictor value(s)

        Args:
            x: Predictor value or array of values

        Returns:
            Estimated normalized deaths per case
        """
        return self.intercept + self.slope * x

    def to_dict(self) -> Dict[str, float]:
        return {
            'predictor': self.predictor_name,
            'response': self.response_name,
            'intercept': self.intercept,
            'slope': self.slope,
            'intercept_pvalue': self.intercept_pvalue,
            'slope_pvalue': self.slope_pvalue,
            'r_squared': self.r_squared,
            'adj_r_squared': self.adj_r_squared,
            'f_statistic': self.f_statistic,
            'f_pvalue': self.f_pvalue,
            'n_obs': self.n_obs,
        }


def fit_regression(df: pd.DataFrame, predictor: str, response: str = RESPONSE) -> RegressionModel:
    """
    Fit response ~ predictor by ordinary least squares.

    Args:
        df: Table holding both columns, with no missing values
        predictor: Name of the explanatory column
        response: Name of the response column

    Returns:
        RegressionModel with coefficients and fit statistics

    Raises:
        ValueError: If a column is missing or there are too few rows to fit
    """
    for col in (predictor, response):
        if col not in df.columns:
            raise ValueError(f"Column {col} not found")
    if len(df) < MIN_OBSERVATIONS:
        raise ValueError(f"Need at least {MIN_OBSERVATIONS} rows to fit {response} ~ {predictor}, got {len(df)}")

    data = df[[response, predictor]].astype(float)
    fit = smf.ols(f"{response} ~ {predictor}", data=data).fit()

    return RegressionModel(
        predictor_name=predictor,
        response_name=response,
        intercept=float(fit.params['Intercept']),
        slope=float(fit.params[predictor]),
        intercept_pvalue=float(fit.pvalues['Intercept']),
        slope_pvalue=float(fit.pvalues[predictor]),
        r_squared=float(fit.rsquared),
        adj_r_squared=float(fit.rsquared_adj),
        f_statistic=float(fit.fvalue),
        f_pvalue=float(fit.f_pvalue),
        n_obs=int(fit.nobs),
    )


def prediction_column(predictor: str) -> str:
    return f"predicted_{predictor}"


def attach_predictions(df: pd.DataFrame, models: Dict[str, RegressionModel]) -> pd.DataFrame:
    """Return a copy of df with one in-sample prediction column per model."""
    out = df.copy()
    for model in models.values():
        out[prediction_column(model.predictor_name)] = model.predict(out[model.predictor_name].astype(float))
    return out
