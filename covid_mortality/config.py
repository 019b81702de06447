#!/usr/bin/env python3
"""Report Configuration and Parameter Documentation.

This module centralizes all report parameters with their justifications and
default values using Pydantic for validation and documentation.

Key features:
- Type validation and coercion
- Immutable configuration (frozen=True)
- Metadata describing where each value comes from
- Programmatic access to documentation

Parameters are organized by category:
- Sources: Remote/local inputs and their column labels
- Cleaning: Country aliases, declared outliers and date parsing
- Plotting: Figure resolution and size

Usage:
    >>> from covid_mortality.config import AnalysisConfig
    >>> config = AnalysisConfig()
    >>> config.cleaning.country_aliases['US']  # 'United States'
    >>> config.cleaning.describe('declared_outliers')
"""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, Any, List, Tuple


JHU_BASE_URL = (
    "https://raw.githubusercontent.com/CSSEGISandData/COVID-19/master/"
    "csse_covid_19_data/csse_covid_19_time_series"
)


class _DocumentedParameters(BaseModel):
    """Base class adding a `describe` helper to parameter groups."""

    model_config = {'frozen': True, 'extra': 'forbid'}

    def describe(self, param_name: str) -> None:
        """Print comprehensive documentation for a parameter.

        Args:
            param_name: Name of the parameter to describe
        """
        fields = type(self).model_fields
        if param_name not in fields:
            raise ValueError(f"Unknown parameter: {param_name}")

        field_info = fields[param_name]
        value = getattr(self, param_name)
        extra = field_info.json_schema_extra or {}

        print(f"\n{'=' * 70}")
        print(f"Parameter: {param_name}")
        print(f"{'=' * 70}")
        print(f"Value: {value}")
        print(f"\nDescription:")
        print(f"  {field_info.description}")
        if 'source' in extra:
            print(f"\nSource:")
            print(f"  {extra['source']}")
        if 'interpretation' in extra:
            print(f"\nInterpretation:")
            print(f"  {extra['interpretation']}")
        if 'notes' in extra:
            print(f"\nNotes:")
            print(f"  {extra['notes']}")
        print(f"{'=' * 70}\n")


# ============================================================================
# Input Sources
# ============================================================================

class SourceParameters(_DocumentedParameters):
    """Locations of the input tables and the labels of their columns."""

    cases_source: str = Field(
        default=f"{JHU_BASE_URL}/time_series_covid19_confirmed_global.csv",
        description="URL or path of the wide cumulative confirmed-cases table (one column per M/D/YY date).",
        json_schema_extra={
            'source': 'JHU CSSE COVID-19 Data Repository',
        }
    )

    deaths_source: str = Field(
        default=f"{JHU_BASE_URL}/time_series_covid19_deaths_global.csv",
        description="URL or path of the wide cumulative deaths table (same layout as the cases table).",
        json_schema_extra={
            'source': 'JHU CSSE COVID-19 Data Repository',
        }
    )

    socio_source: str = Field(
        default="https://raw.githubusercontent.com/plotly/datasets/master/gapminderDataFiveYear.csv",
        description="URL or path of the socioeconomic indicators table in long (country, year) format.",
        json_schema_extra={
            'source': 'Gapminder',
            'notes': 'Any table works once the column labels below are pointed at it.',
        }
    )

    province_col: str = Field(default="Province/State", description="Sub-national identifier column of the time series.")
    country_col: str = Field(default="Country/Region", description="National identifier column of the time series.")
    metadata_cols: Tuple[str, ...] = Field(
        default=("Lat", "Long"),
        description="Non-date columns of the time series that are known and discarded.",
    )

    socio_columns: Dict[str, str] = Field(
        default={
            'country': 'country',
            'year': 'year',
            'income_per_capita': 'gdpPercap',
            'life_expectancy': 'lifeExp',
            'population': 'pop',
            'region': 'continent',
        },
        description="Mapping from the report's indicator names to the column labels of the socioeconomic table.",
        json_schema_extra={
            'interpretation': 'The country label is used verbatim as the join key',
        }
    )

    timeout: float = Field(
        default=60.0,
        gt=0.0,
        description="Timeout in seconds for each remote read. Reads are never retried.",
    )

    @field_validator('socio_columns')
    @classmethod
    def validate_socio_columns(cls, v):
        """Ensure every indicator the report needs has a column label."""
        required = {'country', 'year', 'income_per_capita', 'life_expectancy', 'population', 'region'}
        missing = required - set(v)
        if missing:
            raise ValueError(f"socio_columns is missing labels for: {sorted(missing)}")
        return v


# ============================================================================
# Cleaning Parameters
# ============================================================================

class CleaningParameters(_DocumentedParameters):
    """Parameters controlling how the joined table is cleaned."""

    country_aliases: Dict[str, str] = Field(
        default={
            'US': 'United States',
            'Burma': 'Myanmar',
            'Taiwan*': 'Taiwan',
        },
        description="Country names of the COVID series renamed to the socioeconomic table's naming. Applied once, after aggregation.",
        json_schema_extra={
            'interpretation': 'Injective partial mapping; names not listed are kept as-is',
        }
    )

    declared_outliers: List[str] = Field(
        default=['Yemen'],
        description="Countries excluded from the analysis by editorial decision, regardless of data completeness.",
        json_schema_extra={
            'notes': 'Yemen reports an implausible deaths/case ratio driven by very low case detection.',
        }
    )

    allow_earlier_indicator_year: bool = Field(
        default=False,
        description="Use the most recent earlier year of the socioeconomic table when it has no data for the snapshot year.",
        json_schema_extra={
            'interpretation': 'When False, a missing snapshot year stops the run with SchemaMismatch',
            'notes': 'The default Gapminder table ends in 2007, so it needs this flag or a newer table.',
        }
    )

    date_format: str = Field(
        default="%m/%d/%y",
        description="Exact strptime format of the date column labels.",
    )

    date_pattern: str = Field(
        default=r"^\d{1,2}/\d{1,2}/\d{2}$",
        description="Regular expression a column label must match to be treated as a date column.",
    )

    @field_validator('country_aliases')
    @classmethod
    def validate_aliases(cls, v):
        """Ensure the alias table is idempotent and injective."""
        chained = set(v) & set(v.values())
        if chained:
            raise ValueError(f"Alias targets must not be aliases themselves: {sorted(chained)}")
        if len(set(v.values())) != len(v):
            raise ValueError("Two aliases map to the same country")
        return v


# ============================================================================
# Plotting Parameters
# ============================================================================

class PlotParameters(_DocumentedParameters):
    """Parameters for the regression scatter plots."""

    dpi: int = Field(default=300, gt=0, description="Resolution of saved figures.")
    figsize: Tuple[float, float] = Field(default=(10, 7), description="Figure size in inches.")
    file_format: str = Field(default="pdf", description="Format of the saved figures.")


# ============================================================================
# Main Configuration Class
# ============================================================================

class AnalysisConfig(BaseModel):
    """Complete report configuration with all parameter categories.

    Usage:
        >>> config = AnalysisConfig()
        >>> config.sources.cases_source
        >>> config.describe_all()
    """

    model_config = {'frozen': True}

    sources: SourceParameters = Field(default_factory=SourceParameters)
    cleaning: CleaningParameters = Field(default_factory=CleaningParameters)
    plotting: PlotParameters = Field(default_factory=PlotParameters)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Export all parameters as nested dictionary."""
        return {
            'sources': self.sources.model_dump(),
            'cleaning': self.cleaning.model_dump(),
            'plotting': self.plotting.model_dump(),
        }

    def describe_all(self) -> None:
        """Print documentation for all parameters in all categories."""
        for category_name in ['sources', 'cleaning', 'plotting']:
            category = getattr(self, category_name)
            print(f"\n{'#' * 70}")
            print(f"# {category_name.upper()}")
            print(f"{'#' * 70}")
            for param_name in type(category).model_fields.keys():
                category.describe(param_name)


if __name__ == "__main__":
    config = AnalysisConfig()
    print("=" * 80)
    print("REPORT PARAMETERS")
    print("=" * 80)
    for category_name, values in config.to_dict().items():
        print(f"\n{category_name.upper()}")
        print("-" * 80)
        for param_name, value in values.items():
            print(f"  {param_name:20s} = {value}")
