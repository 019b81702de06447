#!/usr/bin/env python3
"""Centralized Path Management for the COVID-19 Mortality Report.

This module provides a single source of truth for the file paths used across
the project. Remote sources are configured in `config.py`; everything written
to disk by a report run goes under the directories below.

Directory Structure:
    project_root/
    ├── covid_mortality/   # Python source code
    ├── tests/             # Test suite
    ├── output/            # Combined records and regression summaries
    └── figures/           # Scatter plots of the fitted models

Usage:
    >>> from covid_mortality.paths import OUTPUT_DIR, FIGURES_DIR
    >>> combined.to_csv(OUTPUT_DIR / "combined_records.csv", index=False)
"""

from pathlib import Path

# ============================================================================
# Root Directory
# ============================================================================

# Project root is parent of covid_mortality/ directory
PROJECT_ROOT = Path(__file__).parent.parent

# ============================================================================
# Output Directories
# ============================================================================

OUTPUT_DIR = PROJECT_ROOT / "output"
"""Final analysis outputs (CSV tables)."""

FIGURES_DIR = PROJECT_ROOT / "figures"
"""Generated scatter plots."""

COMBINED_RECORDS_FILE = "combined_records.csv"
REGRESSION_SUMMARY_FILE = "regression_summary.csv"


def ensure_directories_exist(output_dir: Path = OUTPUT_DIR,
                             figures_dir: Path = FIGURES_DIR) -> None:
    """Create the output and figures directories if they don't exist.

    Safe to call multiple times.
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    Path(figures_dir).mkdir(parents=True, exist_ok=True)


if __name__ == "__main__":
    print("=" * 80)
    print("Configured Paths for COVID-19 Mortality Report")
    print("=" * 80)
    print(f"\nProject Root: {PROJECT_ROOT}")
    print(f"  Results: {OUTPUT_DIR}")
    print(f"  Figures: {FIGURES_DIR}")
