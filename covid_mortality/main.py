#!/usr/bin/env python3
"""
Main Execution Script for the COVID-19 Mortality Report

Fetches the sources, runs the pipeline, renders the plots, exports the tables
and prints the bias assessment.
"""

import argparse
import sys
from pathlib import Path
from typing import List

from covid_mortality.analysis import AnalysisResult, export_results, run_analysis
from covid_mortality.config import AnalysisConfig, CleaningParameters, SourceParameters
from covid_mortality.paths import FIGURES_DIR, OUTPUT_DIR, ensure_directories_exist
from covid_mortality.plot import create_regression_plots
from covid_mortality.preprocess import SourceUnavailable
from covid_mortality.report import build_bias_report


def build_config(args: argparse.Namespace) -> AnalysisConfig:
    """Override the default sources with any given on the command line."""
    overrides = {
        'cases_source': args.cases_source,
        'deaths_source': args.deaths_source,
        'socio_source': args.socio_source,
    }
    overrides = {k: v for k, v in overrides.items() if v}
    sources = SourceParameters(**overrides)
    cleaning = CleaningParameters(allow_earlier_indicator_year=args.allow_earlier_indicator_year)
    return AnalysisConfig(sources=sources, cleaning=cleaning)


def run_report(config: AnalysisConfig, output_dir: Path = OUTPUT_DIR,
               figures_dir: Path = FIGURES_DIR, plots: bool = True,
               export: bool = True) -> AnalysisResult:
    """Run the analysis and produce every report artifact."""
    ensure_directories_exist(output_dir, figures_dir)
    result = run_analysis(config)

    # Tables are written only once every figure has rendered
    if plots:
        create_regression_plots(result.combined, result.models, figures_dir, config.plotting)
    if export:
        export_results(result, output_dir)

    print(build_bias_report(result))
    return result


def main(argv: List[str] = None) -> int:
    """Main function"""
    parser = argparse.ArgumentParser(description="COVID-19 mortality vs socioeconomic indicators report")
    parser.add_argument("--cases-source", help="URL or path of the confirmed cases time series")
    parser.add_argument("--deaths-source", help="URL or path of the deaths time series")
    parser.add_argument("--socio-source", help="URL or path of the socioeconomic indicators table")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="Directory for CSV outputs")
    parser.add_argument("--figures-dir", type=Path, default=FIGURES_DIR, help="Directory for figures")
    parser.add_argument("--allow-earlier-indicator-year", action="store_true",
                        help="Use the latest earlier socioeconomic year when the snapshot year is missing")
    parser.add_argument("--no-plots", action="store_true", help="Skip the scatter plots")
    parser.add_argument("--no-export", action="store_true", help="Skip writing CSV outputs")
    args = parser.parse_args(argv)

    config = build_config(args)
    try:
        run_report(config, args.output_dir, args.figures_dir,
                   plots=not args.no_plots, export=not args.no_export)
    except (SourceUnavailable, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Report completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
