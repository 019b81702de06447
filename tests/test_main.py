from covid_mortality import main as main_module
from covid_mortality.main import main
from covid_mortality.paths import COMBINED_RECORDS_FILE, REGRESSION_SUMMARY_FILE


def _args(source_files, tmp_path):
    return [
        "--cases-source", source_files['cases_source'],
        "--deaths-source", source_files['deaths_source'],
        "--socio-source", source_files['socio_source'],
        "--output-dir", str(tmp_path / "output"),
        "--figures-dir", str(tmp_path / "figures"),
    ]


def test_main_writes_report(source_files, tmp_path, capsys):
    assert main(_args(source_files, tmp_path)) == 0

    assert (tmp_path / "output" / COMBINED_RECORDS_FILE).exists()
    assert (tmp_path / "output" / REGRESSION_SUMMARY_FILE).exists()
    assert len(list((tmp_path / "figures").glob("*.pdf"))) == 2
    out = capsys.readouterr().out
    assert "BIAS ASSESSMENT" in out
    assert "Yemen" in out


def test_main_skips_outputs(source_files, tmp_path):
    assert main(_args(source_files, tmp_path) + ["--no-plots", "--no-export"]) == 0
    assert not list((tmp_path / "output").iterdir())
    assert not list((tmp_path / "figures").iterdir())


def test_main_fails_on_missing_source(source_files, tmp_path, capsys):
    source_files = {**source_files, 'deaths_source': str(tmp_path / "missing.csv")}

    assert main(_args(source_files, tmp_path)) == 1
    assert "not found" in capsys.readouterr().err
    assert not (tmp_path / "output" / COMBINED_RECORDS_FILE).exists()


def test_main_allow_earlier_indicator_year(source_files, tmp_path, socio_raw, capsys):
    socio_path = tmp_path / "socio_2020.csv"
    socio_raw.assign(year=socio_raw['year'] - 1).to_csv(socio_path, index=False)
    source_files = {**source_files, 'socio_source': str(socio_path)}

    assert main(_args(source_files, tmp_path) + ["--no-plots"]) == 1
    assert "no data for 2021" in capsys.readouterr().err

    assert main(_args(source_files, tmp_path) + ["--no-plots", "--allow-earlier-indicator-year"]) == 0
    assert "using 2020" in capsys.readouterr().out


def test_main_writes_nothing_when_plotting_fails(source_files, tmp_path, monkeypatch, capsys):
    def broken_plots(*args, **kwargs):
        raise ValueError("cannot render figure")

    monkeypatch.setattr(main_module, "create_regression_plots", broken_plots)

    assert main(_args(source_files, tmp_path)) == 1
    assert "cannot render figure" in capsys.readouterr().err
    assert not (tmp_path / "output" / COMBINED_RECORDS_FILE).exists()
    assert not (tmp_path / "output" / REGRESSION_SUMMARY_FILE).exists()


def test_main_fails_cleanly_with_too_few_countries(source_files, tmp_path, socio_raw, capsys):
    socio_path = tmp_path / "socio_small.csv"
    socio_raw[socio_raw['country'].isin(['United States', 'France'])].to_csv(socio_path, index=False)
    source_files = {**source_files, 'socio_source': str(socio_path)}

    assert main(_args(source_files, tmp_path)) == 1
    assert "Error:" in capsys.readouterr().err
    assert not (tmp_path / "output" / COMBINED_RECORDS_FILE).exists()
