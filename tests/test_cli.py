import os

import pytest
from openpyxl import load_workbook

from conftest import to_frame
from hubrecon.output_handler import RESULTS_SHEET
from reconcile_reports import main


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for name in ("RECON_CLIENT", "RECON_TOLERANCE", "RECON_OUTPUT", "RECON_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    # keep a stray .env in the working directory out of the run
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def workbooks(tmp_path, hub_rows, sales_rows):
    hub_file = tmp_path / "hub.xlsx"
    sales_file = tmp_path / "sales.xlsx"
    to_frame(hub_rows).to_excel(hub_file, index=False)
    to_frame(sales_rows).to_excel(sales_file, index=False)
    return str(hub_file), str(sales_file)


def test_cli_writes_results(tmp_path, workbooks):
    hub_file, sales_file = workbooks
    assert main([hub_file, sales_file, "--output", "report.xlsx"]) == 0

    output = os.path.join(str(tmp_path), "report.xlsx")
    sheet = load_workbook(output)[RESULTS_SHEET]
    assert sheet["B2"].value == "Li"
    assert sheet["B3"].value == "Cash customer"


def test_cli_matched_filter(tmp_path, workbooks):
    hub_file, sales_file = workbooks
    assert main([hub_file, sales_file, "--filter", "matched"]) == 0

    sheet = load_workbook(tmp_path / "Comparison_Results.xlsx")[RESULTS_SHEET]
    assert sheet["B2"].value == "Jane"
    assert sheet["B3"].value == "Omar"


def test_cli_single_file(tmp_path, workbooks):
    hub_file, _ = workbooks
    assert main([hub_file, "-o", "single.xlsx"]) == 0
    assert os.path.exists(tmp_path / "single.xlsx")


def test_cli_error_exit_code(tmp_path, workbooks):
    _, sales_file = workbooks
    # a Sales Totals file has none of the Payments Hub columns
    assert main([sales_file, sales_file, "-o", "bad.xlsx"]) == 1
    assert load_workbook(tmp_path / "bad.xlsx")[RESULTS_SHEET]["A1"].value == "Error"


def test_cli_requires_hub_file():
    assert main([]) == 2


def test_cli_lists_clients(capsys):
    assert main(["--list-clients"]) == 0
    assert "mutual-count" in capsys.readouterr().out.split()


@pytest.mark.parametrize("tolerance", ["0", "-1", "abc"])
def test_cli_rejects_bad_tolerance(workbooks, tolerance, capsys):
    hub_file, sales_file = workbooks
    with pytest.raises(SystemExit) as excinfo:
        main([hub_file, sales_file, "--tolerance", tolerance])
    assert excinfo.value.code == 2
    assert "--tolerance" in capsys.readouterr().err


def test_cli_accepts_positive_tolerance(tmp_path, workbooks):
    hub_file, sales_file = workbooks
    assert main([hub_file, sales_file, "--tolerance", "0.5", "-o", "wide.xlsx"]) == 0
    assert os.path.exists(tmp_path / "wide.xlsx")
