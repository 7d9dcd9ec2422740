import json
import subprocess
import sys
from unittest.mock import patch

import pytest

import main
from config import AppConfig
from core.errors import ReportFormatError
from reporting import ReportCorrelator


@pytest.fixture
def app_config(tmp_path):
    cfg = AppConfig()
    cfg.diagnostics = cfg.diagnostics.model_copy(update={
        "screenshots_dir": tmp_path / "screenshots",
        "traces_dir": tmp_path / "traces",
        "videos_dir": tmp_path / "videos",
    })
    cfg.reporting = cfg.reporting.model_copy(update={
        "cucumber_json_path": tmp_path / "cucumber-report.json",
        "allure_results_dir": tmp_path / "allure-results",
        "summary_path": tmp_path / "test-summary.json",
    })
    cfg.execution = cfg.execution.model_copy(update={"fail_fast": False, "debug_all_steps": False})
    return cfg


def test_validate_command():
    main.validate_command("run", main.VALID_COMMANDS)
    with pytest.raises(ValueError, match="Valid commands are: run, report"):
        main.validate_command("deploy", main.VALID_COMMANDS)


def test_build_behave_args(app_config):
    args = main.build_behave_args(app_config, ["--tags=@smoke"])

    assert args[:5] == [
        "--format", "json.pretty",
        "--outfile", str(app_config.reporting.cucumber_json_path),
        "--format", "pretty",
    ]
    assert "--stop" not in args
    assert args[-1] == "--tags=@smoke"


def test_build_behave_args_fail_fast(app_config):
    app_config.execution = app_config.execution.model_copy(update={"fail_fast": True})
    assert "--stop" in main.build_behave_args(app_config, [])


def test_generate_report(app_config, tmp_path):
    (tmp_path / "screenshots").mkdir()
    (tmp_path / "screenshots" / "Checkout-Submit-button-1.png").write_bytes(b"")
    report = [{
        "name": "Shop",
        "elements": [{
            "name": "Checkout",
            "steps": [{"keyword": "When", "name": "Submit button",
                       "result": {"status": "failed", "duration": 1.0, "error_message": "boom"}}],
        }],
    }]
    app_config.reporting.cucumber_json_path.write_text(json.dumps(report))

    assert main.generate_report(app_config) == 0

    results = list((tmp_path / "allure-results").glob("*-result.json"))
    assert len(results) == 1
    data = json.loads(results[0].read_text(encoding="utf-8"))
    assert data["steps"][0]["attachments"][0]["source"].endswith("Checkout-Submit-button-1.png")
    properties = (tmp_path / "allure-results" / "environment.properties").read_text()
    assert f"browser={app_config.browser.browser}" in properties
    summary = json.loads((tmp_path / "test-summary.json").read_text(encoding="utf-8"))
    assert summary["failed"] == 1


def test_generate_report_without_structured_report(app_config):
    with pytest.raises(ReportFormatError):
        main.generate_report(app_config)


def test_main_rejects_unknown_command():
    assert main.main(["deploy"]) == 2


def test_main_dispatches_commands():
    with patch("main.generate_report", return_value=0) as report, \
            patch("main.run_suite", return_value=1) as run:
        assert main.main(["report"]) == 0
        assert main.main(["run", "--tags=@smoke"]) == 1

    report.assert_called_once_with(main.config)
    run.assert_called_once_with(main.config, ["--tags=@smoke"])


def test_main_defaults_to_run():
    with patch("main.run_suite", return_value=0) as run:
        main.main([])
    run.assert_called_once_with(main.config, [])


def test_main_reports_missing_structured_report(app_config):
    with patch("main.config", app_config):
        assert main.main(["report"]) == 1


def test_main_run_without_report_output(app_config):
    with patch("main.config", app_config), \
            patch("main.run_suite", side_effect=ReportFormatError("Structured report not found")):
        assert main.main(["run"]) == 1


FEATURE = """\
Feature: Cart

  Scenario: Open cart
    Given the cart is open

  Scenario: Pay
    Given the cart is open
    When I pay with an unknown method
"""

STEPS = """\
from behave import given


@given("the cart is open")
def step_cart_open(context):
    pass
"""


def test_behave_writes_json_report_to_outfile(app_config, tmp_path):
    features = tmp_path / "features"
    (features / "steps").mkdir(parents=True)
    (features / "cart.feature").write_text(FEATURE, encoding="utf-8")
    (features / "steps" / "cart_steps.py").write_text(STEPS, encoding="utf-8")

    args = main.build_behave_args(app_config, [str(features)])
    subprocess.run([sys.executable, "-m", "behave", *args], cwd=tmp_path, capture_output=True, timeout=120)

    report = json.loads(app_config.reporting.cucumber_json_path.read_text(encoding="utf-8"))
    assert report[0]["name"] == "Cart"

    results = ReportCorrelator().correlate(report, tmp_path / "screenshots")
    assert [r.status for r in results] == ["passed", "failed"]
    assert [s.status for s in results[1].steps] == ["passed", "failed"]
