import logging
import platform
import sys
from typing import List, Optional

# It's important to set up logging before other imports that might use it.
from core.logger import setup_logging
from config import AppConfig, config
from core.errors import ReportFormatError

setup_logging()
logger = logging.getLogger(__name__)

VALID_COMMANDS = ["run", "report"]


def validate_command(command: str, valid_commands: list[str]) -> None:
    """
    Raises:
        ValueError: If command is not in valid_commands
    """
    if command not in valid_commands:
        raise ValueError(
            f"Invalid command: '{command}'. "
            f"Valid commands are: {', '.join(valid_commands)}"
        )


def build_behave_args(app_config: AppConfig, extra_args: List[str]) -> List[str]:
    """Behave arguments writing the JSON report that the correlation pass reads."""
    # behave pairs each --outfile with the --format at the same position
    args = [
        "--format", "json.pretty",
        "--outfile", str(app_config.reporting.cucumber_json_path),
        "--format", "pretty",
    ]
    if app_config.execution.fail_fast:
        args.append("--stop")
    return args + list(extra_args)


def generate_report(app_config: AppConfig) -> int:
    """Correlate the finished run with its screenshots and write Allure results."""
    from reporting import ReportCorrelator, build_summary, cleanup_old_reports, write_allure_results, write_summary

    correlator = ReportCorrelator(
        duration_unit=app_config.reporting.report_duration_unit,
        debug_all_steps=app_config.execution.debug_all_steps,
        results_dir=app_config.reporting.allure_results_dir,
    )
    results = correlator.correlate(app_config.reporting.cucumber_json_path, app_config.diagnostics.screenshots_dir)
    write_allure_results(
        results,
        app_config.reporting.allure_results_dir,
        environment={
            "browser": app_config.browser.browser,
            "baseUrl": app_config.browser.base_url,
            "pythonVersion": platform.python_version(),
        },
    )
    write_summary(build_summary(results, browser=app_config.browser.browser), app_config.reporting.summary_path)
    cleanup_old_reports(
        [app_config.diagnostics.traces_dir, app_config.diagnostics.videos_dir],
        app_config.reporting.keep_reports_days,
    )
    failed = sum(1 for r in results if r.status == "failed")
    logger.info(f"Report generated for {len(results)} scenario(s), {failed} failed")
    return 0


def run_suite(app_config: AppConfig, extra_args: List[str]) -> int:
    from behave.__main__ import main as behave_main

    app_config.reporting.cucumber_json_path.parent.mkdir(parents=True, exist_ok=True)
    exit_code = behave_main(build_behave_args(app_config, extra_args))
    generate_report(app_config)
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    command = argv.pop(0) if argv else "run"
    try:
        validate_command(command, VALID_COMMANDS)
    except ValueError as e:
        logger.error(str(e))
        return 2

    try:
        if command == "report":
            return generate_report(config)
        return run_suite(config, argv)
    except ReportFormatError as e:
        logger.error(f"Cannot generate report: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
