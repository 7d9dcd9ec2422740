from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class LoggingConfig(BaseSettings):
    """Configuration for logging."""

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")  # DEBUG, INFO, WARNING, ERROR
    log_file_path: Optional[Path] = None


class BrowserConfig(BaseSettings):
    """Browser launch and context settings."""

    browser: str = Field("chromium", validation_alias="BROWSER")
    headed: bool = Field(False, validation_alias="HEADED")
    slow_mo: int = Field(0, validation_alias="SLOW_MO")  # ms
    base_url: str = Field("https://blankfactor.com", validation_alias="BASE_URL")
    viewport_width: int = 1280
    viewport_height: int = 720
    launch_args: List[str] = ["--no-sandbox", "--disable-dev-shm-usage"]
    record_video: bool = False

    @field_validator("browser")
    @classmethod
    def browser_must_be_supported(cls, v: str) -> str:
        if v not in ("chromium", "firefox", "webkit"):
            raise ValueError(f"Unsupported BROWSER: {v}. Must be one of chromium, firefox, webkit")
        return v


class ExecutionConfig(BaseSettings):
    """Step execution settings."""

    debug_all_steps: bool = Field(False, validation_alias="DEBUG_ALL_STEPS")
    step_timeout_ms: int = Field(10000, validation_alias="STEP_TIMEOUT")
    navigation_timeout_ms: int = 30000
    fail_fast: bool = Field(False, validation_alias="FAIL_FAST")
    retry: int = Field(0, ge=0, validation_alias="RETRY")
    parallel: int = Field(1, ge=1, validation_alias="PARALLEL")


class DiagnosticsConfig(BaseSettings):
    """Screenshot, trace and video artifact settings."""

    screenshots_dir: Path = Path("./reports/screenshots")
    traces_dir: Path = Path("./reports/traces")
    videos_dir: Path = Path("./reports/videos")
    capture_trace: bool = True
    full_page: bool = True


class ReportingConfig(BaseSettings):
    """Report locations and post-run report generation settings."""

    reports_dir: Path = Path("./reports")
    cucumber_json_path: Path = Path("./reports/cucumber-report.json")
    allure_results_dir: Path = Field(Path("./reports/allure-results"), validation_alias="ALLURE_RESULTS_DIR")
    summary_path: Path = Path("./reports/test-summary.json")
    report_duration_unit: str = "s"  # ns, ms, s
    keep_reports_days: int = 7

    @field_validator("report_duration_unit")
    @classmethod
    def unit_must_be_known(cls, v: str) -> str:
        if v not in ("ns", "ms", "s"):
            raise ValueError("report_duration_unit must be one of ns, ms, s")
        return v


class AppConfig(BaseSettings):
    """Root configuration class for the test framework."""

    logging: LoggingConfig = LoggingConfig()
    browser: BrowserConfig = BrowserConfig()
    execution: ExecutionConfig = ExecutionConfig()
    diagnostics: DiagnosticsConfig = DiagnosticsConfig()
    reporting: ReportingConfig = ReportingConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Instantiate the main config object
config = AppConfig()
