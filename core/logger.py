"""
Logging for test runs.

Plain modules use ``logging.getLogger(__name__)``. The step executor and the
lifecycle hooks emit structlog events (``step_start``, ``step_failed``,
``screenshot_captured``...) that are rendered through the same stdlib handlers,
so one run produces one log stream.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog

from config import AppConfig, LoggingConfig, config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

_is_configured = False


def run_log_file(log_path: Path, started_at: Optional[datetime] = None) -> Path:
    """``reports/run.log`` -> ``reports/run_20240101_120000.log``; one file per run."""
    stamp = (started_at or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return log_path.parent / f"{log_path.stem}_{stamp}{log_path.suffix}"


def _build_handlers(logging_config: LoggingConfig) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    if logging_config.log_file_path:
        log_file = run_log_file(Path(logging_config.log_file_path))
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    return handlers


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=False, key="timestamp"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging(app_config: Optional[AppConfig] = None) -> None:
    """
    Route stdlib and structlog output to stdout and, when ``log_file_path`` is
    set, to a per-run log file. Only the first call has an effect.
    """
    global _is_configured
    if _is_configured:
        return

    logging_config = (app_config or config).logging
    level = getattr(logging, logging_config.log_level.upper(), logging.INFO)

    # force=True drops handlers installed earlier by behave or pytest
    logging.basicConfig(level=level, handlers=_build_handlers(logging_config), force=True)
    _configure_structlog()

    _is_configured = True


def get_structured_logger(name: str) -> structlog.BoundLogger:
    """
    Example:
        >>> logger = get_structured_logger(__name__)
        >>> logger.info("step_start", step="Click submit")
    """
    return structlog.get_logger(name)


def bind_context(logger: structlog.BoundLogger, **context) -> structlog.BoundLogger:
    """
    Return ``logger`` with ``context`` attached to every later event, e.g.
    ``bind_context(logger, scenario="Checkout", step_index=2)``.
    """
    return logger.bind(**context)
