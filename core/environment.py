"""
Per-scenario browser environment: browser, context (with tracing) and page.

Acquisition releases whatever it already acquired when a later stage fails;
release attempts every resource independently and only logs failures.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from playwright.async_api import Browser, BrowserContext, BrowserType, Page

from config import BrowserConfig, DiagnosticsConfig, ExecutionConfig
from core.errors import EnvironmentSetupError
from diagnostics.naming import normalize_name
from diagnostics.trace import start_tracing, stop_tracing

logger = logging.getLogger(__name__)


@dataclass
class ScenarioEnvironment:
    browser: Optional[Browser] = None
    context: Optional[BrowserContext] = None
    page: Optional[Page] = None
    tracing: bool = False


async def open_environment(
    browser_type: BrowserType,
    browser_config: BrowserConfig,
    execution_config: ExecutionConfig,
    diagnostics_config: DiagnosticsConfig,
) -> ScenarioEnvironment:
    """
    Launch a browser and open a fresh context and page for one scenario.

    Raises:
        EnvironmentSetupError: If any stage fails; resources acquired before
            the failing stage have already been released.
    """
    env = ScenarioEnvironment()
    try:
        env.browser = await browser_type.launch(
            headless=not browser_config.headed,
            slow_mo=browser_config.slow_mo,
            args=browser_config.launch_args,
        )

        context_options = {
            "viewport": {"width": browser_config.viewport_width, "height": browser_config.viewport_height},
            "base_url": browser_config.base_url,
        }
        if browser_config.record_video:
            context_options["record_video_dir"] = str(diagnostics_config.videos_dir)
            context_options["record_video_size"] = context_options["viewport"]
        env.context = await env.browser.new_context(**context_options)

        if diagnostics_config.capture_trace:
            env.tracing = await start_tracing(env.context)

        env.page = await env.context.new_page()
        env.page.set_default_timeout(execution_config.step_timeout_ms)
        env.page.set_default_navigation_timeout(execution_config.navigation_timeout_ms)
    except Exception as e:
        logger.error(f"Failed to open browser environment: {e}")
        await close_environment(env)
        raise EnvironmentSetupError(f"Could not open {browser_config.browser} environment: {e}") from e

    logger.debug(f"Opened {browser_config.browser} environment")
    return env


async def close_environment(
    env: ScenarioEnvironment,
    traces_dir: Optional[Path] = None,
    scenario_name: str = "",
) -> None:
    """Stop tracing, then close context and browser. Never raises."""
    if env.context is not None and env.tracing:
        name = normalize_name(scenario_name) or "scenario"
        trace_path = Path(traces_dir or ".") / f"trace-{name}-{int(time.time() * 1000)}.zip"
        if await stop_tracing(env.context, trace_path):
            logger.info(f"Trace saved to {trace_path}")
        env.tracing = False

    if env.context is not None:
        try:
            await env.context.close()
        except Exception as e:
            logger.warning(f"Failed to close browser context: {e}")
        env.context = None
        env.page = None

    if env.browser is not None:
        try:
            await env.browser.close()
        except Exception as e:
            logger.warning(f"Failed to close browser: {e}")
        env.browser = None
