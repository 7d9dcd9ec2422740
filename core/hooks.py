"""
Suite, scenario and step lifecycle for one execution lane.

One ``LifecycleHooks`` instance drives scenarios strictly one after another and
owns the lane's ``StepLifecycleTracker`` and ``ScenarioEnvironment``. Lanes
running in parallel each need their own instance; the ``ArtifactStore`` may be
shared between them.
"""

import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from playwright.async_api import BrowserType, Page

from config import AppConfig
from core.environment import ScenarioEnvironment, close_environment, open_environment
from core.lifecycle import StepLifecycleTracker
from core.logger import bind_context, get_structured_logger
from diagnostics.capture import ArtifactStore
from diagnostics.types import ScreenshotArtifact

logger = logging.getLogger(__name__)
structured_logger = get_structured_logger(__name__)


async def try_capture(
    action: Callable[[], Awaitable[Optional[Path]]],
    description: str,
) -> Optional[Path]:
    """
    Run a best-effort capture. Any failure is logged and reported as None so it
    can never replace the step or scenario outcome.
    """
    try:
        return await action()
    except Exception as e:
        structured_logger.warning(
            "capture_failed",
            capture=description,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None


class LifecycleHooks:
    """
    Orchestrates SuiteStart -> (ScenarioStart -> AfterEachStep* -> ScenarioEnd)*.
    """

    def __init__(
        self,
        app_config: AppConfig,
        store: ArtifactStore,
        browser_type: BrowserType,
        tracker: Optional[StepLifecycleTracker] = None,
    ):
        """
        Args:
            app_config: The framework configuration object
            store: Screenshot store (may be shared between lanes)
            browser_type: Playwright browser type used to launch one browser per scenario
            tracker: Step cursor for this lane; a new one is created when omitted
        """
        self.app_config = app_config
        self.store = store
        self.browser_type = browser_type
        self.tracker = tracker or StepLifecycleTracker()
        self.environment: Optional[ScenarioEnvironment] = None
        self.failed_step: Optional[str] = None
        self.logger = structured_logger

    @property
    def page(self) -> Optional[Page]:
        return self.environment.page if self.environment else None

    @property
    def debug_all_steps(self) -> bool:
        return self.app_config.execution.debug_all_steps

    async def on_suite_start(self) -> int:
        """
        Clear screenshots left by previous runs. Failures propagate: no scenario
        may run against an unclean artifact store.
        """
        removed = self.store.clear_all()
        self.tracker.reset()
        logger.info(f"Suite starting, {removed} old screenshot(s) removed")
        return removed

    async def on_scenario_start(self, scenario_name: str) -> ScenarioEnvironment:
        if self.environment is not None:
            raise RuntimeError(
                f"Scenario '{scenario_name}' started before the previous scenario ended"
            )
        self.failed_step = None
        self.environment = await open_environment(
            self.browser_type,
            self.app_config.browser,
            self.app_config.execution,
            self.app_config.diagnostics,
        )
        self.tracker.start_scenario(scenario_name)
        logger.info(f"Running scenario: {scenario_name}")
        return self.environment

    async def after_step(self, step_name: str, failed: bool) -> Optional[Path]:
        step_index = self.tracker.complete_step()
        scenario_name = self.tracker.current().scenario_name
        step_logger = bind_context(self.logger, scenario=scenario_name, step=step_name, step_index=step_index)
        if failed:
            self.failed_step = step_name

        if not (failed or self.debug_all_steps):
            step_logger.debug("step_completed", failed=False)
            return None

        page = self.page
        path = await try_capture(
            lambda: self.store.capture(page, scenario_name, step_name, step_index),
            f"step {step_index} '{step_name}'",
        )
        if path is not None:
            step_logger.info("screenshot_captured", failed=failed, path=str(path))
        return path

    async def on_scenario_end(self, scenario_name: str, failed: bool) -> Optional[Path]:
        """
        Capture a safety-net screenshot for failed scenarios whose failing step
        has no screenshot of its own, then release the environment on every path.
        """
        path = None
        try:
            if failed and not self._failed_step_captured(scenario_name):
                page = self.page
                path = await try_capture(
                    lambda: self.store.capture_on_failure(page, scenario_name),
                    f"scenario '{scenario_name}'",
                )
        finally:
            environment, self.environment = self.environment, None
            if environment is not None:
                await close_environment(environment, self.app_config.diagnostics.traces_dir, scenario_name)

        status = "FAILED" if failed else "PASSED"
        logger.info(f"Scenario '{scenario_name}' {status}")
        return path

    async def on_suite_end(self) -> List[ScreenshotArtifact]:
        """Log the screenshots registered during the run and return them."""
        artifacts = self.store.artifacts()
        step_captures = sum(1 for a in artifacts if a.is_step_capture)
        logger.info(
            f"Suite finished, {step_captures} step screenshot(s) and "
            f"{len(artifacts) - step_captures} scenario screenshot(s) captured"
        )
        return artifacts

    def _failed_step_captured(self, scenario_name: str) -> bool:
        if self.failed_step is None:
            return False
        return self.store.find(scenario_name, self.failed_step) is not None
