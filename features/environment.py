"""
Behave hooks wired to the async lifecycle.

Behave runs hooks and steps synchronously; every browser call is driven to
completion on the event loop stored in ``context.loop``. One behave process is
one execution lane.
"""

import asyncio
import logging

from playwright.async_api import async_playwright

from config import config
from core.execution import StepExecutor
from core.hooks import LifecycleHooks
from core.logger import setup_logging
from diagnostics.capture import get_artifact_store

logger = logging.getLogger("features")

FAILED_STATUSES = {"failed", "error", "hook_error"}


def _failed(status) -> bool:
    return getattr(status, "name", str(status)) in FAILED_STATUSES


def apply_run_options(context, app_config) -> None:
    """Map FAIL_FAST onto behave's stop flag; PARALLEL has no effect in one lane."""
    if app_config.execution.fail_fast:
        context.config.stop = True
    if app_config.execution.parallel > 1:
        logger.warning("PARALLEL is ignored: behave runs scenarios in a single lane")


def before_all(context):
    setup_logging(config)
    context.app_config = config
    apply_run_options(context, config)

    context.loop = asyncio.new_event_loop()
    context.playwright = context.loop.run_until_complete(async_playwright().start())
    store = get_artifact_store(config.diagnostics.screenshots_dir, config.diagnostics.full_page)
    context.hooks = LifecycleHooks(config, store, getattr(context.playwright, config.browser.browser))
    context.loop.run_until_complete(context.hooks.on_suite_start())


def before_feature(context, feature):
    if config.execution.retry > 0:
        from behave.contrib.scenario_autoretry import patch_scenario_with_autoretry

        for scenario in feature.scenarios:
            patch_scenario_with_autoretry(scenario, max_attempts=config.execution.retry + 1)


def before_scenario(context, scenario):
    environment = context.loop.run_until_complete(context.hooks.on_scenario_start(scenario.name))
    context.page = environment.page
    context.executor = StepExecutor(config.execution.step_timeout_ms)


def after_step(context, step):
    context.loop.run_until_complete(context.hooks.after_step(step.name, _failed(step.status)))


def after_scenario(context, scenario):
    context.loop.run_until_complete(context.hooks.on_scenario_end(scenario.name, _failed(scenario.status)))
    context.page = None


def after_all(context):
    try:
        context.loop.run_until_complete(context.hooks.on_suite_end())
        context.loop.run_until_complete(context.playwright.stop())
    finally:
        context.loop.close()
    logger.info("Test suite completed")
