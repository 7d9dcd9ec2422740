"""
Step execution wrapper.

Runs browser actions and assertions, logs their outcome, and converts every
failure into an ``EnhancedStepError`` carrying the classified diagnostic.
Failures are always re-raised, never turned into return values.
"""

import time
from typing import Awaitable, Callable, Optional, TypeVar

from playwright.async_api import Locator

from core.errors import EnhancedStepError, enhance_error
from core.logger import bind_context, get_structured_logger

T = TypeVar('T')

DEFAULT_STEP_TIMEOUT_MS = 10000


class StepExecutor:
    """
    Executes step operations with failure enhancement and structured logging.
    """

    def __init__(self, step_timeout_ms: int = DEFAULT_STEP_TIMEOUT_MS):
        """
        Initialize the step executor.

        Args:
            step_timeout_ms: Bound for element waits in the *_with_context helpers.
        """
        self.step_timeout_ms = step_timeout_ms
        self.logger = get_structured_logger(__name__)

    async def run(
        self,
        step_name: str,
        operation: Callable[[], Awaitable[T]],
        context: Optional[str] = None,
    ) -> T:
        """
        Execute ``operation`` and return its result unmodified.

        Args:
            step_name: Human label of the operation (used in logs and diagnostics)
            operation: Zero-argument coroutine function to execute
            context: Hint about what to check if the operation fails

        Raises:
            EnhancedStepError: If the operation fails for any reason
        """
        op_logger = bind_context(self.logger, step=step_name)
        op_logger.info("step_start")
        start_time = time.time()

        try:
            result = await operation()
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            enhanced = enhance_error(e, step_name, context)
            op_logger.error(
                "step_failed",
                kind=enhanced.kind.value,
                duration_ms=round(duration_ms, 2),
                diagnostic=str(enhanced),
            )
            if enhanced is e:
                raise
            raise enhanced from e

        op_logger.info("step_success", duration_ms=round((time.time() - start_time) * 1000, 2))
        return result

    async def wait_for_element_with_context(
        self,
        locator: Locator,
        step_name: str,
        context: Optional[str] = None,
        state: str = "visible",
        timeout: Optional[int] = None,
    ) -> None:
        """Wait until ``locator`` reaches ``state`` within the step timeout."""
        timeout = self.step_timeout_ms if timeout is None else timeout

        async def operation():
            await locator.wait_for(state=state, timeout=timeout)

        await self.run(step_name, operation, context)

    async def click_with_context(
        self,
        locator: Locator,
        step_name: str,
        context: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> None:
        """Wait for ``locator`` to be visible, then click it."""
        timeout = self.step_timeout_ms if timeout is None else timeout

        async def operation():
            await locator.wait_for(state="visible", timeout=timeout)
            await locator.click(timeout=timeout)

        await self.run(step_name, operation, context)

    async def type_with_context(
        self,
        locator: Locator,
        text: str,
        step_name: str,
        context: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> None:
        """Wait for ``locator`` to be visible, then replace its value with ``text``."""
        timeout = self.step_timeout_ms if timeout is None else timeout

        async def operation():
            await locator.wait_for(state="visible", timeout=timeout)
            await locator.fill(text, timeout=timeout)

        await self.run(step_name, operation, context)
