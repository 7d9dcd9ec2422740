"""
Unit tests for the step execution wrapper.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from core.errors import EnhancedStepError, ErrorKind, enhance_error
from core.execution import StepExecutor


@pytest.fixture
def mock_logger():
    """Fixture to provide a mock structlog logger."""
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger


@pytest.fixture
def executor(mock_logger):
    with patch("core.execution.get_structured_logger", return_value=mock_logger):
        yield StepExecutor(step_timeout_ms=1234)


@pytest.fixture
def mock_locator():
    locator = AsyncMock()
    locator.wait_for = AsyncMock()
    locator.click = AsyncMock()
    locator.fill = AsyncMock()
    return locator


@pytest.mark.asyncio
class TestRun:

    async def test_returns_result_unmodified(self, executor, mock_logger):
        result = object()

        async def operation():
            return result

        assert await executor.run("Load data", operation) is result
        logged = [c.args[0] for c in mock_logger.info.call_args_list]
        assert logged == ["step_start", "step_success"]

    async def test_failure_is_enhanced_and_reraised(self, executor, mock_logger):
        original = PlaywrightTimeoutError("Timeout 1000ms exceeded waiting for locator('#x')")

        async def operation():
            raise original

        with pytest.raises(EnhancedStepError) as exc_info:
            await executor.run("Click submit", operation, "Submit must be enabled")

        enhanced = exc_info.value
        assert enhanced.kind is ErrorKind.TIMEOUT
        assert enhanced.__cause__ is original
        assert "Click submit" in str(enhanced)
        assert "Timeout 1000ms exceeded" in str(enhanced)
        assert "Submit must be enabled" in str(enhanced)
        mock_logger.error.assert_called_once()

    async def test_assertion_failure(self, executor):
        async def operation():
            assert 1 == 2, "values differ"

        with pytest.raises(EnhancedStepError) as exc_info:
            await executor.run("Compare", operation)
        assert exc_info.value.kind is ErrorKind.ASSERTION_FAILURE

    async def test_already_enhanced_error_passes_through(self, executor):
        inner = enhance_error(RuntimeError("Element is not attached"), "Inner step")

        async def operation():
            raise inner

        with pytest.raises(EnhancedStepError) as exc_info:
            await executor.run("Outer step", operation)
        assert exc_info.value is inner
        assert exc_info.value.record.step_name == "Inner step"


@pytest.mark.asyncio
class TestElementHelpers:

    async def test_click_waits_then_clicks(self, executor, mock_locator):
        calls = []
        mock_locator.wait_for.side_effect = lambda **kw: calls.append(("wait", kw))
        mock_locator.click.side_effect = lambda **kw: calls.append(("click", kw))

        await executor.click_with_context(mock_locator, "Click button")

        assert calls == [
            ("wait", {"state": "visible", "timeout": 1234}),
            ("click", {"timeout": 1234}),
        ]

    async def test_type_fills_after_wait(self, executor, mock_locator):
        await executor.type_with_context(mock_locator, "hello", "Type name", timeout=50)

        mock_locator.wait_for.assert_awaited_once_with(state="visible", timeout=50)
        mock_locator.fill.assert_awaited_once_with("hello", timeout=50)

    async def test_wait_timeout_is_classified(self, executor, mock_locator):
        mock_locator.wait_for.side_effect = PlaywrightTimeoutError("Timeout 1234ms exceeded.")

        with pytest.raises(EnhancedStepError) as exc_info:
            await executor.click_with_context(mock_locator, "Click hidden button", "Button appears after login")

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        mock_locator.click.assert_not_called()

    async def test_wait_for_element_custom_state(self, executor, mock_locator):
        await executor.wait_for_element_with_context(mock_locator, "Wait for spinner", state="hidden")
        mock_locator.wait_for.assert_awaited_once_with(state="hidden", timeout=1234)
