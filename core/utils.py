import logging
import random
import re
import string
import time
from typing import Optional

from playwright.async_api import Page
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


async def wait_for_network_idle(page: Page, timeout: int = 30000) -> None:
    """Wait until the page has had no network requests for a while."""
    await page.wait_for_load_state("networkidle", timeout=timeout)


async def scroll_to_element(page: Page, selector: str) -> None:
    await page.locator(selector).scroll_into_view_if_needed()


async def scroll_to_bottom(page: Page) -> None:
    await page.keyboard.press("End")
    await page.wait_for_timeout(1000)


async def wait_for_element_stable(page: Page, selector: str, max_polls: int = 10, poll_ms: int = 100) -> None:
    """
    Wait for an element to become visible and stop moving.

    Args:
        page: Playwright page instance.
        selector: Selector of the element to watch.
        max_polls: Upper bound on bounding box comparisons.
        poll_ms: Delay between two comparisons in milliseconds.
    """
    element = page.locator(selector)
    await element.wait_for(state="visible")

    previous_box = await element.bounding_box()
    await page.wait_for_timeout(poll_ms)
    current_box = await element.bounding_box()

    polls = 0
    while (
        polls < max_polls
        and previous_box
        and current_box
        and (previous_box["x"] != current_box["x"] or previous_box["y"] != current_box["y"])
    ):
        previous_box = current_box
        await page.wait_for_timeout(poll_ms)
        current_box = await element.bounding_box()
        polls += 1


async def safe_click(page: Page, selector: str, retries: int = 3, wait_seconds: float = 1.0) -> None:
    """
    Click an element once it is visible and stable, retrying on failure.

    The last failure is re-raised once all attempts are used.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(retries),
        wait=wait_fixed(wait_seconds),
        reraise=True,
    ):
        with attempt:
            if attempt.retry_state.attempt_number > 1:
                logger.debug(f"Retrying click on '{selector}' (attempt {attempt.retry_state.attempt_number}/{retries})")
            element = page.locator(selector)
            await element.wait_for(state="visible")
            await wait_for_element_stable(page, selector)
            await element.click()


async def get_text_safely(page: Page, selector: str, timeout: int = 5000) -> str:
    """Text content of an element, or an empty string if it never shows up."""
    try:
        element = page.locator(selector)
        await element.wait_for(state="visible", timeout=timeout)
        return await element.text_content() or ""
    except Exception as e:
        logger.debug(f"No text for '{selector}': {e}")
        return ""


async def element_exists(page: Page, selector: str, timeout: int = 2000) -> bool:
    try:
        await page.locator(selector).wait_for(state="attached", timeout=timeout)
        return True
    except Exception:
        return False


def generate_test_data(timestamp: Optional[int] = None) -> dict:
    """Unique throwaway user data for form-filling steps."""
    timestamp = timestamp if timestamp is not None else int(time.time() * 1000)
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return {
        "email": f"test.{suffix}.{timestamp}@example.com",
        "username": f"user_{suffix}_{timestamp}",
        "password": f"TestPass{timestamp}!",
        "first_name": f"TestFirst{suffix}",
        "last_name": f"TestLast{suffix}",
        "phone_number": f"+1{random.randint(1000000000, 9999999999)}",
        "random_string": suffix,
        "timestamp": timestamp,
    }


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_REGEX.match(email))


def format_duration(milliseconds: float) -> str:
    """Human readable duration: '1h 2m 3s', '2m 5s' or '7s'."""
    seconds = int(milliseconds // 1000)
    minutes = seconds // 60
    hours = minutes // 60

    if hours > 0:
        return f"{hours}h {minutes % 60}m {seconds % 60}s"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"
