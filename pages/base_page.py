from typing import Optional

from playwright.async_api import Locator, Page, expect

from core.execution import StepExecutor


class BasePage:
    """
    Common page-object operations.

    Every operation runs through the step executor, so any failure surfaces as
    an ``EnhancedStepError`` naming the operation.
    """

    def __init__(self, page: Page, executor: StepExecutor, base_url: str = ""):
        self.page = page
        self.executor = executor
        self.base_url = base_url.rstrip("/")

    async def navigate_to(self, path: str = "") -> None:
        url = f"{self.base_url}{path}" if path else self.base_url

        async def operation():
            await self.page.goto(url, wait_until="networkidle")

        await self.executor.run(f"Navigate to {url}", operation, "Check that the site is reachable and BASE_URL is correct")

    async def wait_for_element(self, locator: Locator, timeout: Optional[int] = None, name: str = "element") -> None:
        await self.executor.wait_for_element_with_context(locator, f"Wait for {name}", timeout=timeout)

    async def click_element(self, locator: Locator, name: str = "element") -> None:
        await self.executor.click_with_context(locator, f"Click {name}")

    async def fill_input(self, locator: Locator, text: str, name: str = "input") -> None:
        await self.executor.type_with_context(locator, text, f"Fill {name}")

    async def get_element_text(self, locator: Locator, name: str = "element") -> str:
        await self.wait_for_element(locator, name=name)
        text = await self.executor.run(f"Read text of {name}", locator.text_content)
        return text or ""

    async def is_element_visible(self, locator: Locator, timeout: int = 5000) -> bool:
        try:
            await locator.wait_for(state="visible", timeout=timeout)
            return True
        except Exception:
            return False

    async def wait_for_page_load(self) -> None:
        async def operation():
            await self.page.wait_for_load_state("networkidle")

        await self.executor.run("Wait for page load", operation, "The page kept loading resources")

    async def verify_element_contains_text(self, locator: Locator, expected_text: str, name: str = "element") -> None:
        async def operation():
            await expect(locator).to_contain_text(expected_text)

        await self.executor.run(f"Verify {name} contains '{expected_text}'", operation)

    async def verify_element_is_visible(self, locator: Locator, name: str = "element") -> None:
        async def operation():
            await expect(locator).to_be_visible()

        await self.executor.run(f"Verify {name} is visible", operation)

    async def get_page_title(self) -> str:
        return await self.page.title()

    async def get_current_url(self) -> str:
        return self.page.url
