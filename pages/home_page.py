from playwright.async_api import Page

from core.execution import StepExecutor
from core.utils import scroll_to_bottom
from pages.base_page import BasePage


class HomePage(BasePage):
    """Landing page: heading, header menus, flip-card tiles and the call to action."""

    def __init__(self, page: Page, executor: StepExecutor, base_url: str = ""):
        super().__init__(page, executor, base_url)
        self.page_title = self.page.locator("h1")
        self.lets_get_started_button = self.page.locator("//a[normalize-space(text()) = \"Let's get started\"]")

    def menu(self, name: str):
        return self.page.locator(f"//header//a/span[normalize-space(text()) = '{name}']")

    async def navigate_to_home_page(self) -> None:
        await self.navigate_to("/")
        await self.wait_for_page_load()

    async def get_page_title_text(self) -> str:
        return await self.get_element_text(self.page_title, name="page heading")

    async def hover_over_menu(self, name: str) -> None:
        menu = self.menu(name)
        await self.executor.run(f"Hover over '{name}' menu", menu.hover, f"'{name}' must be a header menu entry")

    async def open_item_in_menu(self, item: str) -> None:
        locator = self.page.locator(f'//*[contains(@class, "item__title") and text() = "{item}"]')
        await self.click_element(locator, name=f"menu item '{item}'")

    async def verify_page_title(self, expected_title: str) -> None:
        await self.verify_element_contains_text(self.page_title, expected_title, name="page heading")

    async def copy_text_from_tile(self, tile: int) -> str:
        front = self.page.locator(f"(//*[contains(@class, 'flip-card-front')])[{tile}]")
        await self.wait_for_element(front, name=f"tile {tile}")
        await self.executor.run(f"Reveal back of tile {tile}", front.scroll_into_view_if_needed)
        await self.executor.run(f"Hover over tile {tile}", front.hover, "Tiles flip on hover")

        back = self.page.locator(f"(//*[contains(@class, 'card-back')])[{tile}]/div")
        return await self.get_element_text(back, name=f"back of tile {tile}")

    async def scroll_to_bottom(self) -> None:
        await self.executor.run("Scroll to bottom", lambda: scroll_to_bottom(self.page))

    async def click_lets_get_started(self) -> None:
        await self.click_element(self.lets_get_started_button, name="'Let's get started' button")
