from behave import given, then, when

from core.errors import enhance_error
from pages.home_page import HomePage

SUPPORTED_MENUS = ("Industries",)


def run(context, coro):
    return context.loop.run_until_complete(coro)


@given("I navigate to the home page")
def step_navigate_home(context):
    context.home_page = HomePage(context.page, context.executor, context.app_config.browser.base_url)
    run(context, context.home_page.navigate_to_home_page())


@given('I hover over "{menu}" and open the "{item}" section')
def step_open_menu_item(context, menu, item):
    if menu not in SUPPORTED_MENUS:
        raise enhance_error(
            ValueError(f"Unsupported hover element: {menu}"),
            "Hover over menu element",
            f"Supported menus: {', '.join(SUPPORTED_MENUS)}",
        )
    run(context, context.home_page.hover_over_menu(menu))
    run(context, context.home_page.open_item_in_menu(item))


@when("I copy the text from the {tile:d}rd tile")
def step_copy_tile_text(context, tile):
    context.copied_text = run(context, context.home_page.copy_text_from_tile(tile))


@then('the copied text is "{expected}"')
def step_check_copied_text(context, expected):
    async def check():
        actual = context.copied_text.strip()
        assert actual == expected, f"expected tile text '{expected}', got '{actual}'"

    run(context, context.executor.run("Compare tile text", check))


@when("I scroll to the bottom of the page and click on the Let's get started button")
def step_click_get_started(context):
    run(context, context.home_page.scroll_to_bottom())
    run(context, context.home_page.click_lets_get_started())


@then('I verify that the page is loaded and the page url is "{url}"')
def step_verify_url(context, url):
    async def check():
        await context.home_page.wait_for_page_load()
        current_url = await context.home_page.get_current_url()
        assert current_url == url, f"expected URL '{url}', got '{current_url}'"

    run(context, context.executor.run("Verify page URL", check))


@then('I verify the page title is "{title}"')
def step_verify_title(context, title):
    async def check():
        page_title = await context.home_page.get_page_title()
        assert page_title == title, f"expected page title '{title}', got '{page_title}'"

    run(context, context.executor.run("Verify page title", check))
