import re

import pytest

from diagnostics.naming import build_screenshot_name, make_token, normalize_name


class TestNormalizeName:

    def test_example(self):
        assert normalize_name("Contact | Blankfactor!!") == "Contact-Blankfactor"

    @pytest.mark.parametrize("value", [
        "Contact | Blankfactor!!",
        "--I verify the page title is \"Contact\"--",
        "  spaces   and\ttabs ",
        "ünïcödé & symbols ##",
    ])
    def test_output_shape(self, value):
        result = normalize_name(value)
        assert re.fullmatch(r"[A-Za-z0-9-]*", result)
        assert "--" not in result
        assert not result.startswith("-") and not result.endswith("-")

    def test_preserves_case(self):
        assert normalize_name("Click Button") == "Click-Button"

    def test_only_symbols(self):
        assert normalize_name("!!!") == ""


class TestScreenshotName:

    def test_contains_normalized_parts(self):
        name = build_screenshot_name("Scenario A", "Click button", "1699999999999-abc123")
        assert name == "Scenario-A-Click-button-1699999999999-abc123.png"

    def test_scenario_only(self):
        assert build_screenshot_name("Checkout", None, "1-a") == "Checkout-1-a.png"

    def test_tokens_are_unique(self):
        assert len({make_token() for _ in range(50)}) == 50
