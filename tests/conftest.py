import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Make the flat top-level packages importable without installation
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


@pytest.fixture
def mock_page():
    """
    Mock Playwright page. ``is_closed`` is synchronous in the async API, so it
    is a MagicMock; ``screenshot`` writes a small file like the real call.
    """
    page = AsyncMock()
    page.is_closed = MagicMock(return_value=False)

    async def screenshot(path=None, **kwargs):
        with open(path, "wb") as f:
            f.write(b"\x89PNG")
        return b"\x89PNG"

    page.screenshot = AsyncMock(side_effect=screenshot)
    return page
