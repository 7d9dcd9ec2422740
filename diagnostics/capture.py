from __future__ import annotations

import atexit
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from playwright.async_api import Page

from .naming import build_screenshot_name, make_token, normalize_name
from .storage import clear_images, ensure_dir
from .types import ScreenshotArtifact

logger = logging.getLogger(__name__)


def _page_available(page: Optional[Page]) -> bool:
    if page is None:
        return False
    try:
        return not page.is_closed()
    except Exception:
        return False


class ArtifactStore:
    """
    Screenshot directory plus an in-memory index of what was captured in this run.

    Captures are best-effort: they return None instead of raising when the page
    is gone or the screenshot cannot be written.
    """

    def __init__(self, output_dir: Path, full_page: bool = True):
        self.output_dir = Path(output_dir)
        self.full_page = full_page
        self._index: Dict[str, ScreenshotArtifact] = {}
        self._lock = threading.Lock()

    def clear_all(self) -> int:
        """Delete every screenshot in the directory and reset the index."""
        removed = clear_images(self.output_dir)
        self.clear_index()
        logger.info(f"Removed {removed} screenshot(s) from {self.output_dir}")
        return removed

    def clear_index(self) -> None:
        with self._lock:
            self._index.clear()

    async def capture(
        self,
        page: Optional[Page],
        scenario_name: str,
        step_name: str,
        step_index: int,
    ) -> Optional[Path]:
        token = make_token()
        path = await self._screenshot(page, build_screenshot_name(scenario_name, step_name, token))
        if path is None:
            return None
        self._register(
            f"{scenario_name}{step_name}{token}",
            ScreenshotArtifact(
                scenario_name=scenario_name,
                step_name=step_name,
                step_index=step_index,
                file_path=path,
            ),
        )
        return path

    async def capture_on_failure(self, page: Optional[Page], scenario_name: str) -> Optional[Path]:
        """Whole-scenario fallback capture keyed only by the scenario name."""
        token = make_token()
        path = await self._screenshot(page, build_screenshot_name(scenario_name, None, token))
        if path is None:
            return None
        self._register(f"{scenario_name}{token}", ScreenshotArtifact(scenario_name=scenario_name, file_path=path))
        return path

    def artifacts(self) -> List[ScreenshotArtifact]:
        with self._lock:
            return list(self._index.values())

    def find(self, scenario_name: str, step_name: str) -> Optional[ScreenshotArtifact]:
        """Latest step capture whose normalized names match, case-insensitively."""
        scenario_key = normalize_name(scenario_name).lower()
        step_key = normalize_name(step_name).lower()
        matches = [
            artifact
            for artifact in self.artifacts()
            if artifact.is_step_capture
            and normalize_name(artifact.scenario_name).lower() == scenario_key
            and normalize_name(artifact.step_name).lower() == step_key
        ]
        if not matches:
            return None
        return max(matches, key=lambda a: (a.created_at, str(a.file_path)))

    async def _screenshot(self, page: Optional[Page], file_name: str) -> Optional[Path]:
        if not _page_available(page):
            logger.warning(f"Page is not available, skipping screenshot {file_name}")
            return None
        path = self.output_dir / file_name
        try:
            ensure_dir(self.output_dir)
            await page.screenshot(path=str(path), full_page=self.full_page, type="png")
        except Exception as e:
            logger.warning(f"Screenshot {file_name} could not be captured: {e}")
            return None
        return path

    def _register(self, key: str, artifact: ScreenshotArtifact) -> None:
        with self._lock:
            self._index[key] = artifact


# Process-wide store, created on first access
_artifact_store: Optional[ArtifactStore] = None


def get_artifact_store(output_dir: Optional[Path] = None, full_page: bool = True) -> ArtifactStore:
    """
    Get the process-wide artifact store.

    Args:
        output_dir: Screenshot directory; defaults to config.diagnostics.screenshots_dir.
        full_page: Whether screenshots cover the full scrollable page.
    """
    global _artifact_store
    if _artifact_store is None:
        if output_dir is None:
            from config import config
            output_dir = config.diagnostics.screenshots_dir
        _artifact_store = ArtifactStore(output_dir, full_page=full_page)
        atexit.register(_artifact_store.clear_index)
    return _artifact_store
