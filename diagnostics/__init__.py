from .capture import ArtifactStore, get_artifact_store
from .naming import build_screenshot_name, normalize_name
from .types import ScreenshotArtifact

__all__ = [
    "ArtifactStore",
    "ScreenshotArtifact",
    "build_screenshot_name",
    "get_artifact_store",
    "normalize_name",
]
