from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ScreenshotArtifact:
    scenario_name: str
    file_path: Path
    step_name: Optional[str] = None
    step_index: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_step_capture(self) -> bool:
        return self.step_name is not None
