from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from reporting.models import UnifiedResult

logger = logging.getLogger(__name__)


def build_summary(results: Iterable[UnifiedResult], browser: Optional[str] = None) -> dict:
    """Aggregate unified results into the run summary document."""
    tests = []
    for result in results:
        tests.append({
            "testName": result.full_name,
            "status": result.status,
            "duration": result.duration,
            "error": result.status_details.message if result.status_details else None,
            "screenshots": [a.source for step in result.steps for a in step.attachments],
            "browser": browser,
            "timestamp": datetime.fromtimestamp(result.stop / 1000, tz=timezone.utc).isoformat(),
        })

    return {
        "totalTests": len(tests),
        "passed": sum(1 for t in tests if t["status"] == "passed"),
        "failed": sum(1 for t in tests if t["status"] == "failed"),
        "skipped": sum(1 for t in tests if t["status"] == "skipped"),
        "executionTime": sum(t["duration"] for t in tests),
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "tests": tests,
    }


def write_summary(summary: dict, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Test summary generated: {path}")
    return path


def cleanup_old_reports(dirs: Iterable[Path], days_to_keep: int = 7, now: Optional[float] = None) -> List[Path]:
    """Delete files older than ``days_to_keep`` days from each directory."""
    cutoff = (now if now is not None else time.time()) - days_to_keep * 86400
    removed = []
    for directory in dirs:
        directory = Path(directory)
        if not directory.is_dir():
            continue
        for file in directory.iterdir():
            if file.is_file() and file.stat().st_mtime < cutoff:
                file.unlink()
                removed.append(file)
    logger.info(f"Cleaned up {len(removed)} report file(s) older than {days_to_keep} days")
    return removed
