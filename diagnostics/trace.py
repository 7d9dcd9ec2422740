from __future__ import annotations

import logging
from pathlib import Path

from playwright.async_api import BrowserContext

logger = logging.getLogger(__name__)


async def start_tracing(context: BrowserContext) -> bool:
    try:
        await context.tracing.start(screenshots=True, snapshots=True, sources=False)
        return True
    except Exception as e:
        # tracing may already be started or unsupported
        logger.warning(f"Could not start tracing: {e}")
        return False


async def stop_tracing(context: BrowserContext, out_path: Path) -> bool:
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        await context.tracing.stop(path=str(out_path))
        return True
    except Exception as e:
        logger.warning(f"Could not stop tracing into {out_path}: {e}")
        return False
