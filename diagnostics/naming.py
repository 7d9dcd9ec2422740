from __future__ import annotations

import re
import time
import uuid
from typing import Optional

IMAGE_SUFFIX = ".png"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def normalize_name(value: str) -> str:
    """Replace every non-alphanumeric run with a single '-' and trim the ends."""
    return _NON_ALNUM.sub("-", value).strip("-")


def make_token() -> str:
    """Millisecond timestamp plus a short random suffix."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def build_screenshot_name(scenario_name: str, step_name: Optional[str], token: str) -> str:
    parts = [normalize_name(scenario_name)]
    if step_name is not None:
        parts.append(normalize_name(step_name))
    parts.append(token)
    return "-".join(part for part in parts if part) + IMAGE_SUFFIX
