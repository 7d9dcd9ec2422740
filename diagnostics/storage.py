from __future__ import annotations

from pathlib import Path

IMAGE_SUFFIXES = frozenset({".png", ".jpg", ".jpeg"})


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def list_images(dir_path: Path) -> list[Path]:
    if not dir_path.is_dir():
        return []
    return sorted(p for p in dir_path.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)


def clear_images(dir_path: Path) -> int:
    """Delete every image file directly under ``dir_path``. Errors propagate."""
    removed = 0
    for image in list_images(dir_path):
        image.unlink()
        removed += 1
    return removed
