"""
Utility functions for timestamps, file names and filesystem paths.

This module provides helper functions for:
- Producing naive UTC timestamps for stored records
- Sanitizing uploaded file names for safe storage keys
- Ensuring directory creation for local uploads
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Characters that are not safe in storage keys
# Allows: alphanumeric characters, dots, underscores, and hyphens
SANITIZE_PATTERN = re.compile(r"[^a-zA-Z0-9._-]+")

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


def utcnow() -> datetime:
    """Current UTC time without tzinfo, the form every timestamp column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize a datetime to the naive UTC form used by stored timestamps."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def sanitize_label(label: str, fallback: str) -> str:
    """
    Generate a storage-safe label from user input.

    Args:
        label: Free-form text such as an uploaded file name
        fallback: Default value to return if sanitization results in an empty string

    Returns:
        A lowercase, storage-safe label or the fallback value

    Example:
        >>> sanitize_label("Max at the Park!", "image")
        "max-at-the-park"
        >>> sanitize_label("@#$", "image")
        "image"
    """
    cleaned = SANITIZE_PATTERN.sub("-", label.strip())
    cleaned = cleaned.strip("-_.").lower()
    return cleaned or fallback


def image_extension(filename: Optional[str]) -> str:
    """
    Return the lowercase extension of an uploaded image file name.

    Raises:
        ValueError: If the extension is not a supported image type
    """
    suffix = Path(filename or "").suffix.lower()
    if suffix not in IMAGE_EXTENSIONS:
        raise ValueError(f"Unsupported image type: {suffix or 'none'}")
    return suffix


def ensure_directory(path: Path) -> Path:
    """
    Create a directory if it doesn't exist, including parent directories.

    Args:
        path: The directory path to create

    Returns:
        The same path object for chaining
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()
