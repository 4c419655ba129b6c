"""Version string handling for the requested release."""

from __future__ import annotations

__all__ = ["LATEST", "normalize_version", "is_latest"]

LATEST = "latest"


def normalize_version(raw: str) -> str:
    """Strip one leading "v"/"V" from a version or tag.

    Example: normalize_version("v1.24.2") -> "1.24.2"
    """
    if raw[:1] in ("v", "V"):
        return raw[1:]
    return raw


def is_latest(version: str) -> bool:
    """Check for the "latest" sentinel (case-insensitive)."""
    return version.lower() == LATEST
