"""Application services."""

from .install import InstallPaths, InstallService

__all__ = ["InstallPaths", "InstallService"]
