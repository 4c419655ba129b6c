"""Tool definitions."""

from install_rain.tools.definitions.rain import RainTool

__all__ = ["RainTool"]
