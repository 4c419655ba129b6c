"""Install the rain CLI onto a CI runner."""

__version__ = "0.1.0"
