"""VerseCraft interactive-fiction runtime."""

__version__ = "0.3.0"
