"""Version information for branch-health."""

__version__ = "0.1.0"
