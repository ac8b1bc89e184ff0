"""
branch-health - Remote branch health analysis and cleanup
"""

from .__version__ import __version__
from .core import BranchHealth
from .cli.main import main

__all__ = ["BranchHealth", "main", "__version__"]
