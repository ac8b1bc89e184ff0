"""Worker pool sizing for the per-branch git queries."""

import os
import platform
from typing import Any, Dict, Optional

# Each worker mostly waits on a git subprocess; more than this thrashes the disk
MAX_GIT_WORKERS = 16


def get_optimal_worker_count(requested: Optional[int] = None) -> int:
    """Worker count for branch analysis.

    Args:
        requested: Count from --workers; used as-is when positive

    Returns:
        Number of workers to use (1 means sequential)
    """
    if requested is not None and requested > 0:
        return requested
    return max(1, min(MAX_GIT_WORKERS, (os.cpu_count() or 1) * 2))


def get_threading_info() -> Dict[str, Any]:
    """Runtime details shown with --debug."""
    return {
        "python_version": platform.python_version(),
        "cpu_count": os.cpu_count() or 1,
        "optimal_workers": get_optimal_worker_count(),
    }
