"""Utility functions for branch-health."""

from .threading import MAX_GIT_WORKERS, get_optimal_worker_count, get_threading_info

__all__ = ["MAX_GIT_WORKERS", "get_optimal_worker_count", "get_threading_info"]
