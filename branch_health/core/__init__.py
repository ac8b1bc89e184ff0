"""Core orchestration for branch-health."""

from .branch_health import BranchHealth

__all__ = ["BranchHealth"]
