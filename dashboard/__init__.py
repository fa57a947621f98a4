"""
Dashboard-facing sync engine
"""

from .engine import DashboardSyncEngine

__all__ = ["DashboardSyncEngine"]
