"""
Observable local state of the dashboard
"""

from .observable import Observable
from .state_store import StateStore, DEFAULT_ACTIVITY_LIMIT

__all__ = ["Observable", "StateStore", "DEFAULT_ACTIVITY_LIMIT"]
