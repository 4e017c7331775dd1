"""
UI Utilities - Session state helpers
"""

from .session_state import init_state, get_app_state, set_app_state, get_store, clear_exports

__all__ = [
    "init_state",
    "get_app_state",
    "set_app_state",
    "get_store",
    "clear_exports",
]
