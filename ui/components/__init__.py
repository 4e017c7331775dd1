"""
UI Components - Reusable Streamlit widgets
"""

from .sidebar import render_sidebar

__all__ = [
    "render_sidebar",
]
