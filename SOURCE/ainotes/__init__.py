"""
Notes client package initialization.

This module exposes the controller factory so that the Streamlit view and
other scripts can import `create_controller` without circular imports.
"""

from .app import create_controller

__all__ = ["create_controller"]
