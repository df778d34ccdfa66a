"""
REST API components for the presentation layer.

This module contains the FastAPI application factory, middleware and
route definitions.
"""

from .app import create_app
from .dependencies import get_config, get_container, get_transfer_manager

__all__ = [
    "create_app",
    "get_config",
    "get_container",
    "get_transfer_manager",
]
