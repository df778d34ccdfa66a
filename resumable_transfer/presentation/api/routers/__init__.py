"""
API router modules.
"""

from . import health, upload

__all__ = [
    "health",
    "upload",
]
