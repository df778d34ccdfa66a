"""
Configuration infrastructure.

This module provides configuration models and the loader that reads them
from files and environment variables.
"""

from .models import ApplicationConfig, LoggingConfig, PerformanceConfig, ServerConfig, UploadConfig
from .loader import ConfigLoader

__all__ = [
    "ApplicationConfig",
    "LoggingConfig",
    "PerformanceConfig",
    "ServerConfig",
    "UploadConfig",
    "ConfigLoader",
]
