"""
Configuration module for scmhook.
"""

from .settings import Settings, get_settings, static_secret

__all__ = ["Settings", "get_settings", "static_secret"]
