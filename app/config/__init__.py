"""
Configuration Module

Environment-driven settings for the scheduling service.
"""

from app.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
