"""
Services Module

Cross-cutting services that do not belong to a single domain.
"""

from .token_service import TokenService

__all__ = ["TokenService"]
