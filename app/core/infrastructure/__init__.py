"""
Core Infrastructure Module

Retry helpers shared by the outbound integrations (SMTP, calendar API).
"""

from app.core.infrastructure.retry import RetryConfig, retry_async

__all__ = [
    "RetryConfig",
    "retry_async",
]
