"""
E-mail Notification Integration
"""

from .smtp_dispatcher import SmtpConfig, SmtpNotificationDispatcher
from .templates import TEMPLATES, EmailTemplate, render_template

__all__ = [
    "EmailTemplate",
    "SmtpConfig",
    "SmtpNotificationDispatcher",
    "TEMPLATES",
    "render_template",
]
