"""
Notification Dispatcher Port
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


class TemplateKind:
    """Notification kinds understood by dispatchers."""

    INVITATION = "appointmentInvitation"
    CANCELLATION = "appointmentCancellation"
    REMINDER = "appointmentReminder"


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str = ""


@runtime_checkable
class INotificationDispatcher(Protocol):
    """
    Interface for outbound notifications.

    Implementations may raise; callers run them through SideEffectRunner so
    a delivery failure is logged and never reaches the core operation.
    """

    async def send_batch(
        self,
        recipients: list[Recipient],
        template_kind: str,
        template_data: dict[str, Any],
    ) -> None:
        """
        Send one notification per recipient.

        Args:
            recipients: People to notify
            template_kind: One of TemplateKind
            template_data: Values rendered into the message
        """
        ...
