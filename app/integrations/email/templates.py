"""
E-mail templates for appointment notifications.
"""

from dataclasses import dataclass
from typing import Any

from app.domains.scheduling.application.ports.notification_port import TemplateKind


@dataclass(frozen=True)
class EmailTemplate:
    subject_template: str
    body_template: str

    def render(self, context: dict[str, Any]) -> tuple[str, str]:
        values = _TemplateContext({k: v for k, v in context.items() if v is not None})
        return self.subject_template.format_map(values), self.body_template.format_map(values)


class _TemplateContext(dict):
    def __missing__(self, key: str) -> str:
        return ""


TEMPLATES: dict[str, EmailTemplate] = {
    TemplateKind.INVITATION: EmailTemplate(
        subject_template="Appointment invitation: {title}",
        body_template=(
            "Hello {recipientName},\n\n"
            "You have been invited to '{title}' ({appointmentType}).\n"
            "Starts: {startTime} ({timezone})\n"
            "Duration: {duration} minutes\n"
            "Location: {location}\n"
            "Meeting link: {meetingLink}\n"
            "Access code: {accessCode}\n"
            "Password: {password}\n\n"
            "{description}\n\n"
            "Accept: {acceptLink}\n"
            "Decline: {declineLink}\n"
        ),
    ),
    TemplateKind.CANCELLATION: EmailTemplate(
        subject_template="Appointment cancelled: {title}",
        body_template=(
            "Hello {recipientName},\n\n"
            "The appointment '{title}' scheduled for {startTime} has been cancelled.\n"
            "Reason: {reason}\n"
        ),
    ),
    TemplateKind.REMINDER: EmailTemplate(
        subject_template="Reminder: {title} starts soon",
        body_template=(
            "Hello {recipientName},\n\n"
            "Your appointment '{title}' starts at {startTime} ({timezone}).\n"
            "Location: {location}\n"
            "Meeting link: {meetingLink}\n"
            "Access code: {accessCode}\n"
        ),
    ),
}


def render_template(kind: str, context: dict[str, Any]) -> tuple[str, str]:
    """Render (subject, body); unknown kinds raise KeyError."""
    return TEMPLATES[kind].render(context)
