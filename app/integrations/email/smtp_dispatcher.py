"""
SMTP Notification Dispatcher

Sends appointment notifications one message per recipient. smtplib is
blocking, so each send runs in a worker thread.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

from app.core.domain import IntegrationException
from app.core.infrastructure import RetryConfig, retry_async
from app.domains.scheduling.application.ports.notification_port import INotificationDispatcher, Recipient

from .templates import render_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpConfig:
    server: str = "localhost"
    port: int = 587
    username: str | None = None
    password: str | None = None
    from_email: str = "no-reply@localhost"
    enabled: bool = False
    timeout: float = 30.0


class SmtpNotificationDispatcher(INotificationDispatcher):
    def __init__(self, config: SmtpConfig, retry_config: RetryConfig | None = None):
        self.config = config
        self.retry_config = retry_config or RetryConfig(
            max_attempts=3,
            retryable_exceptions=(smtplib.SMTPException, OSError),
        )

    async def send_batch(
        self,
        recipients: list[Recipient],
        template_kind: str,
        template_data: dict[str, Any],
    ) -> None:
        """
        Send one e-mail per recipient.

        Raises:
            IntegrationException: If any recipient could not be reached
        """
        if not self.config.enabled:
            logger.info(f"E-mail disabled, skipping {template_kind} for {len(recipients)} recipients")
            return

        failed: list[str] = []
        for recipient in recipients:
            subject, body = render_template(template_kind, {**template_data, "recipientName": recipient.name})
            message = self._build_message(recipient, subject, body)
            try:
                await retry_async(
                    asyncio.to_thread,
                    self._deliver,
                    message,
                    config=self.retry_config,
                    operation=f"smtp:{template_kind}",
                )
            except (smtplib.SMTPException, OSError) as e:
                logger.error(f"Failed to send {template_kind} to {recipient.email}: {e}")
                failed.append(recipient.email)

        if failed:
            raise IntegrationException(
                service="smtp",
                message=f"{template_kind} not delivered to {len(failed)} of {len(recipients)} recipients",
            )
        logger.info(f"Sent {template_kind} to {len(recipients)} recipients")

    def _build_message(self, recipient: Recipient, subject: str, body: str) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = self.config.from_email
        msg["To"] = recipient.email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))
        return msg

    def _deliver(self, message: MIMEMultipart) -> None:
        with smtplib.SMTP(self.config.server, self.config.port, timeout=self.config.timeout) as server:
            server.starttls()
            if self.config.username:
                server.login(self.config.username, self.config.password or "")
            server.send_message(message)
