# backend/booking_engine/services/email.py
"""
Email Service for the booking engine.

Renders a booking email from its template and hands it to a transport:
- ResendEmailTransport: delivers through the Resend API
- ConsoleEmailTransport: logs the message (local development)

`EmailService.send` runs on the email worker pool, never on a request
thread. It raises NotificationException on any failure; the pool logs it.
"""

from dataclasses import dataclass
import logging
import re
from typing import Any, Mapping, Optional, Protocol

import resend

from ..core.config import Settings
from ..core.exceptions import NotificationException
from .base import BaseService
from .email_subjects import subject_for
from .template_registry import TemplateRegistry
from .template_service import TemplateService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    sender: str
    to: str
    subject: str
    html: str
    text: str


class EmailTransport(Protocol):
    def deliver(self, message: EmailMessage) -> None: ...


class ConsoleEmailTransport:
    """Writes emails to the log instead of sending them."""

    def deliver(self, message: EmailMessage) -> None:
        logger.info(
            "[console-email] to=%s subject=%r\n%s", message.to, message.subject, message.text
        )


class ResendEmailTransport:
    def __init__(self, api_key: str):
        if not api_key:
            raise NotificationException("Resend API key not configured")
        resend.api_key = api_key

    def deliver(self, message: EmailMessage) -> None:
        params: resend.Emails.SendParams = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        response = resend.Emails.send(params)
        logger.debug("Resend accepted email to %s: %s", message.to, response)


def build_email_transport(settings: Settings) -> EmailTransport:
    if settings.email_provider == "resend":
        api_key = settings.resend_api_key.get_secret_value() if settings.resend_api_key else ""
        return ResendEmailTransport(api_key)
    return ConsoleEmailTransport()


class EmailService(BaseService):
    """Renders booking emails and sends them through the configured transport."""

    def __init__(
        self,
        settings: Settings,
        template_service: TemplateService,
        transport: Optional[EmailTransport] = None,
    ):
        super().__init__()
        self.settings = settings
        self.template_service = template_service
        self.transport = transport or build_email_transport(settings)

    def _html_to_text(self, html_content: str) -> str:
        """Convert HTML content to plain text for better deliverability"""
        text = re.sub(r"<[^>]+>", "", html_content)
        text = re.sub(r"\s+", " ", text)
        return text.strip()

    @BaseService.measure_operation("send_email")
    def send(
        self,
        template_kind: TemplateRegistry,
        recipient: Optional[str],
        context: Mapping[str, Any],
    ) -> None:
        """
        Render and send one booking email.

        Raises:
            NotificationException: If there is no recipient, rendering fails,
                or the transport rejects the message
        """
        if not recipient:
            raise NotificationException(f"No recipient for {template_kind.name}")

        try:
            html = self.template_service.render_template(template_kind.value, dict(context))
            message = EmailMessage(
                sender=self.settings.email_sender,
                to=recipient,
                subject=subject_for(template_kind),
                html=html,
                text=self._html_to_text(html),
            )
            self.transport.deliver(message)
        except NotificationException:
            raise
        except Exception as e:
            self.logger.error(f"Failed to send {template_kind.name} to {recipient}: {str(e)}")
            raise NotificationException(f"Email delivery failed: {str(e)}") from e

        self.logger.info(f"Email sent successfully to {recipient} - Template: {template_kind.name}")
