"""
Best-effort transactional email for contact and upload notifications.

Transports are tried in a fixed priority order (Resend, SendGrid, SMTP) and
the first one whose required settings are all present is used for the whole
send; there is no fallback to another transport once a send has started.
Each message is attempted once. Failures are logged with the record id so
they can be resent by hand, and are reported to the caller as ``False``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from email.message import EmailMessage
from functools import lru_cache
from typing import Any, Dict, Optional, Sequence, Tuple, Type

import aiosmtplib
import httpx

from visioncraft.core.config import Settings, get_settings
from visioncraft.core.email_templates import (
    OutgoingEmail,
    contact_email,
    diagnostic_email,
    upload_email,
)
from visioncraft.core.errors import NotificationConfigError, NotificationError
from visioncraft.models.contact import ContactSubmission
from visioncraft.models.upload import ImageUpload, UploadClientInfo

logger = logging.getLogger(__name__)


class EmailTransport(ABC):
    """A concrete way of delivering one email."""

    name: str = ""
    required_settings: Tuple[str, ...] = ()

    def __init__(self, settings: Settings, http_transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.http_transport = http_transport

    @classmethod
    def is_configured(cls, settings: Settings) -> bool:
        return all(getattr(settings, key, None) for key in cls.required_settings)

    @property
    def sender(self) -> str:
        return self.settings.from_email or self.settings.default_sender

    def _http_client(self) -> httpx.AsyncClient:
        timeout = self.settings.notification_timeout_seconds
        if self.http_transport is not None:
            return httpx.AsyncClient(transport=self.http_transport, timeout=timeout)
        return httpx.AsyncClient(timeout=timeout)

    @abstractmethod
    async def send(self, email: OutgoingEmail) -> None:
        """Deliver the email or raise NotificationError."""


class ResendTransport(EmailTransport):
    name = "resend"
    required_settings = ("resend_api_key", "to_email")
    url = "https://api.resend.com/emails"

    @property
    def sender(self) -> str:
        # Resend accepts its onboarding address without domain verification
        return self.settings.from_email or "onboarding@resend.dev"

    async def send(self, email: OutgoingEmail) -> None:
        payload: Dict[str, Any] = {
            "from": self.sender,
            "to": [self.settings.to_email],
            "subject": email.subject,
            "html": email.html,
            "text": email.text,
        }
        if email.reply_to:
            payload["reply_to"] = email.reply_to

        try:
            async with self._http_client() as client:
                response = await client.post(
                    self.url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
                )
        except httpx.HTTPError as e:
            raise NotificationError(f"Resend request failed: {str(e)}", self.name) from e

        if not response.is_success:
            raise NotificationError(f"Resend ({response.status_code}) {response.text}", self.name)


class SendGridTransport(EmailTransport):
    name = "sendgrid"
    required_settings = ("sendgrid_api_key", "to_email")
    url = "https://api.sendgrid.com/v3/mail/send"

    async def send(self, email: OutgoingEmail) -> None:
        # NOTE: the sender must be verified in SendGrid (single sender or domain)
        payload: Dict[str, Any] = {
            "personalizations": [{"to": [{"email": self.settings.to_email}]}],
            "from": {"email": self.sender},
            "subject": email.subject,
            "content": [
                {"type": "text/plain", "value": email.text},
                {"type": "text/html", "value": email.html},
            ],
        }
        if email.reply_to:
            payload["reply_to"] = {"email": email.reply_to}

        try:
            async with self._http_client() as client:
                response = await client.post(
                    self.url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.settings.sendgrid_api_key}"},
                )
        except httpx.HTTPError as e:
            raise NotificationError(f"SendGrid request failed: {str(e)}", self.name) from e

        if not response.is_success:
            raise NotificationError(f"SendGrid ({response.status_code}) {response.text}", self.name)


class SmtpTransport(EmailTransport):
    name = "smtp"
    required_settings = ("smtp_host", "smtp_port", "smtp_user", "smtp_pass", "to_email")

    @property
    def sender(self) -> str:
        return self.settings.from_email or self.settings.smtp_user

    def build_message(self, email: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = self.settings.to_email
        msg["Subject"] = email.subject
        if email.reply_to:
            msg["Reply-To"] = email.reply_to
        msg.set_content(email.text)
        msg.add_alternative(email.html, subtype="html")
        return msg

    async def send(self, email: OutgoingEmail) -> None:
        port = int(self.settings.smtp_port)
        try:
            message = self.build_message(email)
            await aiosmtplib.send(
                message,
                hostname=self.settings.smtp_host,
                port=port,
                username=self.settings.smtp_user,
                password=self.settings.smtp_pass,
                use_tls=port == 465,  # Implicit TLS for port 465
                start_tls=port != 465,
                timeout=self.settings.notification_timeout_seconds,
            )
        except (aiosmtplib.SMTPException, OSError, ValueError) as e:
            raise NotificationError(f"SMTP send failed: {str(e)}", self.name) from e


DEFAULT_TRANSPORTS: Tuple[Type[EmailTransport], ...] = (
    ResendTransport,
    SendGridTransport,
    SmtpTransport,
)


class Notifier:
    """Sends notification emails through the first configured transport."""

    def __init__(
        self,
        settings: Settings,
        transports: Sequence[Type[EmailTransport]] = DEFAULT_TRANSPORTS,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.transports = tuple(transports)
        self.http_transport = http_transport

    def select_transport(self) -> EmailTransport:
        for transport_cls in self.transports:
            if transport_cls.is_configured(self.settings):
                return transport_cls(self.settings, http_transport=self.http_transport)
        raise NotificationConfigError(
            "Email not configured: set RESEND_API_KEY, SENDGRID_API_KEY or "
            "SMTP_HOST/SMTP_PORT/SMTP_USER/SMTP_PASS, plus TO_EMAIL (FROM_EMAIL optional)"
        )

    async def deliver(self, email: OutgoingEmail) -> str:
        """
        Send one email, bounded by the notification timeout.

        Returns:
            str: Name of the transport that delivered it

        Raises:
            NotificationError: On missing configuration, rejection or timeout
        """
        transport = self.select_transport()
        try:
            await asyncio.wait_for(
                transport.send(email),
                timeout=self.settings.notification_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise NotificationError(
                f"Timed out after {self.settings.notification_timeout_seconds}s", transport.name
            ) from e
        return transport.name

    async def _send(self, email: OutgoingEmail, context: str) -> bool:
        try:
            transport_name = await self.deliver(email)
        except NotificationError as e:
            logger.error(f"❌ Notification failed for {context} (transport={e.transport}): {str(e)}")
            return False
        except Exception as e:
            logger.error(f"❌ Unexpected notification error for {context}: {str(e)}", exc_info=True)
            return False

        logger.info(f"✅ Notification sent for {context} via {transport_name}")
        return True

    async def notify_contact(self, submission: ContactSubmission) -> bool:
        return await self._send(contact_email(submission), f"contact submission {submission.id}")

    async def notify_upload(self, record: ImageUpload, client_info: UploadClientInfo) -> bool:
        return await self._send(upload_email(record, client_info), f"image upload {record.id}")

    async def send_test(self) -> bool:
        return await self._send(diagnostic_email(), "test email")

    def describe(self) -> Dict[str, Any]:
        """Which settings are present and which transport would be used; never the values."""
        present = {
            key.upper(): bool(getattr(self.settings, key, None))
            for key in (
                "resend_api_key",
                "sendgrid_api_key",
                "smtp_host",
                "smtp_port",
                "smtp_user",
                "smtp_pass",
                "to_email",
                "from_email",
            )
        }
        selected = next(
            (t.name for t in self.transports if t.is_configured(self.settings)),
            None,
        )
        return {"env_present": present, "transport": selected}


@lru_cache
def get_notifier() -> Notifier:
    """Returns the process-wide notifier"""
    return Notifier(get_settings())
