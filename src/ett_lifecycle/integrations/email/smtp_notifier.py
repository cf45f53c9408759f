"""SMTP notifier.

Sends EmailMessage values over SMTP. smtplib is blocking, so delivery runs in
the default executor. When a database is supplied every attempt is written to
the email log table.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
from typing import List, Optional

from ...config.settings import EttSettings
from ...core.exceptions import NotificationError
from ...core.value_objects import EmailMessage
from ...utils.datetime import iso_now

logger = logging.getLogger(__name__)


@dataclass
class EmailConfiguration:
    """Email configuration for SMTP delivery."""

    smtp_host: str
    smtp_port: int
    username: Optional[str]
    password: Optional[str]
    from_address: str
    use_tls: bool = True
    use_ssl: bool = False
    timeout_seconds: int = 30

    @classmethod
    def from_settings(cls, settings: EttSettings) -> "EmailConfiguration":
        return cls(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password.get_secret_value() if settings.smtp_password else None,
            from_address=settings.email_from_address,
            use_tls=settings.smtp_use_tls,
            use_ssl=settings.smtp_use_ssl,
            timeout_seconds=settings.smtp_timeout_seconds,
        )


class SmtpNotifier:
    """Notifier delivering email through an SMTP relay."""

    def __init__(self, configuration: EmailConfiguration, database=None, log_table: Optional[str] = None):
        """Initialize notifier.

        Args:
            configuration: SMTP configuration for email delivery
            database: Optional DatabaseManager used to record deliveries
            log_table: Qualified name of the email log table
        """
        self._config = configuration
        self._database = database
        self._log_table = log_table

    def build_mime(self, message: EmailMessage, message_id: str) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = self._config.from_address
        mime["To"] = ", ".join(message.to)
        if message.cc:
            mime["Cc"] = ", ".join(message.cc)
        mime["Date"] = formatdate(localtime=False)
        mime["Message-ID"] = message_id

        mime.attach(MIMEText(message.text_body, "plain", "utf-8"))
        if message.html_body:
            mime.attach(MIMEText(message.html_body, "html", "utf-8"))
        return mime

    async def send(self, message: EmailMessage) -> str:
        """Send a message, returning its Message-ID header."""
        domain = self._config.from_address.rpartition("@")[2] or None
        message_id = make_msgid(domain=domain)
        mime = self.build_mime(message, message_id)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._send_email_blocking, mime, message.recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{message.subject}' to {message.recipients}: {e}")
            await self._log_delivery(message, message_id, "failed", str(e))
            raise NotificationError(f"Email delivery failed: {e}") from e

        logger.info(f"Sent '{message.subject}' to {', '.join(message.recipients)} ({message_id})")
        await self._log_delivery(message, message_id, "sent")
        return message_id

    def _send_email_blocking(self, mime: MIMEMultipart, recipients: List[str]) -> None:
        if self._config.use_ssl:
            server = smtplib.SMTP_SSL(
                self._config.smtp_host,
                self._config.smtp_port,
                timeout=self._config.timeout_seconds,
            )
        else:
            server = smtplib.SMTP(
                self._config.smtp_host,
                self._config.smtp_port,
                timeout=self._config.timeout_seconds,
            )
            if self._config.use_tls:
                server.starttls()

        try:
            if self._config.username and self._config.password:
                server.login(self._config.username, self._config.password)
            server.send_message(mime, from_addr=self._config.from_address, to_addrs=recipients)
        finally:
            server.quit()

    async def _log_delivery(self, message: EmailMessage, message_id: str, status: str,
                            error: Optional[str] = None) -> None:
        if self._database is None or not self._log_table:
            return
        try:
            await self._database.execute(
                f"""
                INSERT INTO {self._log_table} (message_id, subject, recipients, category, status, error, sent_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                """,
                message_id, message.subject, ", ".join(message.recipients),
                message.category, status, error, iso_now(),
            )
        except Exception as e:
            logger.warning(f"Failed to record email delivery {message_id}: {e}")
