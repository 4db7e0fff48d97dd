import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from quickstay.schemas.notifications import OutgoingEmail

logger = logging.getLogger(__name__)

_SMTP_TIMEOUT = 30.0


class SmtpMailer:
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        use_ssl: bool = False,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._use_ssl = use_ssl

    @property
    def configured(self) -> bool:
        return bool(self._host and self._sender)

    async def send(self, email: OutgoingEmail) -> None:
        """Deliver *email*. Raises on SMTP failure so the caller can retry."""
        if not self.configured:
            logger.info("SMTP not configured, skipping email to %s: %s", email.to, email.subject)
            return
        await asyncio.to_thread(self._send_blocking, email)
        logger.info("Email sent to %s: %s", email.to, email.subject)

    def _build_message(self, email: OutgoingEmail) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = self._sender
        msg["To"] = email.to
        msg["Subject"] = email.subject
        msg.attach(MIMEText(email.text, "plain"))
        msg.attach(MIMEText(email.html, "html"))
        return msg

    def _send_blocking(self, email: OutgoingEmail) -> None:
        msg = self._build_message(email)
        if self._use_ssl:
            server = smtplib.SMTP_SSL(self._host, self._port, timeout=_SMTP_TIMEOUT)
        else:
            server = smtplib.SMTP(self._host, self._port, timeout=_SMTP_TIMEOUT)
        with server:
            if not self._use_ssl:
                server.starttls()
            if self._username:
                server.login(self._username, self._password)
            server.sendmail(self._sender, [email.to], msg.as_string())
