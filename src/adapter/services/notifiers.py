"""
Reset link notifiers.

LoggingNotifier is meant for development: it writes the link to the log
instead of sending mail. SmtpNotifier delivers a plain-text message over
SMTP, running the blocking smtplib client in a worker thread.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from src.app.services.notifier import INotifier
from src.core.result import Error, Result, Return

logger = logging.getLogger(__name__)


def build_reset_link(base_url: str, route: str, token: str) -> str:
    return f"{base_url.rstrip('/')}{route}/{token}"


class LoggingNotifier(INotifier):
    """Development notifier that logs the reset link"""

    def __init__(self, base_url: str, route: str):
        self.base_url = base_url
        self.route = route

    async def send_reset_link(
        self, display_name: Optional[str], email: str, token: str
    ) -> Result[None]:
        link = build_reset_link(self.base_url, self.route, token)
        logger.info(f"[DEV MAIL] to={email} name={display_name} reset_url={link}")
        return Return.ok(None)


class SmtpNotifier(INotifier):
    """SMTP notifier for reset links"""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        base_url: str,
        route: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.base_url = base_url
        self.route = route
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, display_name: Optional[str], email: str, token: str) -> EmailMessage:
        link = build_reset_link(self.base_url, self.route, token)
        message = EmailMessage()
        message["Subject"] = "Reset your password"
        message["From"] = self.sender
        message["To"] = email
        message.set_content(
            f"Hello {display_name or email},\n\n"
            f"Use the link below to choose a new password:\n{link}\n\n"
            "If you did not request a password reset, you can ignore this email.\n"
        )
        return message

    async def send_reset_link(
        self, display_name: Optional[str], email: str, token: str
    ) -> Result[None]:
        message = self.build_message(display_name, email, token)
        try:
            await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"SMTP delivery to {email} failed: {exc}")
            return Return.err(Error("MAIL_DELIVERY_FAILED", str(exc)))
        return Return.ok(None)

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)
