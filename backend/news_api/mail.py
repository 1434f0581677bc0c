import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Annotated

from fastapi import Depends
from starlette.concurrency import run_in_threadpool

from .config import settings

logger = logging.getLogger(__name__)


class Mailer:
    """SMTP sender. Delivery is fire-and-forget: failures are logged, never raised."""

    def __init__(
        self,
        host: str = settings.SMTP_HOST,
        port: int = settings.SMTP_PORT,
        user: str = settings.SMTP_USER,
        password: str = settings.SMTP_PASSWORD,
        starttls: bool = settings.SMTP_STARTTLS,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.starttls = starttls

    def _build_message(self, to: str, subject: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart()
        message["From"] = self.user
        message["To"] = to
        message["Subject"] = subject
        message.attach(MIMEText(html, "html"))
        return message

    def _deliver(self, message: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.starttls:
                server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(message)

    async def send(self, to: str, subject: str, html: str) -> bool:
        message = self._build_message(to, subject, html)
        try:
            await run_in_threadpool(self._deliver, message)
        except (smtplib.SMTPException, OSError):
            logger.exception(f"Failed to send mail to {to} ({subject!r})")
            return False
        logger.info(f"Mail sent to {to} ({subject!r})")
        return True


_mailer = Mailer()


def get_mailer() -> Mailer:
    return _mailer


MailerDep = Annotated[Mailer, Depends(get_mailer)]


def activation_email(username: str, link: str) -> tuple[str, str]:
    subject = f"Confirmation your email on {settings.CLIENT_HOST}"
    html = (
        "<div>"
        f"<h1>Hello, {username}! Follow the link to activate your account on {settings.CLIENT_HOST}!</h1>"
        f'<a href="{link}">{link}</a>'
        "</div>"
    )
    return subject, html


def password_reset_email(username: str, link: str) -> tuple[str, str]:
    subject = f"Change your password on {settings.CLIENT_HOST}"
    html = (
        "<div>"
        f"<h1>Hello, {username}! Follow the link to change your password on {settings.CLIENT_HOST}!</h1>"
        f'<a href="{link}">{link}</a>'
        "</div>"
    )
    return subject, html
