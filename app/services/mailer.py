"""Email notifications for verification and password reset."""

import logging
from email.message import EmailMessage
from pathlib import Path

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.config import get_settings

logger = logging.getLogger("auth_service")

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

VERIFY_EMAIL = "verify_email"
VERIFY_EMAIL_RESEND = "verify_email_resend"
RESET_PASSWORD = "reset_password"
RESET_PASSWORD_CONFIRM = "reset_password_confirm"

SUBJECTS = {
    VERIFY_EMAIL: "Verify your email address",
    VERIFY_EMAIL_RESEND: "Verify your email address (new link)",
    RESET_PASSWORD: "Reset your password",
    RESET_PASSWORD_CONFIRM: "Your password has been changed",
}


class EmailService:
    """Renders notification emails and hands them to the configured backend."""

    def __init__(self) -> None:
        settings = get_settings()
        self.backend = settings.EMAIL_BACKEND
        self.from_email = settings.EMAIL_FROM
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_username = settings.SMTP_USERNAME
        self.smtp_password = settings.SMTP_PASSWORD
        self.smtp_use_tls = settings.SMTP_USE_TLS
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, kind: str, name: str | None, link: str) -> tuple[str, str]:
        """Render (subject, body) for a notification kind."""
        template = self.env.get_template(f"{kind}.txt")
        body = template.render(name=name or "there", link=link)
        return SUBJECTS[kind], body

    def build_message(self, kind: str, to_email: str, name: str | None, link: str) -> EmailMessage:
        subject, body = self.render(kind, name, link)
        message = EmailMessage()
        message["From"] = self.from_email
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)
        return message

    async def send(self, kind: str, to_email: str, name: str | None, link: str) -> None:
        """Deliver one notification. Delivery errors are logged, not raised."""
        message = self.build_message(kind, to_email, name, link)

        if self.backend != "smtp":
            logger.info("EMAIL %s to %s: %s", kind, to_email, link)
            return

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_username,
                password=self.smtp_password,
                start_tls=self.smtp_use_tls,
            )
            logger.info("EMAIL %s sent to %s", kind, to_email)
        except (aiosmtplib.SMTPException, OSError):
            logger.exception("EMAIL %s to %s failed", kind, to_email)

    async def send_email_verification(self, to_email: str, name: str | None, link: str) -> None:
        await self.send(VERIFY_EMAIL, to_email, name, link)

    async def resend_email_verification(self, to_email: str, name: str | None, link: str) -> None:
        await self.send(VERIFY_EMAIL_RESEND, to_email, name, link)

    async def send_reset_password(self, to_email: str, name: str | None, link: str) -> None:
        await self.send(RESET_PASSWORD, to_email, name, link)

    async def send_reset_password_confirmation(self, to_email: str, name: str | None, link: str) -> None:
        await self.send(RESET_PASSWORD_CONFIRM, to_email, name, link)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get singleton email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
