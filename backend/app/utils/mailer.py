import logging
import smtplib
from email.message import EmailMessage
from app.core.config import settings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10


def build_message(to: str, subject: str, html_body: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = settings.EMAIL_FROM
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML capable email client.")
    message.add_alternative(html_body, subtype="html")
    return message


def send_email(to: str, subject: str, html_body: str) -> None:
    """Send an HTML email over SMTP. Raises smtplib.SMTPException / OSError on failure."""
    if not settings.EMAIL_ENABLED:
        logger.info(f"Email sending disabled, skipping '{subject}' to {to}")
        return

    message = build_message(to, subject, html_body)

    # Port 465 is implicit TLS; anything else starts plain and upgrades
    if settings.EMAIL_PORT == 465:
        server = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=SMTP_TIMEOUT_SECONDS)
    else:
        server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=SMTP_TIMEOUT_SECONDS)

    with server:
        if settings.EMAIL_PORT != 465 and settings.EMAIL_USE_TLS:
            server.starttls()
        if settings.EMAIL_USER:
            server.login(settings.EMAIL_USER, settings.EMAIL_PASSWORD)
        server.send_message(message)

    logger.info(f"Email '{subject}' sent to {to}")
