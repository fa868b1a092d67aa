import logging
import smtplib
from app.core.config import settings
from app.utils import mailer
from app.utils.email_templates import render_template

logger = logging.getLogger(__name__)


class EmailService:
    """
    Transactional emails.

    Delivery problems are logged and reported as False; they never propagate
    to the request that triggered the email.
    """

    def send_password_reset_email(self, email: str, reset_token: str, name: str) -> bool:
        reset_link = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={reset_token}"
        html_body = render_template("reset_password", name=name, reset_link=reset_link)
        return self._deliver(email, "Reset Your Password", html_body)

    def send_welcome_email(self, email: str, first_name: str) -> bool:
        login_link = f"{settings.FRONTEND_URL.rstrip('/')}/login"
        html_body = render_template("welcome", name=first_name, login_link=login_link)
        return self._deliver(email, "Welcome to Our Platform", html_body)

    @staticmethod
    def _deliver(to: str, subject: str, html_body: str) -> bool:
        try:
            mailer.send_email(to, subject, html_body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{subject}' to {to}: {str(e)}")
            return False
        return True


email_service = EmailService()
