import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.platform.config import get_settings
from app.platform.logger import get_logger

logger = get_logger("email_service")

template_dir = Path(__file__).resolve().parents[2] / "features" / "waitlist" / "template"

env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html"]),
)


def send_email(to_email: str, subject: str, body: str):
    """Send an HTML email over SMTP. Skipped when mail is disabled."""
    settings = get_settings()
    if not settings.MAIL_ENABLED:
        logger.info(f"Mail disabled, not sending '{subject}' to {to_email}")
        return

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.MAIL_FROM_NAME, settings.MAIL_FROM_ADDRESS))
    msg["To"] = to_email

    msg.attach(MIMEText(body, "html"))

    port = settings.MAIL_PORT
    if port == 465:
        context = ssl.create_default_context()
        with smtplib.SMTP_SSL(settings.MAIL_HOST, port, context=context) as server:
            server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
            server.sendmail(settings.MAIL_FROM_ADDRESS, to_email, msg.as_string())
    else:
        with smtplib.SMTP(settings.MAIL_HOST, port) as server:
            server.ehlo()

            if str(settings.MAIL_ENCRYPTION).upper() in ["TLS", "TRUE"]:
                server.starttls()
                server.ehlo()

            if settings.MAIL_USERNAME:
                server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
            server.sendmail(settings.MAIL_FROM_ADDRESS, to_email, msg.as_string())

    logger.info(f"Email '{subject}' sent to {to_email}")
