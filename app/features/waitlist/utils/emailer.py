from app.platform.logger import get_logger
from app.platform.services.email import env, send_email

logger = get_logger("waitlist_emailer")


def send_welcome_email(to_email: str, name: str, referral_code: str, referral_link: str, rank: int):
    """Runs as a background task; delivery problems are logged and dropped."""
    try:
        template = env.get_template("welcome_email.html")
        html_content = template.render(
            name=name, referral_code=referral_code, referral_link=referral_link, rank=rank
        )
        send_email(to_email, "You're on the list!", html_content)
    except Exception as e:
        logger.error(f"Failed to send welcome email to {to_email}: {e}")
