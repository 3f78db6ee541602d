import asyncio
import smtplib
from email.mime.text import MIMEText

from config.env_config import CONTACT_NOTIFY_EMAIL, SMTP_HOST, SMTP_PASSWORD, SMTP_PORT, SMTP_USERNAME
from config.log_config import get_logger

logger = get_logger("send_mail")


def _send(receiver_email: str, subject: str, body: str, reply_to: str | None = None) -> None:
    msg = MIMEText(body)
    msg['Subject'] = subject
    msg['From'] = SMTP_USERNAME or receiver_email
    msg['To'] = receiver_email
    if reply_to:
        msg['Reply-To'] = reply_to

    with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=10) as server:
        server.starttls()
        if SMTP_USERNAME and SMTP_PASSWORD:
            server.login(SMTP_USERNAME, SMTP_PASSWORD)
        server.sendmail(msg['From'], receiver_email, msg.as_string())


async def send_contact_notification(message) -> bool:
    """Email a stored contact message to the site owner.

    Returns False when SMTP is not configured or sending failed; the message
    itself is already stored at this point.
    """
    if not SMTP_HOST or not CONTACT_NOTIFY_EMAIL:
        return False

    subject = f"Portfolio contact from {message.name}"
    body = f"{message.message}\n\n-- {message.name} <{message.email}>"

    try:
        await asyncio.to_thread(_send, CONTACT_NOTIFY_EMAIL, subject, body, str(message.email))
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Error sending contact notification: {e}")
        return False

    logger.info(f"Contact notification sent to {CONTACT_NOTIFY_EMAIL}")
    return True
