"""SMTP email service."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    """Return True if all required SMTP settings are present."""
    from hatchplan.models import Settings

    return all(
        Settings.get(k)
        for k in ("smtp_host", "smtp_from_email")
    )


def send_email(to: list[str], subject: str, body_html: str, body_text: str) -> None:
    """Send an email via SMTP. Raises on failure."""
    from hatchplan.models import Settings

    host = Settings.get("smtp_host", "")
    port = int(Settings.get("smtp_port", "587") or "587")
    user = Settings.get("smtp_user", "")
    password = Settings.get("smtp_password", "")
    from_email = Settings.get("smtp_from_email", "")
    use_tls = Settings.get("smtp_use_tls", "true").lower() != "false"

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_email
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(body_text, "plain"))
    msg.attach(MIMEText(body_html, "html"))

    with smtplib.SMTP(host, port, timeout=15) as smtp:
        if use_tls:
            smtp.starttls()
        if user and password:
            smtp.login(user, password)
        smtp.sendmail(from_email, to, msg.as_string())

    logger.info("Email sent to %s: %s", ", ".join(to), subject)


def send_reminder_digest(to: list[str], today, reminders) -> None:
    """Send the list of incubator chores due on *today*."""
    subject = f"Incubator reminders for {today:%d/%m/%Y}"
    body_text = "\n".join(
        [f"Due today ({today.isoformat()}):", ""]
        + [f"- {r.message}" for r in reminders]
    )
    items = "\n".join(f"<li>{escape(r.message)}</li>" for r in reminders)
    body_html = f"""
<p>Due today ({today.isoformat()}):</p>
<ul>
{items}
</ul>
"""
    send_email(to, subject, body_html, body_text)
