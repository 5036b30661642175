"""
Outbound e-mail. Delivery is best-effort: every failure is logged and
swallowed so that a broken mail server never affects stock bookkeeping.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from jinja2 import Environment, PackageLoader, select_autoescape

from siminventory.config import settings

logger = logging.getLogger(__name__)

_env = Environment(
    loader=PackageLoader("siminventory", "templates"),
    autoescape=select_autoescape(["html"]),
)


def low_stock_snapshot(item) -> dict:
    """Plain values for the alert; the ORM session is gone when the task runs."""
    return {
        "name": item.name,
        "barcode": item.barcode,
        "quantity": item.quantity,
        "unit": item.unit,
        "reorder_level": item.reorder_level,
    }


def render_low_stock(snapshot: dict) -> str:
    return _env.get_template("email/low_stock.html").render(**snapshot)


def send_email(to: str, subject: str, html: str) -> bool:
    if not settings.SMTP_HOST:
        logger.info("SMTP not configured, skipping e-mail '%s' to %s", subject, to)
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.MAIL_FROM
    msg["To"] = to
    msg.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as server:
            server.starttls()
            if settings.SMTP_USER:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("E-mail '%s' to %s failed: %s", subject, to, e)
        return False
    logger.info("E-mail '%s' sent to %s", subject, to)
    return True


def send_low_stock_alert(snapshot: dict) -> bool:
    if not settings.LOW_STOCK_ALERTS or not settings.ADMIN_EMAIL:
        logger.info("Low stock alert for %s not sent (no recipient configured)", snapshot["name"])
        return False
    return send_email(
        settings.ADMIN_EMAIL,
        f"Low Stock Alert: {snapshot['name']}",
        render_low_stock(snapshot),
    )
