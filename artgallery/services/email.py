"""SMTP email notifications for orders and the contact form.

Sending never raises: every public method returns ``True``/``False`` and
logs the failure, so callers can decide whether a failed send matters.
"""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from functools import lru_cache

from artgallery.config import Settings, get_settings
from artgallery.models import Order

logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    "new": "We have received your inquiry and will review it shortly.",
    "pending": "Your order is being processed.",
    "completed": "Your order has been completed. Thank you for your purchase!",
    "rejected": "Unfortunately we are unable to fulfil this order. Please contact us for details.",
}


class EmailService:
    """Plain-text mail sender over SMTP."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @property
    def configured(self) -> bool:
        return bool(self._settings.smtp_host)

    def send(self, to: str, subject: str, body: str) -> bool:
        if not self.configured:
            logger.warning("Email not sent to %s: SMTP host is not configured", to)
            return False
        if not to:
            logger.error("Email not sent: missing recipient")
            return False

        s = self._settings
        msg = EmailMessage()
        msg["From"] = formataddr((s.email_from_name, s.email_from))
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            smtp_cls = smtplib.SMTP_SSL if s.smtp_use_ssl else smtplib.SMTP
            with smtp_cls(s.smtp_host, s.smtp_port, timeout=10) as server:
                if not s.smtp_use_ssl:
                    server.starttls()
                if s.smtp_username and s.smtp_password:
                    server.login(s.smtp_username, s.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to, exc)
            return False

        logger.info("Email sent to %s: %s", to, subject)
        return True

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def send_order_confirmation(self, order: Order) -> bool:
        body = (
            f"Dear {order.customer.name},\n\n"
            f"Thank you for your interest in \"{order.painting_details.title}\".\n"
            f"Order number: {order.order_number}\n"
            f"Status: {order.status}\n\n"
            f"{_STATUS_MESSAGES[order.status]}\n\n"
            f"Best regards,\n{self._settings.email_from_name}"
        )
        return self.send(
            order.customer.email, f"Order Inquiry Received - {self._settings.email_from_name}", body
        )

    def send_order_notification(self, order: Order) -> bool:
        c = order.customer
        body = (
            "New order received:\n\n"
            f"Order ID: {order.id}\n"
            f"Painting: {order.painting_details.title}\n"
            f"Customer: {c.name}\n"
            f"Email: {c.email}\n"
            f"Phone: {c.phone}\n"
            f"Message: {order.message or 'None'}\n"
            f"Price: {order.total_amount:,.2f}\n"
        )
        return self.send(
            self._settings.notification_email,
            f"New Order Inquiry - {order.painting_details.title}",
            body,
        )

    def send_order_status_update(self, order: Order, previous_status: str) -> bool:
        body = (
            f"Dear {order.customer.name},\n\n"
            "Your order inquiry status has been updated:\n"
            f"- Order number: {order.order_number}\n"
            f"- Painting: {order.painting_details.title or 'Your painting'}\n"
            f"- Previous Status: {previous_status}\n"
            f"- New Status: {order.status}\n\n"
            f"{_STATUS_MESSAGES[order.status]}\n\n"
            f"Best regards,\n{self._settings.email_from_name}"
        )
        return self.send(
            order.customer.email, f"Order Status Update - {self._settings.email_from_name}", body
        )

    def send_contact_message(self, name: str, email: str, subject: str, message: str) -> bool:
        body = (
            "New contact form submission:\n\n"
            f"Name: {name}\nEmail: {email}\nSubject: {subject}\n\n"
            f"Message:\n{message}\n"
        )
        return self.send(self._settings.notification_email, f"New Contact Form: {subject}", body)

    def send_contact_acknowledgement(self, name: str, email: str, subject: str) -> bool:
        body = (
            f"Dear {name},\n\n"
            f"Thank you for reaching out. We have received your message regarding \"{subject}\".\n"
            "We will get back to you as soon as possible.\n\n"
            f"Best regards,\n{self._settings.email_from_name}"
        )
        return self.send(email, f"Thank you for contacting {self._settings.email_from_name}", body)


@lru_cache()
def get_email_service() -> EmailService:
    return EmailService(get_settings())
