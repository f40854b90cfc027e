import smtplib
from datetime import datetime, timezone
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

import requests

from app.core.config import settings
from app.core.exceptions import NotificationChannelError
from app.core.logging import get_logger
from app.schemas.alert import DeliveryResult, PriceAlertPayload

logger = get_logger(__name__)


def render_email(payload: PriceAlertPayload) -> tuple:
    """Build the subject and HTML body of a price alert email."""
    currency = payload.currency
    subject = (
        f"✈️ Price Alert: {payload.origin} → {payload.destination} - "
        f"{currency} {payload.current_price:.2f}"
    )
    body = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #2563eb;">Price Drop Alert!</h2>
      <p>Great news! The price for your flight has dropped below your target.</p>
      <div style="background: #f3f4f6; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <h3 style="margin-top: 0;">Flight Details</h3>
        <p><strong>Route:</strong> {payload.origin} → {payload.destination}</p>
        <p><strong>Departure:</strong> {payload.depart_date:%d %b %Y}</p>
        <p style="font-size: 24px; color: #10b981; margin: 10px 0;">
          <strong>Current Price: {currency} {payload.current_price:.2f}</strong>
        </p>
        <p style="color: #6b7280;">Your target: {currency} {payload.target_price:.2f}</p>
      </div>
      <p>Book now to secure this price!</p>
    </div>
    """
    return subject, body


class NotificationDispatcher:
    """
    Delivers price alerts by email and/or webhook.

    Each channel gets exactly one attempt and is independent of the other.
    Failures are logged and reported as False, never raised.
    """

    def __init__(
        self,
        smtp_server: Optional[str] = None,
        smtp_port: Optional[int] = None,
        sender: Optional[str] = None,
        password: Optional[str] = None,
        sender_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        # None means "read from settings now"
        self.smtp_server = smtp_server if smtp_server is not None else settings.SMTP_SERVER
        self.smtp_port = smtp_port if smtp_port is not None else settings.SMTP_PORT
        self.sender = sender if sender is not None else settings.EMAIL_SENDER
        self.password = (
            password if password is not None else settings.EMAIL_PASSWORD.get_secret_value()
        )
        self.sender_name = sender_name if sender_name is not None else settings.EMAIL_SENDER_NAME
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS

        if not self.email_configured:
            logger.warning(
                "Email credentials not configured. Email notifications disabled. "
                "Set EMAIL_SENDER and EMAIL_PASSWORD."
            )

    @property
    def email_configured(self) -> bool:
        return bool(self.smtp_server and self.sender and self.password)

    def send_email(self, to: str, payload: PriceAlertPayload) -> None:
        """Send a price alert email; raises NotificationChannelError on failure."""
        if not self.email_configured:
            raise NotificationChannelError("Email transport not configured", channel="email")

        subject, body = render_email(payload)
        msg = MIMEMultipart()
        msg["From"] = f"{self.sender_name} <{self.sender}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "html"))

        try:
            if self.smtp_port == 465:
                server = smtplib.SMTP_SSL(self.smtp_server, self.smtp_port, timeout=self.timeout)
            else:
                server = smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=self.timeout)
                server.starttls()
            try:
                server.login(self.sender, self.password)
                server.sendmail(self.sender, to, msg.as_string())
            finally:
                server.quit()
        except Exception as e:
            raise NotificationChannelError(f"Error sending email: {e}", channel="email")

    def send_webhook(self, url: str, payload: PriceAlertPayload) -> None:
        """POST a price alert to a webhook; raises NotificationChannelError on failure."""
        body = {
            "type": "price_alert",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": payload.model_dump(mode="json"),
        }
        try:
            response = requests.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise NotificationChannelError(f"Error sending webhook: {e}", channel="webhook")

        if not 200 <= response.status_code < 300:
            raise NotificationChannelError(
                f"Webhook responded with {response.status_code}", channel="webhook"
            )

    def send_alert(
        self,
        email: Optional[str],
        webhook_url: Optional[str],
        payload: PriceAlertPayload,
    ) -> DeliveryResult:
        """Send the alert to every configured channel and report per-channel success."""
        result = DeliveryResult()

        if email:
            try:
                self.send_email(email, payload)
                result.email_delivered = True
                logger.info(f"✅ Price alert email sent to {email}")
            except NotificationChannelError as e:
                logger.error(f"❌ {e.detail}", extra={"channel": e.channel, "recipient": email})

        if webhook_url:
            try:
                self.send_webhook(webhook_url, payload)
                result.webhook_delivered = True
                logger.info(f"✅ Webhook sent to {webhook_url}")
            except NotificationChannelError as e:
                logger.error(f"❌ {e.detail}", extra={"channel": e.channel, "url": webhook_url})

        return result
