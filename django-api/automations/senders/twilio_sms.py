"""SMS delivery through the Twilio REST API."""

import logging

import httpx
from django.conf import settings

from automations.domain.models import DeliveryResult
from automations.senders.interfaces import SmsSender

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"


class TwilioSmsSender(SmsSender):
    def __init__(
        self,
        account_sid: str | None,
        auth_token: str | None,
        from_number: str | None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "TwilioSmsSender":
        return cls(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            from_number=settings.TWILIO_FROM_NUMBER,
            timeout=settings.TWILIO_TIMEOUT_SECONDS,
        )

    def send(self, to: str, body: str) -> DeliveryResult:
        if not (self._account_sid and self._auth_token and self._from_number):
            logger.warning("SMS to %s not sent: Twilio is not configured", to)
            return DeliveryResult(success=False, error="SMS provider not configured")

        # Twilio only accepts E.164 numbers
        if not to.startswith("+"):
            return DeliveryResult(success=False, error="Phone number must be in E.164 format")

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    TWILIO_MESSAGES_URL.format(account_sid=self._account_sid),
                    auth=(self._account_sid, self._auth_token),
                    data={"To": to, "From": self._from_number, "Body": body},
                )
        except httpx.HTTPError as exc:
            logger.error("SMS to %s failed: %s", to, exc)
            return DeliveryResult(success=False, error="SMS provider unreachable")

        if response.is_error:
            try:
                error = response.json().get("message") or "SMS send failed"
            except ValueError:
                error = "SMS send failed"
            logger.error("Twilio rejected SMS to %s: %s %s", to, response.status_code, error)
            return DeliveryResult(success=False, error=error)

        return DeliveryResult(success=True, message_id=response.json().get("sid"))
