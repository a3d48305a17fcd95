"""Email delivery through Django's configured mail backend."""

import logging
from email.utils import make_msgid

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.core.mail.utils import DNS_NAME

from automations.domain.models import DeliveryResult
from automations.senders.interfaces import EmailSender

logger = logging.getLogger(__name__)


class DjangoEmailSender(EmailSender):
    def __init__(self, from_email: str | None = None) -> None:
        self._from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send(self, to: str, subject: str, html: str, text: str) -> DeliveryResult:
        message_id = make_msgid(domain=str(DNS_NAME))
        message = EmailMultiAlternatives(
            subject=subject,
            body=text,
            from_email=self._from_email,
            to=[to],
            headers={"Message-ID": message_id},
        )
        message.attach_alternative(html, "text/html")
        try:
            delivered = message.send(fail_silently=False)
        except Exception as exc:
            logger.error("Email to %s failed: %s", to, exc)
            return DeliveryResult(success=False, error=str(exc) or "Email send failed")
        if not delivered:
            return DeliveryResult(success=False, error="Email send failed")
        return DeliveryResult(success=True, message_id=message_id)
