"""Builds the automation engine from Django settings."""

from datetime import timedelta

from django.conf import settings

from automations.domain.models import DedupePolicy, EngineSettings
from automations.senders.django_mail import DjangoEmailSender
from automations.senders.twilio_sms import TwilioSmsSender
from automations.services.engine import AutomationEngine
from automations.stores.django_store import DjangoAutomationStore


def engine_settings() -> EngineSettings:
    return EngineSettings(
        window=timedelta(minutes=settings.AUTOMATION_WINDOW_MINUTES),
        lookback=timedelta(days=settings.AUTOMATION_LOOKBACK_DAYS),
        reminder_horizon=timedelta(hours=settings.AUTOMATION_REMINDER_HORIZON_HOURS),
        dedupe_policy=DedupePolicy(settings.AUTOMATION_DEDUPE_POLICY),
    )


def build_engine() -> AutomationEngine:
    return AutomationEngine(
        store=DjangoAutomationStore(),
        email_sender=DjangoEmailSender(),
        sms_sender=TwilioSmsSender.from_settings(),
        settings=engine_settings(),
    )
