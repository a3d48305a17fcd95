from automations.domain.models import (
    Automation,
    AutomationRunResult,
    BookingRecord,
    Candidate,
    Channel,
    DedupePolicy,
    DeliveryResult,
    EngineSettings,
    OutboundMessage,
    Recipient,
    RunSummary,
    SendOutcome,
    SubscriptionRecord,
    Trigger,
)
from automations.domain.templates import date_label, render_template, text_to_html, time_label

__all__ = [
    "Automation",
    "AutomationRunResult",
    "BookingRecord",
    "Candidate",
    "Channel",
    "DedupePolicy",
    "DeliveryResult",
    "EngineSettings",
    "OutboundMessage",
    "Recipient",
    "RunSummary",
    "SendOutcome",
    "SubscriptionRecord",
    "Trigger",
    "date_label",
    "render_template",
    "text_to_html",
    "time_label",
]
