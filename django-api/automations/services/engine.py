"""Automation engine: evaluates every active automation and sends at most once per key."""

import logging
from datetime import UTC, datetime

from automations.domain.models import (
    Automation,
    AutomationRunResult,
    Candidate,
    Channel,
    EngineSettings,
    OutboundMessage,
    RunSummary,
    SendOutcome,
    Trigger,
)
from automations.domain.templates import render_template, text_to_html
from automations.senders.interfaces import EmailSender, SmsSender
from automations.services.triggers import TRIGGER_SELECTORS
from automations.stores.interfaces import AutomationStore

logger = logging.getLogger(__name__)

# Triggers whose purpose is to get the client to book; a booking made after
# the trigger fired makes the message moot.
STOP_ON_BOOKING_TRIGGERS = frozenset(
    {
        Trigger.WELCOME,
        Trigger.CLIENT_INACTIVE,
        Trigger.BIRTHDAY,
        Trigger.MEMBERSHIP_EXPIRING,
        Trigger.BOOKING_CANCELLED,
    }
)


class AutomationEngine:
    def __init__(
        self,
        store: AutomationStore,
        email_sender: EmailSender,
        sms_sender: SmsSender,
        settings: EngineSettings | None = None,
    ) -> None:
        self._store = store
        self._email_sender = email_sender
        self._sms_sender = sms_sender
        self._settings = settings or EngineSettings()

    def run(self, now: datetime | None = None) -> RunSummary:
        """Process every ACTIVE automation across all studios once."""
        now = now or datetime.now(UTC)
        automations = self._store.list_active_automations()
        summary = RunSummary(ran_at=now, total_automations=len(automations))
        for automation in automations:
            summary.summary.append(self.run_automation(automation, now))
        return summary

    def run_automation(self, automation: Automation, now: datetime) -> AutomationRunResult:
        result = AutomationRunResult(
            automation_id=automation.id,
            trigger=automation.trigger,
            channel=automation.channel,
        )
        select = TRIGGER_SELECTORS[automation.trigger]
        try:
            candidates = select(automation, self._store, now, self._settings)
        except Exception:
            logger.exception("Candidate selection failed for automation %s", automation.id)
            return result

        for candidate in candidates:
            try:
                outcome = self.process(automation, candidate)
            except Exception:
                logger.exception(
                    "Automation %s failed for key %s", automation.id, candidate.idempotency_key
                )
                outcome = SendOutcome.ERROR
            result.record(outcome)

        logger.info(
            "Automation %s (%s/%s): processed=%d sent=%d skipped=%d duplicates=%d",
            automation.id,
            automation.trigger.value,
            automation.channel.value,
            result.processed,
            result.sent,
            result.skipped,
            result.duplicates,
        )
        return result

    def process(self, automation: Automation, candidate: Candidate) -> SendOutcome:
        if self._stopped_by_booking(automation, candidate):
            return SendOutcome.STOPPED_BY_BOOKING
        return self.send(automation, candidate)

    def send(self, automation: Automation, candidate: Candidate) -> SendOutcome:
        policy = self._settings.dedupe_policy
        if self._store.message_exists(
            automation.studio_id, automation.id, candidate.idempotency_key, policy
        ):
            return SendOutcome.DUPLICATE

        subject = render_template(automation.subject, candidate.vars) if automation.subject else None
        body = render_template(automation.body, candidate.vars)
        html_body = (
            render_template(automation.html_body, candidate.vars) if automation.html_body else None
        )

        client = candidate.client
        if automation.channel is Channel.EMAIL:
            to_address = (client.email or "").strip()
            if not to_address:
                return SendOutcome.NO_EMAIL
            from_address = f"automation@{automation.studio_id}.local"
        else:
            to_address = (client.phone or "").strip()
            if not to_address:
                return SendOutcome.NO_PHONE
            from_address = "automation"

        message_id = self._store.claim_message(
            OutboundMessage(
                studio_id=automation.studio_id,
                automation_id=automation.id,
                client_id=client.id,
                channel=automation.channel,
                subject=subject,
                body=body,
                html_body=html_body,
                from_address=from_address,
                from_name=f"{automation.studio_name} Automations",
                to_address=to_address,
                to_name=client.full_name,
                thread_id=candidate.idempotency_key,
            ),
            policy,
        )
        if message_id is None:
            return SendOutcome.DUPLICATE

        if automation.channel is Channel.EMAIL:
            delivery = self._email_sender.send(
                to=to_address,
                subject=subject or automation.name,
                html=html_body or text_to_html(body),
                text=body,
            )
        else:
            delivery = self._sms_sender.send(to=to_address, body=body)

        if not delivery.success:
            reason = delivery.error or f"{automation.channel.value} send failed"
            self._store.mark_failed(message_id, reason)
            logger.warning(
                "Automation %s send failed for key %s: %s",
                automation.id,
                candidate.idempotency_key,
                reason,
            )
            return SendOutcome.SEND_FAILED

        self._store.mark_sent(message_id, delivery.message_id, datetime.now(UTC))
        self._store.increment_counters(automation.id)
        return SendOutcome.SENT

    def _stopped_by_booking(self, automation: Automation, candidate: Candidate) -> bool:
        if not automation.stop_on_booking or automation.trigger not in STOP_ON_BOOKING_TRIGGERS:
            return False
        return self._store.client_booked_since(
            automation.studio_id, candidate.client.id, candidate.triggered_at
        )
