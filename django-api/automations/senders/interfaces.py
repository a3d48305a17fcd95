"""Channel sender interfaces.

Senders report delivery outcomes as data; they do not raise for provider failures.
"""

from abc import ABC, abstractmethod

from automations.domain.models import DeliveryResult


class EmailSender(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, html: str, text: str) -> DeliveryResult:
        ...


class SmsSender(ABC):
    @abstractmethod
    def send(self, to: str, body: str) -> DeliveryResult:
        ...
