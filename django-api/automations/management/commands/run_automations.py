import json

from django.core.management.base import BaseCommand

from automations.handlers.serializers import RunSummarySerializer
from automations.services.factory import build_engine


class Command(BaseCommand):
    help = "Run one pass of every active automation and print the run summary as JSON."

    def handle(self, *args, **options):
        summary = build_engine().run()
        payload = {"ok": True, **RunSummarySerializer(summary).data}
        self.stdout.write(json.dumps(payload, indent=2, default=str))
