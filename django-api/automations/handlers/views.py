"""HTTP handlers for the automation worker endpoint."""

import hmac
import logging

from django.conf import settings
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from automations.handlers.serializers import RunSummarySerializer
from automations.services.engine import AutomationEngine
from automations.services.factory import build_engine

logger = logging.getLogger(__name__)


class AutomationRunView(APIView):
    """Handler for POST /api/internal/automations/run

    Called by a scheduler, not by studio users; guarded by a shared secret
    in the ``X-Automation-Secret`` header instead of studio authentication.
    """

    authentication_classes = []
    permission_classes = []

    def get_engine(self) -> AutomationEngine:
        return build_engine()

    def post(self, request: Request) -> Response:
        expected = settings.AUTOMATION_WORKER_SECRET
        if not expected:
            logger.error("AUTOMATION_WORKER_SECRET is not configured")
            return Response(
                {"error": "Worker secret not configured"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        provided = request.headers.get("X-Automation-Secret", "")
        if not hmac.compare_digest(provided.encode(), expected.encode()):
            return Response({"error": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            summary = self.get_engine().run()
        except Exception:
            logger.exception("Automation run failed")
            return Response(
                {"error": "Failed to run automations"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"ok": True, **RunSummarySerializer(summary).data})
