"""Tenant resolution for studio-facing API requests.

Authentication mechanics live outside this service; the gateway in front of it
forwards the caller's studio in the ``X-Studio-Id`` header.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from rest_framework import authentication, exceptions
from rest_framework.request import Request

from studios.models import Studio

logger = logging.getLogger(__name__)

STUDIO_HEADER = "HTTP_X_STUDIO_ID"


@dataclass(frozen=True)
class StudioPrincipal:
    """Request principal bound to one studio."""

    studio_id: UUID
    studio_name: str

    @property
    def is_authenticated(self) -> bool:
        return True


class StudioHeaderAuthentication(authentication.BaseAuthentication):
    """Resolve the request's studio from the ``X-Studio-Id`` header."""

    def authenticate(self, request: Request):
        raw = request.META.get(STUDIO_HEADER)
        if not raw:
            return None

        try:
            studio_id = UUID(raw)
        except ValueError:
            raise exceptions.AuthenticationFailed("Invalid studio")

        studio = Studio.objects.filter(id=studio_id).only("id", "name").first()
        if studio is None:
            logger.warning("Rejected request for unknown studio %s", studio_id)
            raise exceptions.AuthenticationFailed("Invalid studio")

        return StudioPrincipal(studio_id=studio.id, studio_name=studio.name), None

    def authenticate_header(self, request: Request) -> str:
        return "Studio"
