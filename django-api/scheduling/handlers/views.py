"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from scheduling.domain import StudioId, TeacherId
from scheduling.domain.errors import (
    BlockedTimeConflictError,
    DomainError,
    ErrorCode,
    InvalidReferenceError,
    NoValidOccurrencesError,
    ScheduleConflictError,
    SessionsHaveBookingsError,
)
from scheduling.handlers.serializers import (
    BlockedTimeSerializer,
    BulkReassignResultSerializer,
    BulkReassignSerializer,
    BulkTargetSerializer,
    ClassSessionSerializer,
    ConflictSerializer,
    RangeQuerySerializer,
    RecurringSeriesResultSerializer,
    SessionCreateSerializer,
    SkippedOccurrenceSerializer,
)
from scheduling.services.schedule_service import ScheduleService
from scheduling.stores.django_store import DjangoScheduleStore

_STATUS_BY_CODE = {
    ErrorCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_REFERENCE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.BLOCKED_TIME_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.SCHEDULE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.NO_VALID_OCCURRENCES: status.HTTP_409_CONFLICT,
    ErrorCode.SESSIONS_HAVE_BOOKINGS: status.HTTP_409_CONFLICT,
    ErrorCode.SESSIONS_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def error_response(error: DomainError) -> Response:
    """Map a domain error to a response carrying its structured detail."""
    body = {"error": error.message, "code": error.code.value}
    if isinstance(error, (BlockedTimeConflictError, ScheduleConflictError)):
        body["conflicts"] = ConflictSerializer(error.details, many=True).data
    elif isinstance(error, NoValidOccurrencesError):
        body["skipped"] = SkippedOccurrenceSerializer(error.details, many=True).data
    elif isinstance(error, SessionsHaveBookingsError):
        body["sessionsWithBookings"] = error.details[0]
    elif isinstance(error, InvalidReferenceError):
        body["fields"] = list(error.details)
    return Response(body, status=_STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST))


class StudioScopedView(APIView):
    """Base view resolving the caller's studio and the schedule service."""

    def get_service(self) -> ScheduleService:
        return ScheduleService(DjangoScheduleStore())

    def studio_id(self, request: Request) -> StudioId:
        return StudioId(request.user.studio_id)


class ScheduleView(StudioScopedView):
    """Handler for GET/POST /api/studio/schedule"""

    def get(self, request: Request) -> Response:
        query = RangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        sessions = self.get_service().list_sessions(
            self.studio_id(request),
            query.validated_data.get("start"),
            query.validated_data.get("end"),
        )
        return Response(ClassSessionSerializer(sessions, many=True).data)

    def post(self, request: Request) -> Response:
        payload = SessionCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        service = self.get_service()
        try:
            if payload.is_recurring:
                result = service.create_recurring_series(
                    self.studio_id(request), payload.to_spec(), payload.to_rule()
                )
                return Response(
                    RecurringSeriesResultSerializer(result).data, status=status.HTTP_201_CREATED
                )
            session = service.create_session(self.studio_id(request), payload.to_spec())
        except DomainError as exc:
            return error_response(exc)
        return Response(ClassSessionSerializer(session).data, status=status.HTTP_201_CREATED)


class BulkDeleteView(StudioScopedView):
    """Handler for POST /api/studio/schedule/bulk-delete"""

    def post(self, request: Request) -> Response:
        payload = BulkTargetSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            deleted = self.get_service().bulk_delete(self.studio_id(request), payload.to_target())
        except DomainError as exc:
            return error_response(exc)
        return Response({"deleted": deleted})


class BulkReassignView(StudioScopedView):
    """Handler for POST /api/studio/schedule/bulk-reassign"""

    def post(self, request: Request) -> Response:
        payload = BulkReassignSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            result = self.get_service().bulk_reassign(
                self.studio_id(request),
                payload.to_target(),
                teacher_id=payload.teacher_id,
                location_id=payload.location_id,
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(BulkReassignResultSerializer(result).data)


class BlockedTimeListView(StudioScopedView):
    """Handler for GET /api/studio/blocked-times"""

    def get(self, request: Request) -> Response:
        query = RangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        teacher_id = query.validated_data.get("teacher_id")
        try:
            blocked_times = self.get_service().list_blocked_times(
                self.studio_id(request),
                query.validated_data.get("start"),
                query.validated_data.get("end"),
                TeacherId(teacher_id) if teacher_id else None,
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(BlockedTimeSerializer(blocked_times, many=True).data)
