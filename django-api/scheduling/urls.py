from django.urls import path

from scheduling.handlers import BlockedTimeListView, BulkDeleteView, BulkReassignView, ScheduleView

urlpatterns = [
    path("studio/schedule", ScheduleView.as_view(), name="schedule"),
    path("studio/schedule/bulk-delete", BulkDeleteView.as_view(), name="schedule-bulk-delete"),
    path("studio/schedule/bulk-reassign", BulkReassignView.as_view(), name="schedule-bulk-reassign"),
    path("studio/blocked-times", BlockedTimeListView.as_view(), name="blocked-time-list"),
]
