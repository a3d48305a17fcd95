from scheduling.handlers.views import (
    BlockedTimeListView,
    BulkDeleteView,
    BulkReassignView,
    ScheduleView,
)

__all__ = [
    "BlockedTimeListView",
    "BulkDeleteView",
    "BulkReassignView",
    "ScheduleView",
]
