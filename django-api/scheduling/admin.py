from django.contrib import admin

from scheduling.models import Booking, ClassSession, TeacherBlockedTime


class BookingInline(admin.TabularInline):
    model = Booking
    extra = 0


@admin.register(ClassSession)
class ClassSessionAdmin(admin.ModelAdmin):
    list_display = ["class_type", "teacher", "location", "start_time", "end_time", "capacity"]
    list_filter = ["studio", "teacher", "location"]
    search_fields = ["recurring_group_id"]
    inlines = [BookingInline]


@admin.register(TeacherBlockedTime)
class TeacherBlockedTimeAdmin(admin.ModelAdmin):
    list_display = ["teacher", "start_time", "end_time", "reason"]
    list_filter = ["teacher__studio"]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ["client", "class_session", "status", "created_at", "cancelled_at"]
    list_filter = ["status", "studio"]
