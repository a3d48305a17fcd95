from django.contrib import admin

from studios.models import ClassType, Client, Location, MembershipSubscription, Studio, Teacher


class TeacherInline(admin.TabularInline):
    model = Teacher
    extra = 0


class LocationInline(admin.TabularInline):
    model = Location
    extra = 0


@admin.register(Studio)
class StudioAdmin(admin.ModelAdmin):
    list_display = ["name", "timezone", "created_at"]
    search_fields = ["name"]
    inlines = [TeacherInline, LocationInline]


@admin.register(ClassType)
class ClassTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "studio", "duration_minutes"]
    list_filter = ["studio"]


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ["first_name", "last_name", "email", "phone", "studio", "created_at"]
    list_filter = ["studio"]
    search_fields = ["first_name", "last_name", "email"]


@admin.register(MembershipSubscription)
class MembershipSubscriptionAdmin(admin.ModelAdmin):
    list_display = ["client", "status", "current_period_end"]
    list_filter = ["status", "studio"]
