from django.contrib import admin

from automations.models import Automation, Message


@admin.register(Automation)
class AutomationAdmin(admin.ModelAdmin):
    list_display = ["name", "studio", "trigger", "channel", "status", "total_sent", "total_delivered"]
    list_filter = ["status", "trigger", "channel", "studio"]
    search_fields = ["name"]
    readonly_fields = ["total_sent", "total_delivered"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ["to_address", "channel", "status", "automation", "sent_at", "created_at"]
    list_filter = ["status", "channel", "studio"]
    search_fields = ["to_address", "thread_id", "external_id"]
