"""Serializers rendering automation run results."""

from rest_framework import serializers


class AutomationRunResultSerializer(serializers.Serializer):
    automationId = serializers.UUIDField(source="automation_id")
    trigger = serializers.CharField(source="trigger.value")
    channel = serializers.CharField(source="channel.value")
    processed = serializers.IntegerField()
    sent = serializers.IntegerField()
    skipped = serializers.IntegerField()
    duplicates = serializers.IntegerField()


class RunSummarySerializer(serializers.Serializer):
    ranAt = serializers.DateTimeField(source="ran_at")
    totalAutomations = serializers.IntegerField(source="total_automations")
    summary = AutomationRunResultSerializer(many=True)
