from django.urls import path

from automations.handlers import AutomationRunView

urlpatterns = [
    path("internal/automations/run", AutomationRunView.as_view(), name="automation-run"),
]
