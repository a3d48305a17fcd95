from automations.handlers.views import AutomationRunView

__all__ = ["AutomationRunView"]
