from __future__ import annotations

from .controller import Notification, PortalState, ResultsPortalSession

__all__ = ["Notification", "PortalState", "ResultsPortalSession"]
