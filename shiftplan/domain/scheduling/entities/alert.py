"""Alert entity raised by the alert synthesizer."""

from datetime import datetime

from ...shared.base import Entity
from ..value_objects.enums import AlertSeverity, AlertType, SuggestedAction


class Alert(Entity):
    """An operational alert with the remediation actions a host can offer."""

    type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    affected_entities: tuple[str, ...] = ()
    suggested_actions: tuple[SuggestedAction, ...] = ()
    created_at: datetime
    is_resolved: bool = False

    @property
    def sort_key(self) -> tuple[int, str]:
        """Most severe first, then by id."""
        return (-self.severity.rank, self.id)

    def resolve(self) -> "Alert":
        return self.with_changes(is_resolved=True)
