"""Scheduling issues reported alongside a generated schedule."""

from ...shared.base import ValueObject
from ...shared.exceptions import ErrorType


class SchedulingIssue(ValueObject):
    """
    A record the generator could not place as configured.

    Issues never stop generation: the affected order or step is skipped or
    degraded and the rest of the backlog is still scheduled.
    """

    kind: ErrorType
    message: str
    order_id: str | None = None
    process_step: int | None = None
    machine_id: str | None = None

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"
