"""
Domain Exceptions and Error Taxonomy

The scheduling engine reports infeasible dates, broken delivery promises,
degraded configuration and overtime policy violations as result data, tagged
with an ``ErrorType``. Invalid input records fail pydantic validation; the
exceptions here cover calendars without working time and lookups of entities
that do not exist.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    INFEASIBLE = "infeasible"
    CONFLICT = "conflict"
    INVALID_CONFIGURATION = "invalid_configuration"
    UNRESOLVED_MACHINE = "unresolved_machine"
    POLICY_VIOLATION = "policy_violation"
    NOT_FOUND = "not_found"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, str | int | float | bool | None] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, str | int | float | bool | None]]:
        """Convert error to dictionary for host consumption."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidConfigurationError(DomainError):
    """Raised when master data cannot be used for scheduling."""

    def __init__(
        self,
        message: str,
        details: dict[str, str | int | float | bool | None] | None = None,
    ) -> None:
        super().__init__(message, ErrorType.INVALID_CONFIGURATION, details)


class NoWorkingTimeError(InvalidConfigurationError):
    """Raised when a calendar yields no working time within its search limit."""

    def __init__(self, search_limit_days: int, from_date: str) -> None:
        super().__init__(
            f"No working time found within {search_limit_days} days of {from_date}",
            {"search_limit_days": search_limit_days, "from_date": from_date},
        )
        self.search_limit_days = search_limit_days


class ScheduleItemNotFoundError(DomainError):
    """Raised when a schedule item is not found."""

    def __init__(self, item_id: str) -> None:
        super().__init__(
            f"Schedule item not found: {item_id}",
            ErrorType.NOT_FOUND,
            {"item_id": item_id, "entity_type": "schedule_item"},
        )
        self.item_id = item_id
