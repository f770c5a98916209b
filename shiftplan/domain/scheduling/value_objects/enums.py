"""Domain enums for scheduling."""

from enum import Enum


class Priority(str, Enum):
    """Sales order priority enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def numeric_value(self) -> int:
        """Get numeric value for priority comparison."""
        priority_map = {
            Priority.LOW: 1,
            Priority.MEDIUM: 2,
            Priority.HIGH: 3,
        }
        return priority_map[self]


class OrderStatus(str, Enum):
    """Sales order status enumeration."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    DELAYED = "delayed"
    CANCELLED = "cancelled"

    @property
    def is_schedulable(self) -> bool:
        """Orders that still need machine time."""
        return self not in {OrderStatus.COMPLETED, OrderStatus.CANCELLED}


class MachineStatus(str, Enum):
    """Machine status enumeration."""

    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    BREAKDOWN = "breakdown"
    INACTIVE = "inactive"

    @property
    def is_available_for_work(self) -> bool:
        """Check if machine can take newly placed work."""
        return self == MachineStatus.ACTIVE

    @property
    def is_operational(self) -> bool:
        """Check if machine is able to run at all (not broken down)."""
        return self != MachineStatus.BREAKDOWN


class ScheduleItemStatus(str, Enum):
    """Schedule item status enumeration."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    DELAYED = "delayed"
    PAUSED = "paused"

    @property
    def is_held(self) -> bool:
        """Only scheduled items are re-placed; every other state keeps its times."""
        return self != ScheduleItemStatus.SCHEDULED


class SchedulingMode(str, Enum):
    """Whether a schedule item follows the generator or was pinned by a user."""

    AUTO = "auto"
    MANUAL = "manual"


class OvertimeStatus(str, Enum):
    """Overtime record status enumeration."""

    PLANNED = "planned"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class ProcessDelayType(str, Enum):
    """How soon the next process step may start after this one."""

    IMMEDIATE = "immediate"  # as soon as the first unit is out
    AFTER_COMPLETION = "after_completion"  # after the full batch
    FIXED_GAP = "fixed_gap"  # after the full batch plus a configured gap


class Weekday(str, Enum):
    """Days of the week, in ``date.weekday()`` order."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def index(self) -> int:
        """Get weekday index (0=Monday, 6=Sunday)."""
        return list(Weekday).index(self)

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        """Create Weekday from ``date.weekday()``."""
        return list(cls)[index]


class AlertType(str, Enum):
    """Alert type enumeration."""

    DELIVERY_RISK = "delivery_risk"
    CAPACITY_OVERLOAD = "capacity_overload"
    MACHINE_BREAKDOWN = "machine_breakdown"
    QUALITY_ISSUE = "quality_issue"


class AlertSeverity(str, Enum):
    """Alert severity enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Get numeric rank, most severe highest."""
        return list(AlertSeverity).index(self)


class SuggestedAction(str, Enum):
    """Remediation the host can offer for an alert."""

    RESCHEDULE = "reschedule"
    REDISTRIBUTE = "redistribute"
    MAINTENANCE = "maintenance"
    OVERTIME = "overtime"
    INSPECT_QUALITY = "inspect_quality"
