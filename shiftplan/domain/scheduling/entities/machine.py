"""Machine entity for production resources and their daily working window."""

from datetime import time

from pydantic import Field, computed_field, field_validator, model_validator

from ...shared.base import Entity
from ..value_objects.enums import MachineStatus
from ..value_objects.shift_window import (
    CustomWindow,
    FixedWindow,
    ShiftWindow,
    parse_clock,
    parse_shift_timing,
)


class Machine(Entity):
    """
    Machine entity representing production equipment.

    ``shift_timing`` is the daily working window; ``working_hours`` is always
    derived from it, so any change to the timing is reflected immediately.
    ``efficiency`` (percent) scales how long work takes on this machine.
    """

    name: str = ""
    machine_type: str = ""
    shift_timing: ShiftWindow = Field(
        default_factory=lambda: FixedWindow(start=time(9, 0), end=time(17, 0))
    )
    custom_start: time | None = None
    status: MachineStatus = MachineStatus.ACTIVE
    efficiency: float = Field(default=100.0, gt=0, le=100)
    operator_id: str | None = None
    shift_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _parse_shift_timing(cls, data):
        """Accept the ``"HH:MM-HH:MM"`` / ``"Custom"`` string form."""
        if not isinstance(data, dict):
            return data
        data = dict(data)

        custom_start = data.get("custom_start")
        if isinstance(custom_start, str):
            custom_start = parse_clock(custom_start)
            data["custom_start"] = custom_start

        timing = data.get("shift_timing")
        if isinstance(timing, str):
            data["shift_timing"] = parse_shift_timing(timing, custom_start)
        elif custom_start is not None and _is_custom(timing):
            data["shift_timing"] = CustomWindow.for_start(custom_start)
        return data

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        return v.strip()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def working_hours(self) -> float:
        """Working hours per day derived from the shift timing."""
        return self.shift_timing.working_hours

    @property
    def capacity_minutes(self) -> float:
        """Nominal capacity per working day in minutes."""
        return self.working_hours * 60

    @property
    def is_available_for_work(self) -> bool:
        """Check if machine can take newly placed work."""
        return self.status.is_available_for_work

    @property
    def throughput_factor(self) -> float:
        """Efficiency as a 0-1 multiplier."""
        return self.efficiency / 100

    @property
    def timing_label(self) -> str:
        """Legacy string form of the shift timing."""
        return str(self.shift_timing)

    def __str__(self) -> str:
        return f"{self.name or self.id} ({self.timing_label}, {self.status.value})"


def _is_custom(timing) -> bool:
    if isinstance(timing, CustomWindow):
        return True
    return isinstance(timing, dict) and timing.get("kind") == "custom"
