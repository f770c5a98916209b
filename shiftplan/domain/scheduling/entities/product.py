"""Product entity and its process flow."""

from pydantic import Field, field_validator

from ...shared.base import Entity, ValueObject
from ..value_objects.enums import ProcessDelayType


class ProcessDelay(ValueObject):
    """
    Release policy on step N governing when step N+1 may run.

    ``gap_minutes`` is wall-clock time and is only used by ``fixed_gap``.
    """

    type: ProcessDelayType = ProcessDelayType.AFTER_COMPLETION
    gap_minutes: float = Field(default=0, ge=0)


class ProcessStep(ValueObject):
    """One machine operation in a product's process flow."""

    sequence: int = Field(ge=1)
    name: str = ""
    machine_id: str
    preferred_machines: tuple[str, ...] = ()
    cycle_time_per_part: float = Field(default=0, ge=0)
    setup_time: float = Field(default=0, ge=0)
    next_process_delay: ProcessDelay | None = None
    quality_check: bool = False

    @property
    def candidate_machine_ids(self) -> list[str]:
        """Primary machine first, then the preferred fallbacks without repeats."""
        seen = [self.machine_id]
        for machine_id in self.preferred_machines:
            if machine_id not in seen:
                seen.append(machine_id)
        return seen

    def work_minutes(self, quantity: int) -> float:
        """Nominal minutes for a batch, before machine efficiency."""
        return self.setup_time + quantity * self.cycle_time_per_part

    @property
    def release_policy(self) -> ProcessDelay:
        return self.next_process_delay or ProcessDelay()


class Product(Entity):
    """
    Product entity with an ordered process flow.

    Sequence numbers are unique; the flow is always stored in sequence order.
    """

    name: str = ""
    part_number: str = ""
    process_flow: tuple[ProcessStep, ...] = ()

    @field_validator("process_flow")
    @classmethod
    def _ordered_unique_sequences(
        cls, v: tuple[ProcessStep, ...]
    ) -> tuple[ProcessStep, ...]:
        sequences = [step.sequence for step in v]
        if len(set(sequences)) != len(sequences):
            raise ValueError(f"Process step sequences must be unique, got {sequences}")
        return tuple(sorted(v, key=lambda step: step.sequence))

    def step(self, sequence: int) -> ProcessStep | None:
        """Get a process step by its sequence number."""
        for process_step in self.process_flow:
            if process_step.sequence == sequence:
                return process_step
        return None

    @property
    def step_count(self) -> int:
        return len(self.process_flow)

    @property
    def final_step(self) -> ProcessStep | None:
        return self.process_flow[-1] if self.process_flow else None
