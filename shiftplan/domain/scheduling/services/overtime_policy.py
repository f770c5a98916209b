"""
Overtime Policy Evaluator

Decides whether overtime may be added to a shift and prices it. Tier
boundaries default to the configured settings and can be replaced per call.
"""

from pydantic import Field, computed_field, model_validator

from ....core.config import settings
from ...shared.base import ValueObject
from ...shared.exceptions import ErrorType
from ..entities.shift import Shift


class OvertimePolicy(ValueObject):
    """
    Overtime pricing and limits.

    ``tiers`` are ``(upper bound in hours, multiplier)`` pairs; hours beyond
    the last bound cost ``max_multiplier``. Work on a holiday always costs
    ``holiday_multiplier``.
    """

    tiers: tuple[tuple[float, float], ...] = Field(
        default_factory=lambda: tuple(tuple(t) for t in settings.OVERTIME_TIERS)
    )
    max_multiplier: float = Field(default_factory=lambda: settings.OVERTIME_MAX_MULTIPLIER)
    holiday_multiplier: float = Field(
        default_factory=lambda: settings.HOLIDAY_OVERTIME_MULTIPLIER
    )
    default_max_hours: float = Field(
        default_factory=lambda: settings.DEFAULT_MAX_OVERTIME_HOURS, gt=0
    )

    @model_validator(mode="after")
    def _monotonic_tiers(self) -> "OvertimePolicy":
        bounds = [bound for bound, _ in self.tiers]
        multipliers = [multiplier for _, multiplier in self.tiers] + [self.max_multiplier]
        if any(b <= 0 for b in bounds):
            raise ValueError("Overtime tier bounds must be positive")
        if any(later <= earlier for earlier, later in zip(bounds, bounds[1:])):
            raise ValueError(f"Overtime tier bounds must increase, got {bounds}")
        if any(later < earlier for earlier, later in zip(multipliers, multipliers[1:])):
            raise ValueError(f"Overtime multipliers must not decrease, got {multipliers}")
        if any(m < 1 for m in multipliers):
            raise ValueError("Overtime multipliers must be at least 1")
        return self

    def multiplier_for(self, hours: float, holiday: bool = False) -> float:
        """Cost multiplier for ``hours`` of overtime."""
        if holiday:
            return self.holiday_multiplier
        for bound, multiplier in self.tiers:
            if hours <= bound:
                return multiplier
        return self.max_multiplier

    def max_hours_for(self, shift: Shift | None) -> float:
        if shift is not None and shift.timing.max_overtime_hours is not None:
            return shift.timing.max_overtime_hours
        return self.default_max_hours


class OvertimeDecision(ValueObject):
    allowed: bool
    reason: str | None = None
    max_hours: float
    cost_multiplier: float | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def kind(self) -> ErrorType | None:
        """``policy_violation`` for a refused request."""
        return None if self.allowed else ErrorType.POLICY_VIOLATION


def evaluate_overtime(
    hours: float,
    shift: Shift | None,
    policy: OvertimePolicy | None = None,
    holiday: bool = False,
) -> OvertimeDecision:
    """
    Evaluate an overtime request against a shift.

    Args:
        hours: Requested overtime hours
        shift: Shift the overtime extends; None applies the policy defaults
        policy: Pricing and limits, defaults to the configured policy
        holiday: Whether the overtime falls on a holiday

    Returns:
        OvertimeDecision with the reason when the request is refused
    """
    policy = policy or OvertimePolicy()
    max_hours = policy.max_hours_for(shift)

    if shift is not None and not shift.timing.overtime_allowed:
        reason = f"Shift {shift.name or shift.id} does not allow overtime"
    elif hours <= 0:
        reason = "Overtime hours must be positive"
    elif hours > max_hours:
        reason = f"{hours:g}h exceeds the maximum of {max_hours:g}h"
    else:
        return OvertimeDecision(
            allowed=True,
            max_hours=max_hours,
            cost_multiplier=policy.multiplier_for(hours, holiday=holiday),
        )
    return OvertimeDecision(allowed=False, reason=reason, max_hours=max_hours)


def is_overtime_allowed(
    hours: float, shift: Shift | None, policy: OvertimePolicy | None = None
) -> bool:
    return evaluate_overtime(hours, shift, policy).allowed


def multiplier_for(
    hours: float, policy: OvertimePolicy | None = None, holiday: bool = False
) -> float:
    return (policy or OvertimePolicy()).multiplier_for(hours, holiday=holiday)
