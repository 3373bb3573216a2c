"""
Grid configuration snapshot and the change events that produce new ones.
"""

from dataclasses import dataclass
from typing import Tuple

from pydantic import BaseModel, ConfigDict, field_validator

DAYS_RANGE_LIMITS: Tuple[int, int] = (0, 14)
TIME_RANGE_LIMITS: Tuple[int, int] = (0, 23)


@dataclass(frozen=True)
class RangeChange:
    """Lower/upper pair emitted by a range slider."""
    lower: int
    upper: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.lower, self.upper)


class Configuration(BaseModel):
    """
    Immutable snapshot of everything the slot grid depends on.

    Invariant: both ranges satisfy lower <= upper and sit inside their limits.
    """
    model_config = ConfigDict(frozen=True)

    days_range: Tuple[int, int] = (0, 4)
    time_range: Tuple[int, int] = (9, 18)
    allow_weekends: bool = False
    half_hour_intervals: bool = False
    duration: int = 60

    @field_validator("days_range")
    @classmethod
    def validate_days_range(cls, value: Tuple[int, int]) -> Tuple[int, int]:
        """Days are offsets from today, 0 meaning today."""
        return _check_range("days_range", value, DAYS_RANGE_LIMITS)

    @field_validator("time_range")
    @classmethod
    def validate_time_range(cls, value: Tuple[int, int]) -> Tuple[int, int]:
        """Hours of the day, both ends included in the grid."""
        return _check_range("time_range", value, TIME_RANGE_LIMITS)

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure meeting duration is positive."""
        if value <= 0:
            raise ValueError("duration must be greater than zero")
        return value

    def day_count(self) -> int:
        """Number of day columns the grid will show."""
        lower, upper = self.days_range
        return upper - lower + 1

    def hours(self) -> range:
        """Whole hours covered by the grid, upper bound inclusive."""
        lower, upper = self.time_range
        return range(lower, upper + 1)


def _check_range(name: str, value: Tuple[int, int], limits: Tuple[int, int]) -> Tuple[int, int]:
    lower, upper = value
    minimum, maximum = limits
    if lower > upper:
        raise ValueError(f"{name} lower bound {lower} must not exceed upper bound {upper}")
    if lower < minimum or upper > maximum:
        raise ValueError(f"{name} must be within {minimum} and {maximum}, got {lower}-{upper}")
    return (lower, upper)
