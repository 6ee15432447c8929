"""Pit strategy model: an ordered list of tyre stints."""

from __future__ import annotations

from dataclasses import dataclass

from race_strategy.core.enums import TireCompound


@dataclass(frozen=True)
class Stint:
    """A contiguous run of laps on one tyre compound.

    Attributes:
        stint_number: 1-based position of the stint in the plan.
        tire_compound: Compound fitted for the stint.
        laps_in_stint: Planned stint length in laps.
    """

    stint_number: int
    tire_compound: TireCompound
    laps_in_stint: int


@dataclass(frozen=True)
class Strategy:
    """A labelled pit strategy.

    The sum of stint laps is expected, but not required, to equal the race
    distance; the parser reports a mismatch as a warning.

    Attributes:
        label: Free-text name of the strategy.
        stints: Ordered, non-empty stint plan.
    """

    label: str
    stints: tuple[Stint, ...]

    def __post_init__(self) -> None:
        """Validate strategy structure."""
        if not self.stints:
            raise ValueError("Strategy must contain at least one stint.")

    @property
    def total_laps(self) -> int:
        return sum(s.laps_in_stint for s in self.stints)

    @property
    def pit_stops(self) -> int:
        return len(self.stints) - 1

    def uses_wet_weather_tires(self) -> bool:
        """Return True if any stint runs an intermediate or wet compound."""
        return any(s.tire_compound.is_wet_weather for s in self.stints)
