"""Race and car configuration models."""

from __future__ import annotations

from dataclasses import dataclass

from race_strategy.core.enums import PaceClass, RiskProfile, Weather


@dataclass(frozen=True)
class RaceConfig:
    """Immutable description of the race being simulated.

    Attributes:
        track_name: Circuit identifier as written in the DSL (upper case).
        total_laps: Scheduled race distance in laps.
        weather: Race-day conditions.
        field_size: Number of cars on the grid (>= 2).
    """

    track_name: str
    total_laps: int
    weather: Weather
    field_size: int

    def __post_init__(self) -> None:
        """Validate structural invariants."""
        if not self.track_name:
            raise ValueError("track_name must not be empty.")
        if self.total_laps < 1:
            raise ValueError("total_laps must be >= 1.")
        if self.field_size < 2:
            raise ValueError("field_size must be >= 2.")


@dataclass(frozen=True)
class CarProfile:
    """Immutable description of the simulated car and its approach.

    Attributes:
        starting_grid_position: Grid slot, 1-based.
        pace_class: Performance tier bounding realistic outcomes.
        risk_profile: Risk appetite affecting tyres, passing and pit stops.
        target_min_position: Worst acceptable finish, or ``None`` when the
            DSL says ``TARGET=NONE`` or omits the token.
    """

    starting_grid_position: int
    pace_class: PaceClass
    risk_profile: RiskProfile
    target_min_position: int | None = None

    def __post_init__(self) -> None:
        """Validate structural invariants."""
        if self.starting_grid_position < 1:
            raise ValueError("starting_grid_position must be >= 1.")
