"""Deterministic lap-by-lap race simulator.

The engine replays a single car's race against a validated strategy
document. It walks the strategy stint by stint and lap by lap, building
each lap time from additive terms:

    lap_time = base_lap + pace_delta + degradation + fuel + fresh_tyre
               + traffic - drs

and moving the car through the field with the deterministic position model
in :mod:`race_strategy.core.overtaking`. Pit losses are charged on the last
lap of every stint but the final one and are added to race time, not to the
recorded lap time.

The function is pure: the mutable race state lives only for the duration
of one call, no clock or random generator is consulted, and identical
inputs always produce an identical :class:`SimulationResult`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from race_strategy.core.advisories import (
    SimulationWarning,
    generate_warnings,
    stint_warnings,
)
from race_strategy.core.enums import (
    AeroClassification,
    LapEvent,
    RiskProfile,
    TireCompound,
)
from race_strategy.core.overtaking import envelope, position_change
from race_strategy.core.physics import (
    burn_fuel,
    fresh_tire_penalty,
    fuel_effect,
    tire_degradation,
    tire_wear,
)
from race_strategy.core.race import CarProfile, RaceConfig
from race_strategy.core.race_profile import RaceProfileSummary, build_race_profile
from race_strategy.core.strategy import Strategy
from race_strategy.core.tables import DEFAULT_TABLES, DomainTables, PaceClassEffect
from race_strategy.core.track import TrackProfile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DRS_GAIN: float = 0.2  # seconds gained per lap behind another car on drag tracks
OVERTAKEN_TIME_LOSS: float = 0.3  # seconds lost while being passed
CONGESTION_PENALTY: float = 0.1  # per-lap traffic cost in the midfield band
CONGESTION_BAND: tuple[int, int] = (8, 15)
POINTS_POSITIONS: int = 10

# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LapRecord:
    """One simulated lap.

    Attributes:
        lap_number: 1-based race lap.
        stint_number: Stint the lap belongs to.
        tire_compound: Compound in use.
        lap_time: Lap time in seconds (pit loss excluded).
        tire_wear: Worn fraction of the tyre in [0, 1].
        fuel_load: Fuel remaining at the end of the lap (kg).
        traffic_penalty: Seconds lost to traffic this lap.
        position: Running position at the end of the lap.
        event: Optional lap event.
        event_detail: Human-readable description of the event.
    """

    lap_number: int
    stint_number: int
    tire_compound: TireCompound
    lap_time: float
    tire_wear: float
    fuel_load: float
    traffic_penalty: float
    position: int
    event: LapEvent | None = None
    event_detail: str | None = None


@dataclass(frozen=True)
class StintMetrics:
    """Aggregate metrics of one simulated stint."""

    stint_number: int
    tire_compound: TireCompound
    total_laps: int
    avg_lap_time: float
    best_lap_time: float
    worst_lap_time: float
    total_degradation_loss: float
    pit_time_loss: float
    start_position: int
    end_position: int


@dataclass(frozen=True)
class PositionRange:
    """Inclusive range of plausible finishing positions."""

    min: int
    max: int


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of :func:`simulate_race`.

    Attributes:
        total_race_time: Sum of lap times and pit losses (seconds).
        predicted_finish_position: Final position clamped to the pace envelope.
        predicted_position_range: Plausible finishing range.
        positions_gained: Start position minus predicted finish.
        probability_of_points: Heuristic chance of a top-10 finish.
        probability_of_beating_start_position: Heuristic chance of finishing
            ahead of the grid slot.
        stint_metrics: One entry per stint.
        lap_data: One entry per simulated lap.
        warnings: Advisories in generation order.
        race_profile: Prose summary of the circuit.
        strategy_label: Label of the simulated strategy.
        total_pit_stops: Number of stops (stints - 1).
        total_pit_time_loss: Seconds lost in the pit lane.
        race_config: Input echo.
        car_profile: Input echo.
        strategy: Input echo.
    """

    total_race_time: float
    predicted_finish_position: int
    predicted_position_range: PositionRange
    positions_gained: int
    probability_of_points: float
    probability_of_beating_start_position: float
    stint_metrics: list[StintMetrics]
    lap_data: list[LapRecord]
    warnings: list[SimulationWarning]
    race_profile: RaceProfileSummary
    strategy_label: str
    total_pit_stops: int
    total_pit_time_loss: float
    race_config: RaceConfig
    car_profile: CarProfile
    strategy: Strategy


# ---------------------------------------------------------------------------
# Internal race state
# ---------------------------------------------------------------------------


class _RaceState:
    """Mutable bookkeeping for a single simulation call."""

    __slots__ = (
        "position",
        "lap",
        "fuel_load",
        "race_time",
        "pit_time_loss",
        "lap_data",
        "stint_metrics",
        "warnings",
    )

    def __init__(self, start_position: int, starting_fuel: float) -> None:
        self.position: int = start_position
        self.lap: int = 0
        self.fuel_load: float = starting_fuel
        self.race_time: float = 0.0
        self.pit_time_loss: float = 0.0
        self.lap_data: list[LapRecord] = []
        self.stint_metrics: list[StintMetrics] = []
        self.warnings: list[SimulationWarning] = []


@dataclass
class _StintAccumulator:
    """Per-stint running totals."""

    start_position: int
    lap_times: list[float] = field(default_factory=list)
    degradation_loss: float = 0.0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def simulate_race(
    race: RaceConfig,
    car: CarProfile,
    strategy: Strategy,
    track: TrackProfile,
    tables: DomainTables = DEFAULT_TABLES,
) -> SimulationResult:
    """Simulate a race lap by lap for a validated strategy document.

    Per stint:
        1. Raise cliff-overrun and wet-weather advisories for the stint.

    Per lap:
        2. Base lap = circuit base + pace-class delta; add tyre degradation,
           the fuel-burn benefit (then burn this lap's fuel) and the
           fresh-tyre penalty on the first three stint laps.
        3. Move the car with the deterministic position model (lap-1 shuffle
           or regular lap); being passed costs 0.3 s of traffic.
        4. Subtract the DRS gain when not leading on a drag-reliant track
           and add congestion while running P8-P15.
        5. On the last lap of a non-final stint charge the pit loss scaled
           by the risk profile's pit-stop efficiency.
        6. Record the lap; at stint end aggregate :class:`StintMetrics`.

    After the last stint the finish is clamped into the pace envelope, the
    position range and probabilities are derived and the post-race rule
    set is evaluated.

    Args:
        race: Race configuration.
        car: Car profile.
        strategy: Strategy to simulate (non-empty).
        track: Track profile.
        tables: Domain tables; defaults to the built-in data.

    Returns:
        A fully populated :class:`SimulationResult`.
    """
    circuit = tables.circuit(race.track_name)
    pace = tables.pace(car.pace_class)
    risk = tables.risk(car.risk_profile)
    weather_multiplier = tables.weather_multiplier(race.weather)
    base_rate = tables.overtake_base_rate(track.overtaking_difficulty)
    pit_loss = circuit.pit_lane_time_loss * risk.pit_stop_efficiency

    state = _RaceState(car.starting_grid_position, circuit.starting_fuel_kg)
    stints = strategy.stints

    for stint_idx, stint in enumerate(stints):
        is_last_stint = stint_idx == len(stints) - 1
        profile = tables.tire(stint.tire_compound)
        acc = _StintAccumulator(start_position=state.position)

        state.warnings.extend(stint_warnings(stint, race, tables))

        for lap_in_stint in range(1, stint.laps_in_stint + 1):
            state.lap += 1
            is_first_lap = state.lap == 1
            is_pit_lap = lap_in_stint == stint.laps_in_stint and not is_last_stint

            # -- Lap time terms ---------------------------------------------
            lap_time = circuit.base_lap_time + pace.lap_time_delta

            degradation = tire_degradation(
                profile, lap_in_stint, weather_multiplier, risk.tire_management
            )
            lap_time += degradation
            acc.degradation_loss += degradation

            lap_time += fuel_effect(circuit, state.fuel_load)
            state.fuel_load = burn_fuel(circuit, state.fuel_load)

            lap_time += fresh_tire_penalty(profile, lap_in_stint)

            # -- Position model ---------------------------------------------
            traffic_penalty = 0.0
            event: LapEvent | None = None
            event_detail: str | None = None

            if is_first_lap:
                event = LapEvent.START
                event_detail = f"Started P{car.starting_grid_position}"

            change = position_change(
                state.position, state.lap, base_rate, pace, risk, race.field_size
            )
            if change.overtook:
                event = LapEvent.OVERTAKE
                event_detail = f"Passed car to move to P{change.new_position}"
            elif change.was_overtaken:
                event = LapEvent.OVERTAKEN
                event_detail = f"Lost position, now P{change.new_position}"
                traffic_penalty = OVERTAKEN_TIME_LOSS
            state.position = change.new_position

            if (
                state.position > 1
                and track.aero_classification is AeroClassification.DRAG_RELIANT
            ):
                lap_time -= DRS_GAIN

            if CONGESTION_BAND[0] <= state.position <= CONGESTION_BAND[1]:
                traffic_penalty += CONGESTION_PENALTY * (1 - track.overtaking_chance)

            lap_time += traffic_penalty

            # -- Pit stop ---------------------------------------------------
            lap_pit_loss = 0.0
            if is_pit_lap:
                lap_pit_loss = pit_loss
                state.pit_time_loss += lap_pit_loss
                next_compound = stints[stint_idx + 1].tire_compound.value
                event = LapEvent.PIT_STOP
                event_detail = f"Pit stop for {next_compound} tires"
                logger.debug(
                    "Lap %d: pit stop onto %s (%.2f s)",
                    state.lap,
                    next_compound,
                    lap_pit_loss,
                )

            state.lap_data.append(
                LapRecord(
                    lap_number=state.lap,
                    stint_number=stint.stint_number,
                    tire_compound=stint.tire_compound,
                    lap_time=lap_time,
                    tire_wear=tire_wear(profile, lap_in_stint),
                    fuel_load=state.fuel_load,
                    traffic_penalty=traffic_penalty,
                    position=state.position,
                    event=event,
                    event_detail=event_detail,
                )
            )
            acc.lap_times.append(lap_time)
            state.race_time += lap_time + lap_pit_loss

        stint_pit_loss = 0.0 if is_last_stint else pit_loss
        state.stint_metrics.append(
            _stint_metrics(stint_idx, strategy, acc, state.position, stint_pit_loss)
        )

    # -- Final classification ------------------------------------------------
    ceiling, floor = envelope(pace, race.field_size)
    predicted = min(floor, max(ceiling, state.position))
    positions_gained = car.starting_grid_position - predicted

    variance = 2 if car.risk_profile is RiskProfile.AGGRESSIVE else 1
    position_range = PositionRange(
        min=max(ceiling, predicted - variance),
        max=min(floor, predicted + variance + 1),
    )

    state.warnings.extend(
        generate_warnings(race, car, track, strategy, predicted, tables)
    )

    logger.info(
        "Simulated %d laps of %s: P%d -> P%d (%d warnings)",
        state.lap,
        race.track_name,
        car.starting_grid_position,
        predicted,
        len(state.warnings),
    )

    return SimulationResult(
        total_race_time=state.race_time,
        predicted_finish_position=predicted,
        predicted_position_range=position_range,
        positions_gained=positions_gained,
        probability_of_points=probability_of_points(pace, predicted),
        probability_of_beating_start_position=probability_of_beating_start(
            pace, car.starting_grid_position, positions_gained
        ),
        stint_metrics=state.stint_metrics,
        lap_data=state.lap_data,
        warnings=state.warnings,
        race_profile=build_race_profile(track),
        strategy_label=strategy.label,
        total_pit_stops=strategy.pit_stops,
        total_pit_time_loss=state.pit_time_loss,
        race_config=race,
        car_profile=car,
        strategy=strategy,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _stint_metrics(
    stint_idx: int,
    strategy: Strategy,
    acc: _StintAccumulator,
    end_position: int,
    pit_time_loss: float,
) -> StintMetrics:
    stint = strategy.stints[stint_idx]
    times = np.asarray(acc.lap_times, dtype=float)
    return StintMetrics(
        stint_number=stint.stint_number,
        tire_compound=stint.tire_compound,
        total_laps=stint.laps_in_stint,
        avg_lap_time=float(times.mean()) if times.size else 0.0,
        best_lap_time=float(times.min()) if times.size else 0.0,
        worst_lap_time=float(times.max()) if times.size else 0.0,
        total_degradation_loss=acc.degradation_loss,
        pit_time_loss=pit_time_loss,
        start_position=acc.start_position,
        end_position=end_position,
    )


def probability_of_points(pace: PaceClassEffect, predicted: int) -> float:
    """Return the heuristic chance of finishing inside the top 10.

    * ceiling outside the points: ``max(0.02, 0.15 - (pred - 10) * 0.01)``
    * predicted in the points: ``min(0.85, 0.9 - (pred - ceiling) * 0.05)``
    * otherwise: ``max(0.05, 0.35 - (pred - 10) * 0.03)``
    """
    if pace.realistic_ceiling > POINTS_POSITIONS:
        return max(0.02, 0.15 - (predicted - POINTS_POSITIONS) * 0.01)
    if predicted <= POINTS_POSITIONS:
        return min(0.85, 0.9 - (predicted - pace.realistic_ceiling) * 0.05)
    return max(0.05, 0.35 - (predicted - POINTS_POSITIONS) * 0.03)


def probability_of_beating_start(
    pace: PaceClassEffect, start: int, positions_gained: int
) -> float:
    """Return the heuristic chance of finishing ahead of the grid slot."""
    if start > pace.typical_finish:
        return min(0.75, 0.5 + (start - pace.typical_finish) * 0.08)
    if start < pace.realistic_ceiling:
        return max(0.1, 0.3 - (pace.realistic_ceiling - start) * 0.1)
    if positions_gained >= 0:
        return min(0.65, 0.45 + positions_gained * 0.05)
    return max(0.2, 0.45 + positions_gained * 0.1)
