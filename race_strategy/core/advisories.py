"""Rule-based strategic advisories produced alongside a simulation.

Advisories never block a result. Two groups exist:

* per-stint checks raised while the engine walks the strategy
  (:func:`stint_warnings`);
* the post-race rule set (:data:`RULES`) evaluated once over the inputs and
  the clamped finishing position (:func:`generate_warnings`).

Rules are independent of one another; :func:`sort_warnings` provides the
severity ordering consumers display.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from race_strategy.core.enums import (
    OvertakingDifficulty,
    PaceClass,
    RiskProfile,
    Severity,
    TireCompound,
    WarningCategory,
    Weather,
)
from race_strategy.core.race import CarProfile, RaceConfig
from race_strategy.core.strategy import Stint, Strategy
from race_strategy.core.tables import DomainTables, PaceClassEffect
from race_strategy.core.track import TrackProfile

# Stints longer than this multiple of the cliff lap are flagged as high risk.
CLIFF_OVERRUN_FACTOR: float = 1.3


@dataclass(frozen=True)
class SimulationWarning:
    """An advisory annotation on a simulated strategy.

    Attributes:
        category: Area the advisory is about.
        severity: How much attention it deserves.
        message: Short headline.
        detail: Optional explanation.
    """

    category: WarningCategory
    severity: Severity
    message: str
    detail: str | None = None


def sort_warnings(warnings: Iterable[SimulationWarning]) -> list[SimulationWarning]:
    """Return *warnings* ordered critical > high > medium > low (stable)."""
    return sorted(warnings, key=lambda w: w.severity.rank, reverse=True)


# ---------------------------------------------------------------------------
# Per-stint checks
# ---------------------------------------------------------------------------


def stint_warnings(
    stint: Stint, race: RaceConfig, tables: DomainTables
) -> list[SimulationWarning]:
    """Return the cliff-overrun and wet-weather checks for one stint."""
    warnings: list[SimulationWarning] = []
    cliff_lap = tables.tire(stint.tire_compound).cliff_lap
    compound = stint.tire_compound.value

    if stint.laps_in_stint > cliff_lap * CLIFF_OVERRUN_FACTOR:
        warnings.append(
            SimulationWarning(
                WarningCategory.TIRE,
                Severity.HIGH,
                f"Stint {stint.stint_number} may push {compound} tires past cliff",
                f"Running {stint.laps_in_stint} laps on {compound} compound "
                f"which has cliff at lap {cliff_lap}",
            )
        )

    if race.weather is Weather.WET and not stint.tire_compound.is_wet_weather:
        warnings.append(
            SimulationWarning(
                WarningCategory.WEATHER,
                Severity.CRITICAL,
                f"Stint {stint.stint_number} uses dry tires in wet conditions",
                "Consider using INTERMEDIATE or WET tires for wet weather",
            )
        )

    return warnings


# ---------------------------------------------------------------------------
# Post-race rule set
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleContext:
    """Everything a post-race rule may inspect."""

    race: RaceConfig
    car: CarProfile
    track: TrackProfile
    strategy: Strategy
    pace: PaceClassEffect
    tables: DomainTables
    predicted_finish: int


Rule = Callable[[RuleContext], Iterator[SimulationWarning]]


def _aggressive_risk(ctx: RuleContext) -> Iterator[SimulationWarning]:
    if ctx.car.risk_profile is not RiskProfile.AGGRESSIVE:
        return
    yield SimulationWarning(
        WarningCategory.STRATEGY,
        Severity.MEDIUM,
        "Aggressive risk profile increases tire wear by 20%",
        "Higher degradation rate may require earlier pit stops or "
        "compromise late-stint pace",
    )
    if ctx.track.overtaking_difficulty is OvertakingDifficulty.HARD:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.HIGH,
            "Aggressive driving on low-overtaking track is risky",
            "If you lose position due to tire wear, recovery will be very difficult",
        )
    if any(
        s.tire_compound is TireCompound.SOFT and s.laps_in_stint > 12
        for s in ctx.strategy.stints
    ):
        yield SimulationWarning(
            WarningCategory.TIRE,
            Severity.HIGH,
            "Aggressive driving will shorten soft tire life significantly",
            "Soft tires may cliff early with aggressive driving style - "
            "consider shorter stint",
        )


def _conservative_risk(ctx: RuleContext) -> Iterator[SimulationWarning]:
    if ctx.car.risk_profile is RiskProfile.CONSERVATIVE:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.LOW,
            "Conservative approach protects tires but limits overtaking",
            "Better tire life but 30% fewer overtaking attempts - "
            "good for track position races",
        )


def _start_vs_pace(ctx: RuleContext) -> Iterator[SimulationWarning]:
    start = ctx.car.starting_grid_position
    pace_name = ctx.car.pace_class.value
    if start < ctx.pace.realistic_ceiling:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.HIGH,
            f"Starting P{start} is ahead of {pace_name} pace ceiling "
            f"(P{ctx.pace.realistic_ceiling})",
            "Expect to lose positions to faster cars during the race - "
            "focus on defensive strategy",
        )
    if start > ctx.pace.typical_finish + 3:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.MEDIUM,
            f"Starting P{start} is below typical {pace_name} finish "
            f"(P{ctx.pace.typical_finish})",
            "Room to gain positions if strategy and first lap execution go well",
        )


def _target_position(ctx: RuleContext) -> Iterator[SimulationWarning]:
    target = ctx.car.target_min_position
    if target is None:
        return
    pace_name = ctx.car.pace_class.value
    if target < ctx.pace.realistic_ceiling:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.CRITICAL,
            f"Target P{target} is unrealistic for {pace_name} car",
            f"Best realistic finish for {pace_name} is "
            f"P{ctx.pace.realistic_ceiling} - adjust expectations",
        )


def _weather(ctx: RuleContext) -> Iterator[SimulationWarning]:
    weather = ctx.race.weather
    stints = ctx.strategy.stints
    if weather is Weather.HOT:
        yield SimulationWarning(
            WarningCategory.WEATHER,
            Severity.MEDIUM,
            "Hot conditions increase tire degradation by 25%",
            "Consider harder compounds or shorter stints to manage "
            "thermal degradation",
        )
        if any(
            s.tire_compound is TireCompound.SOFT and s.laps_in_stint > 10
            for s in stints
        ):
            yield SimulationWarning(
                WarningCategory.TIRE,
                Severity.HIGH,
                "Soft tires in hot conditions will degrade rapidly",
                "Expect significant pace drop-off after ~10 laps on softs in the heat",
            )
    elif weather is Weather.COOL:
        if stints[0].tire_compound is TireCompound.HARD:
            yield SimulationWarning(
                WarningCategory.TIRE,
                Severity.MEDIUM,
                "Hard tires may struggle to warm up in cool conditions",
                "First few laps could have reduced grip - vulnerable on lap 1",
            )
    elif weather is Weather.WET:
        yield SimulationWarning(
            WarningCategory.WEATHER,
            Severity.MEDIUM,
            "Wet conditions - reduced grip and visibility",
            "INTERMEDIATE or WET tires required. Watch for drying track "
            "creating crossover window.",
        )


def _stint_lengths(ctx: RuleContext) -> Iterator[SimulationWarning]:
    for stint in ctx.strategy.stints:
        if stint.laps_in_stint < 8 and stint.stint_number > 1:
            yield SimulationWarning(
                WarningCategory.STRATEGY,
                Severity.MEDIUM,
                f"Stint {stint.stint_number} is very short "
                f"({stint.laps_in_stint} laps)",
                "Short stints waste pit stop time - ensure this is intentional "
                "(e.g., safety car)",
            )

        cliff_lap = ctx.tables.tire(stint.tire_compound).cliff_lap
        if cliff_lap < stint.laps_in_stint <= cliff_lap * CLIFF_OVERRUN_FACTOR:
            yield SimulationWarning(
                WarningCategory.TIRE,
                Severity.MEDIUM,
                f"Stint {stint.stint_number} pushes {stint.tire_compound.value} "
                f"tires near cliff ({stint.laps_in_stint}/{cliff_lap} laps)",
                "Pace will drop significantly in final laps - be prepared for "
                "pressure from behind",
            )


def _first_stint(ctx: RuleContext) -> Iterator[SimulationWarning]:
    first = ctx.strategy.stints[0].tire_compound
    start = ctx.car.starting_grid_position
    if first is TireCompound.SOFT and start > 10:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.MEDIUM,
            "Starting on soft tires from back of grid",
            "Soft tires optimal for qualifying but may limit strategic "
            "flexibility - offset pit window from rivals",
        )
    if first is TireCompound.HARD and start <= 5:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.MEDIUM,
            "Starting on hard tires from front positions",
            "May lose positions early to cars on grippier compounds - "
            "requires track position defense",
        )


def _last_stint(ctx: RuleContext) -> Iterator[SimulationWarning]:
    last = ctx.strategy.stints[-1]
    if last.tire_compound is TireCompound.SOFT and last.laps_in_stint > 18:
        yield SimulationWarning(
            WarningCategory.TIRE,
            Severity.HIGH,
            "Long final stint on soft tires",
            "Risk of severe degradation in closing laps when positions are "
            "hardest to recover",
        )


def _critical_turns(ctx: RuleContext) -> Iterator[SimulationWarning]:
    has_long_stint = any(s.laps_in_stint > 25 for s in ctx.strategy.stints)
    hard_track = ctx.track.overtaking_difficulty is OvertakingDifficulty.HARD
    for turn in ctx.track.critical_turns:
        if turn.has_tag("tire_stress") and has_long_stint:
            yield SimulationWarning(
                WarningCategory.TRACK,
                Severity.MEDIUM,
                f"{turn.name} (Turn {turn.turn_number}) may stress tires "
                "on longer stints",
                turn.note,
            )
        if turn.has_tag("overtaking_zone") and hard_track:
            yield SimulationWarning(
                WarningCategory.TRACK,
                Severity.LOW,
                f"{turn.name} is one of few overtaking opportunities",
                f"{turn.note} - Focus defensive efforts here",
            )


def _strategy_shape(ctx: RuleContext) -> Iterator[SimulationWarning]:
    stint_count = len(ctx.strategy.stints)
    difficulty = ctx.track.overtaking_difficulty
    if stint_count == 1 and ctx.race.total_laps > 40:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.HIGH,
            "Zero-stop strategy on long race is extremely risky",
            "No compound can realistically last this distance competitively",
        )
    if stint_count >= 3 and difficulty is OvertakingDifficulty.HARD:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.HIGH,
            "Multiple pit stops on low-overtaking track",
            "Each stop risks losing positions that are nearly impossible to recover",
        )
    if stint_count >= 3 and difficulty is OvertakingDifficulty.MEDIUM:
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.MEDIUM,
            "Three or more stops increases track position risk",
            "Consider if fresh tire advantage outweighs time lost in pits",
        )


def _backmarker_aggression(ctx: RuleContext) -> Iterator[SimulationWarning]:
    if (
        ctx.car.pace_class is PaceClass.BACKMARKER
        and ctx.car.risk_profile is RiskProfile.AGGRESSIVE
    ):
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.MEDIUM,
            "Aggressive strategy unlikely to overcome pace deficit",
            "Backmarker cars benefit more from conservative tire management "
            "and capitalizing on others' mistakes",
        )


def _undercut(ctx: RuleContext) -> Iterator[SimulationWarning]:
    if (
        ctx.track.overtaking_difficulty is not OvertakingDifficulty.EASY
        and len(ctx.strategy.stints) >= 2
    ):
        yield SimulationWarning(
            WarningCategory.STRATEGY,
            Severity.LOW,
            "Pit timing critical for position gains",
            "Undercut can gain 1-2 positions if pitting 1-2 laps before "
            "rivals on this track",
        )


def _midfield_traffic(ctx: RuleContext) -> Iterator[SimulationWarning]:
    if 8 <= ctx.car.starting_grid_position <= 15:
        yield SimulationWarning(
            WarningCategory.TRAFFIC,
            Severity.LOW,
            "Starting in congested midfield",
            "Expect close racing and potential for minor contact - lap 1 "
            "positioning is crucial",
        )


RULES: tuple[Rule, ...] = (
    _aggressive_risk,
    _conservative_risk,
    _start_vs_pace,
    _target_position,
    _weather,
    _stint_lengths,
    _first_stint,
    _last_stint,
    _critical_turns,
    _strategy_shape,
    _backmarker_aggression,
    _undercut,
    _midfield_traffic,
)


def generate_warnings(
    race: RaceConfig,
    car: CarProfile,
    track: TrackProfile,
    strategy: Strategy,
    predicted_finish: int,
    tables: DomainTables,
    rules: Iterable[Rule] = RULES,
) -> list[SimulationWarning]:
    """Evaluate every post-race rule and return the advisories raised.

    Args:
        race: Race configuration.
        car: Car profile.
        track: Track profile.
        strategy: Simulated strategy.
        predicted_finish: Finishing position after envelope clamping.
        tables: Domain tables used for the simulation.
        rules: Rule set to evaluate (defaults to :data:`RULES`).

    Returns:
        Advisories in rule order; use :func:`sort_warnings` to rank them.
    """
    ctx = RuleContext(
        race=race,
        car=car,
        track=track,
        strategy=strategy,
        pace=tables.pace(car.pace_class),
        tables=tables,
        predicted_finish=predicted_finish,
    )
    warnings: list[SimulationWarning] = []
    for rule in rules:
        warnings.extend(rule(ctx))
    return warnings
