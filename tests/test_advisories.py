"""Tests for the strategic advisory rules and the race brief."""

from race_strategy.core.advisories import (
    RULES,
    SimulationWarning,
    generate_warnings,
    sort_warnings,
    stint_warnings,
)
from race_strategy.core.enums import (
    AeroClassification,
    OvertakingDifficulty,
    PaceClass,
    RiskProfile,
    Severity,
    TireCompound,
    WarningCategory,
    Weather,
)
from race_strategy.core.race import CarProfile, RaceConfig
from race_strategy.core.race_profile import build_race_profile, summarize_previous_winner
from race_strategy.core.strategy import Stint, Strategy
from race_strategy.core.tables import DEFAULT_TABLES
from race_strategy.core.track import (
    CriticalTurn,
    PreviousWinnerStint,
    PreviousWinnerStrategy,
    TrackProfile,
)


def _sample_race(weather: Weather = Weather.NORMAL, laps: int = 53) -> RaceConfig:
    return RaceConfig("MONZA", laps, weather, 20)


def _sample_car(
    start: int = 6,
    pace: PaceClass = PaceClass.MIDFIELD,
    risk: RiskProfile = RiskProfile.BALANCED,
    target: int | None = None,
) -> CarProfile:
    return CarProfile(start, pace, risk, target)


def _sample_track(
    difficulty: OvertakingDifficulty = OvertakingDifficulty.EASY,
    turns: tuple[CriticalTurn, ...] = (),
) -> TrackProfile:
    return TrackProfile(AeroClassification.BALANCED, difficulty, 0.5, turns)


def _sample_strategy(*stints: tuple[TireCompound, int]) -> Strategy:
    if not stints:
        stints = ((TireCompound.MEDIUM, 20), (TireCompound.HARD, 33))
    return Strategy(
        "Plan", tuple(Stint(i + 1, tire, laps) for i, (tire, laps) in enumerate(stints))
    )


def _warnings(
    race: RaceConfig | None = None,
    car: CarProfile | None = None,
    track: TrackProfile | None = None,
    strategy: Strategy | None = None,
    predicted: int = 6,
) -> list[SimulationWarning]:
    return generate_warnings(
        race or _sample_race(),
        car or _sample_car(),
        track or _sample_track(),
        strategy or _sample_strategy(),
        predicted,
        DEFAULT_TABLES,
    )


def _messages(warnings: list[SimulationWarning]) -> list[str]:
    return [w.message for w in warnings]


# ---------------------------------------------------------------------------
# Rule set
# ---------------------------------------------------------------------------


def test_quiet_baseline() -> None:
    """A sensible plan on an easy track raises nothing."""
    assert _warnings() == []


def test_aggressive_on_hard_track() -> None:
    """Aggression is flagged, more so where passing is hard."""
    warnings = _warnings(
        car=_sample_car(risk=RiskProfile.AGGRESSIVE),
        track=_sample_track(OvertakingDifficulty.HARD),
        strategy=_sample_strategy((TireCompound.SOFT, 15), (TireCompound.HARD, 38)),
    )
    messages = _messages(warnings)
    assert "Aggressive risk profile increases tire wear by 20%" in messages
    assert "Aggressive driving on low-overtaking track is risky" in messages
    assert "Aggressive driving will shorten soft tire life significantly" in messages


def test_conservative_note() -> None:
    """Conservative running is a low-severity note."""
    warnings = _warnings(car=_sample_car(risk=RiskProfile.CONSERVATIVE))
    assert [(w.category, w.severity) for w in warnings] == [
        (WarningCategory.STRATEGY, Severity.LOW)
    ]


def test_start_relative_to_pace() -> None:
    """Grid slots outside the pace envelope are called out."""
    ahead = _messages(_warnings(car=_sample_car(start=2)))
    assert "Starting P2 is ahead of midfield pace ceiling (P5)" in ahead

    behind = _messages(_warnings(car=_sample_car(start=14), predicted=12))
    assert "Starting P14 is below typical midfield finish (P9)" in behind


def test_unrealistic_target_is_critical() -> None:
    """A target above the pace ceiling is critical."""
    warnings = _warnings(car=_sample_car(target=2))
    assert warnings[0].severity is Severity.CRITICAL
    assert warnings[0].message == "Target P2 is unrealistic for midfield car"


def test_reachable_target_is_quiet() -> None:
    """A target at or behind the pace ceiling raises nothing, whatever the finish."""
    for predicted in (7, 10, 14):
        assert _warnings(car=_sample_car(target=8), predicted=predicted) == []
    assert _warnings(car=_sample_car(target=5), predicted=9) == []


def test_hot_weather_with_long_softs() -> None:
    """Heat is flagged, plus long soft stints."""
    warnings = _warnings(
        race=_sample_race(Weather.HOT),
        strategy=_sample_strategy((TireCompound.SOFT, 12), (TireCompound.HARD, 41)),
    )
    kinds = [(w.category, w.severity) for w in warnings]
    assert (WarningCategory.WEATHER, Severity.MEDIUM) in kinds
    assert (WarningCategory.TIRE, Severity.HIGH) in kinds


def test_cool_weather_hard_start() -> None:
    """Hard tyres are slow to warm up in the cool."""
    warnings = _warnings(
        race=_sample_race(Weather.COOL),
        strategy=_sample_strategy((TireCompound.HARD, 30), (TireCompound.MEDIUM, 23)),
    )
    assert "Hard tires may struggle to warm up in cool conditions" in _messages(warnings)


def test_stint_length_rules() -> None:
    """Very short later stints and near-cliff stints are medium warnings."""
    warnings = _warnings(
        strategy=_sample_strategy(
            (TireCompound.MEDIUM, 28), (TireCompound.HARD, 20), (TireCompound.SOFT, 5)
        )
    )
    messages = _messages(warnings)
    assert "Stint 3 is very short (5 laps)" in messages
    assert "Stint 1 pushes MEDIUM tires near cliff (28/25 laps)" in messages


def test_first_and_last_stint_rules() -> None:
    """Opening and closing compound choices are reviewed."""
    from_back = _warnings(
        car=_sample_car(start=12),
        strategy=_sample_strategy((TireCompound.SOFT, 15), (TireCompound.SOFT, 38)),
        predicted=9,
    )
    messages = _messages(from_back)
    assert "Starting on soft tires from back of grid" in messages
    assert "Long final stint on soft tires" in messages

    from_front = _warnings(
        car=_sample_car(start=5),
        strategy=_sample_strategy((TireCompound.HARD, 33), (TireCompound.MEDIUM, 20)),
        predicted=5,
    )
    assert "Starting on hard tires from front positions" in _messages(from_front)


def test_critical_turn_rules() -> None:
    """Tyre-stress corners and lone passing spots are annotated."""
    turns = (
        CriticalTurn(8, "Parabolica", ("tire_stress",), "Long right-hander"),
        CriticalTurn(1, "Sainte Devote", ("overtaking_zone",), "Only passing spot"),
    )
    warnings = _warnings(
        track=_sample_track(OvertakingDifficulty.HARD, turns),
        strategy=_sample_strategy((TireCompound.MEDIUM, 26), (TireCompound.HARD, 27)),
    )
    track_warnings = [w for w in warnings if w.category is WarningCategory.TRACK]
    assert [w.message for w in track_warnings] == [
        "Parabolica (Turn 8) may stress tires on longer stints",
        "Sainte Devote is one of few overtaking opportunities",
    ]
    assert track_warnings[1].detail == "Only passing spot - Focus defensive efforts here"


def test_strategy_shape_rules() -> None:
    """Zero stops and many stops are judged against the track."""
    zero_stop = _warnings(strategy=_sample_strategy((TireCompound.HARD, 53)))
    assert "Zero-stop strategy on long race is extremely risky" in _messages(zero_stop)

    short_race = _warnings(
        race=_sample_race(laps=40), strategy=_sample_strategy((TireCompound.HARD, 40))
    )
    assert short_race == []

    three_stints = _sample_strategy(
        (TireCompound.MEDIUM, 18), (TireCompound.HARD, 20), (TireCompound.MEDIUM, 15)
    )
    hard = _warnings(track=_sample_track(OvertakingDifficulty.HARD), strategy=three_stints)
    assert "Multiple pit stops on low-overtaking track" in _messages(hard)
    medium = _warnings(
        track=_sample_track(OvertakingDifficulty.MEDIUM), strategy=three_stints
    )
    assert "Three or more stops increases track position risk" in _messages(medium)


def test_undercut_note_not_on_easy_tracks() -> None:
    """The undercut note only appears where passing is not easy."""
    medium = _warnings(track=_sample_track(OvertakingDifficulty.MEDIUM))
    assert "Pit timing critical for position gains" in _messages(medium)
    assert "Pit timing critical for position gains" not in _messages(_warnings())


def test_backmarker_and_traffic_rules() -> None:
    """Aggressive backmarkers and midfield starts get advice."""
    warnings = _warnings(
        car=_sample_car(start=15, pace=PaceClass.BACKMARKER, risk=RiskProfile.AGGRESSIVE),
        predicted=15,
    )
    messages = _messages(warnings)
    assert "Aggressive strategy unlikely to overcome pace deficit" in messages
    assert "Starting in congested midfield" in messages


def test_custom_rule_set() -> None:
    """Callers may evaluate a subset of rules."""
    assert len(RULES) > 1
    warnings = generate_warnings(
        _sample_race(),
        _sample_car(risk=RiskProfile.CONSERVATIVE),
        _sample_track(),
        _sample_strategy(),
        6,
        DEFAULT_TABLES,
        rules=(),
    )
    assert warnings == []


# ---------------------------------------------------------------------------
# Per-stint checks and ordering
# ---------------------------------------------------------------------------


def test_stint_warnings() -> None:
    """Cliff overrun and dry tyres in the wet are flagged per stint."""
    stint = Stint(2, TireCompound.SOFT, 20)
    warnings = stint_warnings(stint, _sample_race(Weather.WET), DEFAULT_TABLES)
    assert [(w.category, w.severity) for w in warnings] == [
        (WarningCategory.TIRE, Severity.HIGH),
        (WarningCategory.WEATHER, Severity.CRITICAL),
    ]
    assert warnings[0].detail == "Running 20 laps on SOFT compound which has cliff at lap 15"

    wet_stint = Stint(1, TireCompound.WET, 20)
    assert stint_warnings(wet_stint, _sample_race(Weather.WET), DEFAULT_TABLES) == []


def test_sort_warnings_is_stable() -> None:
    """Ordering is by severity, keeping generation order within a level."""
    low_a = SimulationWarning(WarningCategory.TRAFFIC, Severity.LOW, "a")
    high = SimulationWarning(WarningCategory.TIRE, Severity.HIGH, "b")
    low_b = SimulationWarning(WarningCategory.TRACK, Severity.LOW, "c")
    critical = SimulationWarning(WarningCategory.WEATHER, Severity.CRITICAL, "d")

    ordered = sort_warnings([low_a, high, low_b, critical])
    assert [w.message for w in ordered] == ["d", "b", "a", "c"]


# ---------------------------------------------------------------------------
# Race brief
# ---------------------------------------------------------------------------


def test_build_race_profile() -> None:
    """The brief summarises overtaking, aero, corners and history."""
    winner = PreviousWinnerStrategy(
        2023,
        "One-stop",
        (
            PreviousWinnerStint(TireCompound.MEDIUM, 32),
            PreviousWinnerStint(TireCompound.HARD, 46),
        ),
    )
    track = TrackProfile(
        AeroClassification.DOWNFORCE_RELIANT,
        OvertakingDifficulty.HARD,
        0.15,
        (CriticalTurn(1, "Sainte Devote", ("braking",), "Heavy braking"),),
        winner,
    )
    profile = build_race_profile(track)

    assert profile.overtaking_chance_summary.startswith("Hard overtaking")
    assert profile.aero_classification is AeroClassification.DOWNFORCE_RELIANT
    assert "High downforce" in profile.aero_description
    assert profile.critical_turns_summary == ("Turn 1 (Sainte Devote): Heavy braking",)
    assert profile.previous_winner_summary == "2023: One-stop - MEDIUM(32) -> HARD(46)"
    assert summarize_previous_winner(winner) == profile.previous_winner_summary


def test_race_profile_without_history() -> None:
    """Optional blocks are simply absent from the brief."""
    profile = build_race_profile(_sample_track())
    assert profile.critical_turns_summary == ()
    assert profile.previous_winner_summary is None
