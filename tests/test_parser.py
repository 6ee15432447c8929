"""Tests for the strategy DSL parser."""

import logging

import pytest

from race_strategy.core.enums import (
    AeroClassification,
    OvertakingDifficulty,
    PaceClass,
    RiskProfile,
    TireCompound,
    Weather,
)
from race_strategy.dsl import parse_strategy, validate_document
from race_strategy.dsl.specification import EXAMPLE_MONACO, EXAMPLE_MONZA


def _sample_dsl(
    race: str = "RACE MONZA LAPS=53 WEATHER=normal FIELD=20",
    car: str = "CAR START=P12 PACE=midfield RISK=balanced TARGET=P8",
    aero: str = "TRACK AERO=drag_reliant",
    overtaking: str = "TRACK OVERTAKING=medium CHANCE=0.55",
    stints: tuple[str, ...] = (
        "STINT 1 TIRE=MEDIUM LAPS=20",
        "STINT 2 TIRE=HARD LAPS=33",
    ),
    extra: str = "",
) -> str:
    """Assemble a DSL document from its sections."""
    lines = [race, car, aero, overtaking, 'STRATEGY "Plan A"']
    lines += [f"  {stint}" for stint in stints]
    lines.append("END")
    if extra:
        lines.append(extra)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Well-formed documents
# ---------------------------------------------------------------------------


def test_parse_minimal_document() -> None:
    """Required sections alone produce a full document."""
    result = parse_strategy(_sample_dsl())

    assert result.success
    assert result.diagnostics == []
    assert result.warnings == []

    doc = result.document
    assert doc.race_config.track_name == "MONZA"
    assert doc.race_config.total_laps == 53
    assert doc.race_config.weather is Weather.NORMAL
    assert doc.race_config.field_size == 20
    assert doc.car_profile.starting_grid_position == 12
    assert doc.car_profile.pace_class is PaceClass.MIDFIELD
    assert doc.car_profile.risk_profile is RiskProfile.BALANCED
    assert doc.car_profile.target_min_position == 8
    assert doc.track_profile.aero_classification is AeroClassification.DRAG_RELIANT
    assert doc.track_profile.overtaking_difficulty is OvertakingDifficulty.MEDIUM
    assert doc.track_profile.overtaking_chance == pytest.approx(0.55)
    assert doc.track_profile.critical_turns == ()
    assert doc.track_profile.previous_winner_strategy is None
    assert doc.strategy.label == "Plan A"
    assert [s.tire_compound for s in doc.strategy.stints] == [
        TireCompound.MEDIUM,
        TireCompound.HARD,
    ]


def test_laps_matching_race_distance_gives_no_warning() -> None:
    """Stints summing to the race distance raise no lap warning."""
    result = parse_strategy(_sample_dsl())
    assert result.success
    assert not any("does not match race laps" in w for w in result.warnings)


def test_lap_mismatch_is_only_a_warning() -> None:
    """Stints short of the race distance still parse, with one warning."""
    text = _sample_dsl(
        stints=("STINT 1 TIRE=MEDIUM LAPS=20", "STINT 2 TIRE=HARD LAPS=30")
    )
    result = parse_strategy(text)

    assert result.success
    assert len(result.warnings) == 1
    assert "does not match race laps" in result.warnings[0]
    assert "(50)" in result.warnings[0] and "(53)" in result.warnings[0]


def test_wet_race_without_wet_tires_warns() -> None:
    """A wet race on dry compounds parses but warns about tyre choice."""
    text = _sample_dsl(race="RACE MONZA LAPS=53 WEATHER=wet FIELD=20")
    result = parse_strategy(text)

    assert result.success
    assert any("no wet or intermediate tires" in w for w in result.warnings)


def test_wet_race_with_intermediates_is_quiet() -> None:
    """Fitting intermediates in the wet avoids the tyre warning."""
    text = _sample_dsl(
        race="RACE MONZA LAPS=53 WEATHER=wet FIELD=20",
        stints=("STINT 1 TIRE=INTERMEDIATE LAPS=53",),
    )
    assert parse_strategy(text).warnings == []


def test_keywords_are_case_insensitive() -> None:
    """Keywords, enum values and END are matched regardless of case."""
    text = "\n".join(
        [
            "race spa laps=44 weather=HOT field=20",
            "car start=p3 pace=Front_Runner risk=AGGRESSIVE",
            "track aero=Balanced",
            "track overtaking=EASY chance=.7",
            'strategy "Attack"',
            "stint 1 tire=soft laps=14",
            "stint 2 tire=medium laps=30",
            "end",
        ]
    )
    result = parse_strategy(text)

    assert result.success, [str(d) for d in result.diagnostics]
    doc = result.document
    assert doc.race_config.track_name == "SPA"
    assert doc.race_config.weather is Weather.HOT
    assert doc.car_profile.pace_class is PaceClass.FRONT_RUNNER
    assert doc.track_profile.overtaking_chance == pytest.approx(0.7)
    assert doc.strategy.stints[0].tire_compound is TireCompound.SOFT


def test_blank_lines_and_indentation_ignored() -> None:
    """Blank lines between sections and leading whitespace are skipped."""
    text = "\n\n" + _sample_dsl().replace("\n", "\n\n    ") + "\n\n"
    assert parse_strategy(text).success


def test_target_forms() -> None:
    """TARGET=NONE and an omitted target both mean no target."""
    none_target = _sample_dsl(car="CAR START=P12 PACE=midfield RISK=balanced TARGET=NONE")
    no_target = _sample_dsl(car="CAR START=P12 PACE=midfield RISK=balanced")

    for text in (none_target, no_target):
        result = parse_strategy(text)
        assert result.success
        assert result.document.car_profile.target_min_position is None


def test_parse_builtin_examples() -> None:
    """The shipped examples parse cleanly with all optional blocks."""
    monza = parse_strategy(EXAMPLE_MONZA)
    assert monza.success and monza.warnings == []
    track = monza.document.track_profile
    assert [t.turn_number for t in track.critical_turns] == [1, 4, 8]
    assert track.critical_turns[1].risk_tags == ("high_speed", "tire_stress")
    assert track.critical_turns[0].name == "Prima Variante"
    winner = track.previous_winner_strategy
    assert winner.year == 2023
    assert [s.laps for s in winner.stints] == [15, 20, 18]

    monaco = parse_strategy(EXAMPLE_MONACO)
    assert monaco.success
    assert monaco.document.track_profile.critical_turns[0].has_tag("overtaking_zone")


def test_previous_winner_without_stints() -> None:
    """A previous-winner block may omit its STINTS list."""
    extra = 'PREVIOUS_WINNER\n  YEAR=2022 LABEL="One-stop"\nEND'
    result = parse_strategy(_sample_dsl(extra=extra))

    assert result.success
    winner = result.document.track_profile.previous_winner_strategy
    assert winner.label == "One-stop"
    assert winner.stints == ()


def test_raw_text_is_kept() -> None:
    """The input text is echoed back on the result."""
    text = _sample_dsl()
    assert parse_strategy(text).raw_text == text


def test_trailing_content_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Unrecognised text after the last block is ignored with a log warning."""
    with caplog.at_level(logging.WARNING, logger="race_strategy.dsl.parser"):
        result = parse_strategy(_sample_dsl(extra="GARBAGE"))

    assert result.success
    assert "unrecognised content" in caplog.text


# ---------------------------------------------------------------------------
# Blocking diagnostics
# ---------------------------------------------------------------------------


def test_start_beyond_field_is_blocking() -> None:
    """A grid slot past the field size fails on the CAR line."""
    text = _sample_dsl(car="CAR START=P25 PACE=midfield RISK=balanced")
    result = parse_strategy(text)

    assert not result.success
    assert result.document is None
    assert len(result.diagnostics) == 1
    diagnostic = result.diagnostics[0]
    assert diagnostic.section == "CAR"
    assert diagnostic.line == 2
    assert "exceeds field size" in diagnostic.message
    assert str(diagnostic).startswith("line 2 [CAR]")


def test_start_zero_is_blocking() -> None:
    """P0 is not a grid slot."""
    text = _sample_dsl(car="CAR START=P0 PACE=midfield RISK=balanced")
    result = parse_strategy(text)
    assert not result.success
    assert result.diagnostics[0].section == "CAR"


@pytest.mark.parametrize(
    "race",
    [
        "RACE MONZA LAPS=0 WEATHER=normal FIELD=20",
        "RACE MONZA LAPS=101 WEATHER=normal FIELD=20",
        "RACE MONZA LAPS=53 WEATHER=normal FIELD=1",
        "RACE MONZA LAPS=53 WEATHER=normal FIELD=31",
        "RACE MONZA LAPS=53 WEATHER=snowy FIELD=20",
        "RACE MONZA 53 normal 20",
    ],
)
def test_invalid_race_line(race: str) -> None:
    """Out-of-range or malformed RACE values block parsing."""
    result = parse_strategy(_sample_dsl(race=race))
    assert not result.success
    assert result.diagnostics[0].section == "RACE"
    assert result.diagnostics[0].line == 1


def test_oversized_numbers_are_format_errors() -> None:
    """Numbers too long to be a lap count or grid slot fail the line pattern."""
    huge = "9" * 5000
    text = _sample_dsl(
        race=f"RACE MONZA LAPS={huge} WEATHER=normal FIELD=20",
        stints=(f"STINT 1 TIRE=HARD LAPS={huge}",),
    )
    result = parse_strategy(text)

    assert not result.success
    assert [d.section for d in result.diagnostics] == ["RACE", "STRATEGY", "STRATEGY"]
    assert result.diagnostics[0].message.startswith("Invalid RACE line format")
    assert result.diagnostics[1].message.startswith("Invalid STINT line")


def test_invalid_enum_lists_allowed_values() -> None:
    """An unknown enum value names the accepted spellings."""
    text = _sample_dsl(car="CAR START=P12 PACE=fast RISK=balanced")
    message = parse_strategy(text).diagnostics[0].message
    assert '"fast"' in message
    assert "front_runner, midfield, backmarker" in message


@pytest.mark.parametrize("chance", ["1.5", "2", "abc"])
def test_invalid_overtaking_chance(chance: str) -> None:
    """CHANCE must be a number within [0, 1]."""
    text = _sample_dsl(overtaking=f"TRACK OVERTAKING=medium CHANCE={chance}")
    result = parse_strategy(text)
    assert not result.success
    assert result.diagnostics[0].section == "TRACK"


@pytest.mark.parametrize("laps", [0, 101, 5000])
def test_stint_laps_out_of_range_is_blocking(laps: int) -> None:
    """Every stint must cover between 1 and 100 laps."""
    text = _sample_dsl(stints=(f"STINT 1 TIRE=HARD LAPS={laps}",))
    result = parse_strategy(text)

    assert not result.success
    assert [d.section for d in result.diagnostics] == ["STRATEGY"]
    assert result.diagnostics[0].message == (
        f"Invalid stint laps: {laps}. Must be between 1 and 100"
    )


def test_empty_strategy_block() -> None:
    """A strategy needs at least one stint."""
    result = parse_strategy(_sample_dsl(stints=()))
    assert not result.success
    assert any("at least one STINT" in d.message for d in result.diagnostics)


def test_invalid_stint_tire() -> None:
    """Unknown compounds are rejected inside the strategy block."""
    result = parse_strategy(_sample_dsl(stints=("STINT 1 TIRE=ULTRASOFT LAPS=53",)))
    assert not result.success
    assert "ULTRASOFT" in result.diagnostics[0].message


def test_malformed_turn_line() -> None:
    """A bad line inside CRITICAL_TURNS is reported on that section."""
    extra = 'CRITICAL_TURNS\n  TURN one NAME="x"\nEND'
    result = parse_strategy(_sample_dsl(extra=extra))
    assert not result.success
    assert result.diagnostics[0].section == "CRITICAL_TURNS"
    assert result.diagnostics[0].line == 10


def test_bad_previous_winner_year_skips_block() -> None:
    """A malformed YEAR line skips the rest of the block."""
    extra = "PREVIOUS_WINNER\n  YEAR=last\n  STINTS:\n    TIRE=SOFT LAPS=10\nEND"
    result = parse_strategy(_sample_dsl(extra=extra))
    assert [d.section for d in result.diagnostics] == ["PREVIOUS_WINNER"]


def test_collects_errors_across_sections() -> None:
    """One pass reports problems from several sections."""
    text = _sample_dsl(
        race="RACE MONZA LAPS=53 WEATHER=sunny FIELD=20",
        car="CAR START=P12 PACE=fast RISK=reckless",
        aero="TRACK AERO=flat",
        stints=("STINT 1 TIRE=PURPLE LAPS=53",),
    )
    result = parse_strategy(text)

    assert not result.success
    sections = [d.section for d in result.diagnostics]
    assert sections == ["RACE", "CAR", "CAR", "TRACK", "STRATEGY"]
    assert [d.line for d in result.diagnostics] == [1, 2, 2, 3, 6]


def test_empty_input_reports_every_missing_section() -> None:
    """Empty text yields one diagnostic per required section."""
    result = parse_strategy("")
    assert not result.success
    assert [d.section for d in result.diagnostics] == [
        "RACE",
        "CAR",
        "TRACK",
        "STRATEGY",
    ]


@pytest.mark.parametrize(
    "text",
    [
        "END",
        "\n\n\n",
        'STRATEGY "x"\nSTINT 1 TIRE=SOFT LAPS=3\nEND',
        "RACE MONZA LAPS=53 WEATHER=normal FIELD=20",
        "CRITICAL_TURNS\nPREVIOUS_WINNER\nEND",
        '\x00\t"""\nRACE "\n',
        "RACE MONZA LAPS=" + "9" * 5000 + " WEATHER=normal FIELD=20",
        "CAR START=P" + "1" * 5000 + " PACE=midfield RISK=balanced",
    ],
)
def test_parser_never_raises(text: str) -> None:
    """Arbitrary text always produces a result, never an exception."""
    result = parse_strategy(text)
    assert not result.success
    assert result.diagnostics


# ---------------------------------------------------------------------------
# validate_document
# ---------------------------------------------------------------------------


def test_validate_document_clean() -> None:
    """A well-formed document has no advisory issues."""
    assert validate_document(parse_strategy(EXAMPLE_MONZA).document) == []


def test_validate_document_flags_target_and_stints() -> None:
    """Targets beyond the field and over-long stints are reported."""
    text = _sample_dsl(
        car="CAR START=P12 PACE=midfield RISK=balanced TARGET=P25",
        stints=("STINT 1 TIRE=HARD LAPS=60",),
    )
    document = parse_strategy(text).document
    issues = validate_document(document)

    assert "Target position cannot exceed field size" in issues
    assert "Stint 1 laps (60) exceed race length" in issues


def test_empty_previous_winner_block() -> None:
    """A PREVIOUS_WINNER header with nothing after it is reported."""
    result = parse_strategy(_sample_dsl(extra="PREVIOUS_WINNER"))
    assert not result.success
    assert result.diagnostics[0].message == "PREVIOUS_WINNER block is empty"
