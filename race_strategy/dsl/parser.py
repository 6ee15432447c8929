"""Line-oriented parser for the race strategy DSL.

A document consists of six sections in fixed order::

    RACE <NAME> LAPS=<int> WEATHER=<weather> FIELD=<int>
    CAR START=P<int> PACE=<pace> RISK=<risk> [TARGET=P<int>|TARGET=NONE]
    TRACK AERO=<aero>
    TRACK OVERTAKING=<difficulty> CHANCE=<0.0-1.0>
    STRATEGY "<label>"
      STINT <n> TIRE=<compound> LAPS=<int>
    END
    CRITICAL_TURNS                                   (optional)
      TURN <n> NAME="<text>" RISK=<tag,tag> NOTE="<text>"
    END
    PREVIOUS_WINNER                                  (optional)
      YEAR=<int> LABEL="<text>"
      STINTS:
        TIRE=<compound> LAPS=<int>
    END

Keywords are case-insensitive. Parsing uses a single forward-moving line
cursor and never raises for malformed text: every problem is recorded as a
:class:`ParseDiagnostic` and parsing continues with the next section so a
single pass reports as many problems as possible.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

from race_strategy.core.document import StrategyDocument
from race_strategy.core.enums import (
    AeroClassification,
    OvertakingDifficulty,
    PaceClass,
    RiskProfile,
    TireCompound,
    Weather,
    choices,
)
from race_strategy.core.race import CarProfile, RaceConfig
from race_strategy.core.strategy import Stint, Strategy
from race_strategy.core.track import (
    CriticalTurn,
    PreviousWinnerStint,
    PreviousWinnerStrategy,
    TrackProfile,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

# ---------------------------------------------------------------------------
# Limits and patterns
# ---------------------------------------------------------------------------

MIN_LAPS, MAX_LAPS = 1, 100
MIN_FIELD, MAX_FIELD = 2, 30

_FLAGS = re.IGNORECASE | re.ASCII

RACE_PATTERN = re.compile(
    r"RACE\s+(\S+)\s+LAPS=(\d{1,6})\s+WEATHER=(\w+)\s+FIELD=(\d{1,6})", _FLAGS
)
CAR_PATTERN = re.compile(
    r"CAR\s+START=P(\d{1,6})\s+PACE=(\w+)\s+RISK=(\w+)(?:\s+TARGET=(?:P(\d{1,6})|NONE))?",
    _FLAGS,
)
TRACK_AERO_PATTERN = re.compile(r"TRACK\s+AERO=(\w+)", _FLAGS)
TRACK_OVERTAKING_PATTERN = re.compile(
    r"TRACK\s+OVERTAKING=(\w+)\s+CHANCE=(\d+(?:\.\d*)?|\.\d+)", _FLAGS
)
STRATEGY_START_PATTERN = re.compile(r'STRATEGY\s+"([^"]+)"', _FLAGS)
STINT_PATTERN = re.compile(r"STINT\s+(\d{1,6})\s+TIRE=(\w+)\s+LAPS=(\d{1,6})", _FLAGS)
TURN_PATTERN = re.compile(
    r'TURN\s+(\d{1,6})\s+NAME="([^"]+)"\s+RISK=(\S+)\s+NOTE="([^"]+)"', _FLAGS
)
PREVIOUS_WINNER_YEAR_PATTERN = re.compile(r'YEAR=(\d{1,6})\s+LABEL="([^"]+)"', _FLAGS)
PREVIOUS_WINNER_STINT_PATTERN = re.compile(r"TIRE=(\w+)\s+LAPS=(\d{1,6})", _FLAGS)

END_KEYWORD = "END"

LAP_MISMATCH_WARNING = (
    "Total stint laps ({stint_laps}) does not match race laps ({race_laps}). "
    "This may affect simulation accuracy."
)
WET_TIRE_WARNING = (
    "Wet weather conditions but no wet or intermediate tires selected. "
    "Consider tire choice."
)

# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParseDiagnostic:
    """A blocking problem found while parsing.

    Attributes:
        line: 1-based line number the problem was detected on.
        message: Human-readable description.
        section: DSL section name, if the problem belongs to one.
    """

    line: int
    message: str
    section: str | None = None

    def __str__(self) -> str:
        where = f"line {self.line}"
        if self.section:
            where += f" [{self.section}]"
        return f"{where}: {self.message}"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of :func:`parse_strategy`.

    Exactly one of ``document`` / ``diagnostics`` is populated: a document is
    only produced when no diagnostic was raised. ``warnings`` may be
    non-empty either way.
    """

    document: StrategyDocument | None
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    raw_text: str = ""

    @property
    def success(self) -> bool:
        return self.document is not None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Parser:
    """Single-pass section parser threading a diagnostics accumulator."""

    def __init__(self, text: str) -> None:
        self.lines: list[str] = [line.strip() for line in text.split("\n")]
        self.index: int = 0
        self.diagnostics: list[ParseDiagnostic] = []
        self.warnings: list[str] = []

        # Raw values kept even when a sibling field is invalid so that
        # cross-section checks can still run.
        self.total_laps: int | None = None
        self.field_size: int | None = None
        self.weather: Weather | None = None
        self.start_position: int | None = None
        self.car_line: int = 0

        self.race: RaceConfig | None = None
        self.car: CarProfile | None = None
        self.aero: AeroClassification | None = None
        self.overtaking: OvertakingDifficulty | None = None
        self.chance: float | None = None
        self.strategy: Strategy | None = None
        self.critical_turns: list[CriticalTurn] = []
        self.previous_winner: PreviousWinnerStrategy | None = None

    # -- Cursor helpers -----------------------------------------------------

    @property
    def at_end(self) -> bool:
        return self.index >= len(self.lines)

    @property
    def current(self) -> str:
        return self.lines[self.index]

    def error(self, message: str, section: str | None = None) -> None:
        self.diagnostics.append(ParseDiagnostic(self.index + 1, message, section))

    def skip_blank(self) -> None:
        while not self.at_end and self.current == "":
            self.index += 1

    def skip_past_end(self) -> None:
        """Advance past the next ``END`` line (or to end of input)."""
        while not self.at_end and not _is_end(self.current):
            self.index += 1
        if not self.at_end:
            self.index += 1

    def enum_value(
        self, enum_cls: type[E], raw: str, label: str, section: str
    ) -> E | None:
        """Return the *enum_cls* member spelled *raw*, or record an error."""
        try:
            return enum_cls(_enum_spelling(enum_cls, raw))
        except ValueError:
            self.error(
                f'Invalid {label}: "{raw}". Must be one of: {choices(enum_cls)}',
                section,
            )
            return None

    # -- Sections -----------------------------------------------------------

    def parse_race(self) -> None:
        self.skip_blank()
        if self.at_end:
            self.error("Missing RACE line", "RACE")
            return

        match = RACE_PATTERN.fullmatch(self.current)
        if not match:
            self.error(f'Invalid RACE line format: "{self.current}"', "RACE")
            self.index += 1
            return

        track_name, laps_raw, weather_raw, field_raw = match.groups()
        laps, field_size = int(laps_raw), int(field_raw)
        weather = self.enum_value(Weather, weather_raw, "weather", "RACE")
        laps_ok = MIN_LAPS <= laps <= MAX_LAPS
        field_ok = MIN_FIELD <= field_size <= MAX_FIELD

        if not laps_ok:
            self.error(
                f"Invalid lap count: {laps}. Must be between {MIN_LAPS} and {MAX_LAPS}",
                "RACE",
            )
        if not field_ok:
            self.error(
                f"Invalid field size: {field_size}. "
                f"Must be between {MIN_FIELD} and {MAX_FIELD}",
                "RACE",
            )

        self.total_laps, self.field_size, self.weather = laps, field_size, weather
        if weather is not None and laps_ok and field_ok:
            self.race = RaceConfig(
                track_name=track_name.upper(),
                total_laps=laps,
                weather=weather,
                field_size=field_size,
            )
        self.index += 1

    def parse_car(self) -> None:
        self.skip_blank()
        if self.at_end:
            self.error("Missing CAR line", "CAR")
            return

        match = CAR_PATTERN.fullmatch(self.current)
        if not match:
            self.error(f'Invalid CAR line format: "{self.current}"', "CAR")
            self.index += 1
            return

        start_raw, pace_raw, risk_raw, target_raw = match.groups()
        start = int(start_raw)
        pace = self.enum_value(PaceClass, pace_raw, "pace class", "CAR")
        risk = self.enum_value(RiskProfile, risk_raw, "risk profile", "CAR")

        if start < 1:
            self.error(f"Invalid starting position: P{start}. Must be at least P1", "CAR")

        self.start_position = start
        self.car_line = self.index + 1
        if pace is not None and risk is not None and start >= 1:
            self.car = CarProfile(
                starting_grid_position=start,
                pace_class=pace,
                risk_profile=risk,
                target_min_position=int(target_raw) if target_raw else None,
            )
        self.index += 1

    def parse_track(self) -> None:
        self.skip_blank()
        if self.at_end:
            self.error("Missing TRACK AERO line", "TRACK")
            return

        match = TRACK_AERO_PATTERN.fullmatch(self.current)
        if not match:
            self.error(f'Invalid TRACK AERO line format: "{self.current}"', "TRACK")
        else:
            self.aero = self.enum_value(
                AeroClassification, match.group(1), "aero classification", "TRACK"
            )
        self.index += 1

        self.skip_blank()
        if self.at_end:
            self.error("Missing TRACK OVERTAKING line", "TRACK")
            return

        match = TRACK_OVERTAKING_PATTERN.fullmatch(self.current)
        if not match:
            self.error(
                f'Invalid TRACK OVERTAKING line format: "{self.current}"', "TRACK"
            )
        else:
            difficulty_raw, chance_raw = match.groups()
            self.overtaking = self.enum_value(
                OvertakingDifficulty, difficulty_raw, "overtaking difficulty", "TRACK"
            )
            chance = float(chance_raw)
            if not 0.0 <= chance <= 1.0:
                self.error(
                    f"Invalid overtaking chance: {chance}. Must be between 0.0 and 1.0",
                    "TRACK",
                )
            else:
                self.chance = chance
        self.index += 1

    def parse_strategy(self) -> None:
        self.skip_blank()
        if self.at_end:
            self.error("Missing STRATEGY block", "STRATEGY")
            return

        match = STRATEGY_START_PATTERN.fullmatch(self.current)
        if not match:
            self.error(f'Invalid STRATEGY start line: "{self.current}"', "STRATEGY")
            self.index += 1
            return

        label = match.group(1)
        stints: list[Stint] = []
        stint_lines = 0
        self.index += 1

        while not self.at_end:
            line = self.current
            if _is_end(line):
                self.index += 1
                break
            if line == "":
                self.index += 1
                continue

            stint_match = STINT_PATTERN.fullmatch(line)
            if not stint_match:
                self.error(f'Invalid STINT line: "{line}"', "STRATEGY")
                self.index += 1
                continue

            stint_lines += 1
            number_raw, tire_raw, laps_raw = stint_match.groups()
            laps = int(laps_raw)
            tire = self.enum_value(TireCompound, tire_raw, "tire compound", "STRATEGY")
            laps_ok = MIN_LAPS <= laps <= MAX_LAPS
            if not laps_ok:
                self.error(
                    f"Invalid stint laps: {laps}. "
                    f"Must be between {MIN_LAPS} and {MAX_LAPS}",
                    "STRATEGY",
                )
            if tire is not None and laps_ok:
                stints.append(Stint(int(number_raw), tire, laps))
            self.index += 1

        if stint_lines == 0:
            self.error("STRATEGY block must contain at least one STINT", "STRATEGY")
        elif stints:
            self.strategy = Strategy(label=label, stints=tuple(stints))

    def parse_critical_turns(self) -> None:
        self.skip_blank()
        if self.at_end or self.current.upper() != "CRITICAL_TURNS":
            return
        self.index += 1

        while not self.at_end:
            line = self.current
            if _is_end(line):
                self.index += 1
                break
            if line == "":
                self.index += 1
                continue

            match = TURN_PATTERN.fullmatch(line)
            if not match:
                self.error(f'Invalid TURN line: "{line}"', "CRITICAL_TURNS")
                self.index += 1
                continue

            number_raw, name, risk_raw, note = match.groups()
            tags = tuple(tag.strip().lower() for tag in risk_raw.split(","))
            self.critical_turns.append(CriticalTurn(int(number_raw), name, tags, note))
            self.index += 1

    def parse_previous_winner(self) -> None:
        self.skip_blank()
        if self.at_end or self.current.upper() != "PREVIOUS_WINNER":
            return
        self.index += 1

        self.skip_blank()
        if self.at_end:
            self.error("PREVIOUS_WINNER block is empty", "PREVIOUS_WINNER")
            return

        match = PREVIOUS_WINNER_YEAR_PATTERN.fullmatch(self.current)
        if not match:
            self.error(
                f'Invalid PREVIOUS_WINNER year line: "{self.current}"',
                "PREVIOUS_WINNER",
            )
            self.skip_past_end()
            return

        year, label = int(match.group(1)), match.group(2)
        self.index += 1

        self.skip_blank()
        if self.at_end or self.current.upper() != "STINTS:":
            self.previous_winner = PreviousWinnerStrategy(year, label)
            self.skip_past_end()
            return
        self.index += 1

        stints: list[PreviousWinnerStint] = []
        while not self.at_end:
            line = self.current
            if _is_end(line):
                self.index += 1
                break
            if line == "":
                self.index += 1
                continue

            stint_match = PREVIOUS_WINNER_STINT_PATTERN.fullmatch(line)
            if not stint_match:
                self.error(
                    f'Invalid PREVIOUS_WINNER stint line: "{line}"', "PREVIOUS_WINNER"
                )
                self.index += 1
                continue

            tire_raw, laps_raw = stint_match.groups()
            try:
                tire = TireCompound(tire_raw.upper())
            except ValueError:
                self.error(
                    f'Invalid tire compound in PREVIOUS_WINNER: "{tire_raw}"',
                    "PREVIOUS_WINNER",
                )
            else:
                stints.append(PreviousWinnerStint(tire, int(laps_raw)))
            self.index += 1

        self.previous_winner = PreviousWinnerStrategy(year, label, tuple(stints))

    # -- Cross-section checks -----------------------------------------------

    def check_consistency(self) -> None:
        if self.total_laps is not None and self.strategy is not None:
            stint_laps = self.strategy.total_laps
            if stint_laps != self.total_laps:
                self.warnings.append(
                    LAP_MISMATCH_WARNING.format(
                        stint_laps=stint_laps, race_laps=self.total_laps
                    )
                )
            if (
                self.weather is Weather.WET
                and not self.strategy.uses_wet_weather_tires()
            ):
                self.warnings.append(WET_TIRE_WARNING)

        if (
            self.field_size is not None
            and self.start_position is not None
            and self.start_position > self.field_size
        ):
            self.diagnostics.append(
                ParseDiagnostic(
                    self.car_line,
                    f"Starting position P{self.start_position} exceeds "
                    f"field size of {self.field_size}",
                    "CAR",
                )
            )

    def build(self) -> StrategyDocument | None:
        if self.diagnostics:
            return None
        if (
            self.race is None
            or self.car is None
            or self.aero is None
            or self.overtaking is None
            or self.chance is None
            or self.strategy is None
        ):
            self.error("Missing required sections in DSL")
            return None

        track = TrackProfile(
            aero_classification=self.aero,
            overtaking_difficulty=self.overtaking,
            overtaking_chance=self.chance,
            critical_turns=tuple(self.critical_turns),
            previous_winner_strategy=self.previous_winner,
        )
        return StrategyDocument(
            race_config=self.race,
            car_profile=self.car,
            track_profile=track,
            strategy=self.strategy,
        )


def _is_end(line: str) -> bool:
    return line.upper() == END_KEYWORD


def _enum_spelling(enum_cls: type[Enum], raw: str) -> str:
    # Tyre compounds are spelled in upper case, every other enum in lower case.
    return raw.upper() if enum_cls is TireCompound else raw.lower()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_strategy(text: str) -> ParseResult:
    """Parse strategy DSL *text* into a validated document.

    Sections are parsed in their fixed order. A section whose opening line
    does not match still advances the cursor, so later sections are parsed
    and their problems reported in the same pass.

    Blocking problems (invalid enum values, race or stint lap count outside
    1-100, field outside 2-30, overtaking chance outside [0, 1], empty strategy,
    malformed lines, grid slot beyond the field) become diagnostics and no
    document is returned. A stint-lap total differing from the race
    distance and a wet race without wet-weather tyres only add warnings.

    Args:
        text: Raw DSL text.

    Returns:
        A :class:`ParseResult` holding either a document or a non-empty
        diagnostic list.
    """
    parser = _Parser(text)
    sections = (
        ("RACE", parser.parse_race),
        ("CAR", parser.parse_car),
        ("TRACK", parser.parse_track),
        ("STRATEGY", parser.parse_strategy),
        ("CRITICAL_TURNS", parser.parse_critical_turns),
        ("PREVIOUS_WINNER", parser.parse_previous_winner),
    )
    for name, parse_section in sections:
        parse_section()
        logger.debug(
            "%s section done, cursor at line %d, %d diagnostics so far",
            name,
            parser.index + 1,
            len(parser.diagnostics),
        )
    parser.check_consistency()

    parser.skip_blank()
    if not parser.at_end:
        logger.warning(
            "Ignoring unrecognised content from line %d: %r",
            parser.index + 1,
            parser.current,
        )

    document = parser.build()
    logger.info(
        "Parsed strategy DSL: success=%s diagnostics=%d warnings=%d",
        document is not None,
        len(parser.diagnostics),
        len(parser.warnings),
    )
    return ParseResult(
        document=document,
        diagnostics=list(parser.diagnostics),
        warnings=list(parser.warnings),
        raw_text=text,
    )


def validate_document(document: StrategyDocument) -> list[str]:
    """Re-check numeric ranges on an already parsed document.

    The checks are advisory: a document with issues is still usable by the
    simulation engine.

    Returns:
        Human-readable issue strings (empty when nothing was found).
    """
    race = document.race_config
    car = document.car_profile
    issues: list[str] = []

    if not MIN_LAPS <= race.total_laps <= MAX_LAPS:
        issues.append(
            f"Total laps {race.total_laps} is outside reasonable range "
            f"({MIN_LAPS}-{MAX_LAPS})"
        )
    if not MIN_FIELD <= race.field_size <= MAX_FIELD:
        issues.append(
            f"Field size {race.field_size} is outside reasonable range "
            f"({MIN_FIELD}-{MAX_FIELD})"
        )

    if car.starting_grid_position < 1:
        issues.append("Starting position must be at least P1")
    if car.target_min_position is not None:
        if car.target_min_position < 1:
            issues.append("Target position must be at least P1")
        if car.target_min_position > race.field_size:
            issues.append("Target position cannot exceed field size")

    for stint in document.strategy.stints:
        if stint.laps_in_stint < 1:
            issues.append(
                f"Stint {stint.stint_number} has invalid lap count: "
                f"{stint.laps_in_stint}"
            )
        if stint.laps_in_stint > race.total_laps:
            issues.append(
                f"Stint {stint.stint_number} laps ({stint.laps_in_stint}) "
                "exceed race length"
            )

    if not 0.0 <= document.track_profile.overtaking_chance <= 1.0:
        issues.append("Overtaking chance must be between 0.0 and 1.0")

    return issues
