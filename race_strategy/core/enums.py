"""Closed vocabularies shared by the DSL parser and the simulation engine.

Every enum subclasses ``str`` so members compare equal to (and serialise
as) their DSL spelling.
"""

from __future__ import annotations

from enum import Enum


class Weather(str, Enum):
    """Race-day conditions."""

    COOL = "cool"
    NORMAL = "normal"
    HOT = "hot"
    WET = "wet"


class PaceClass(str, Enum):
    """Relative performance tier of the car."""

    FRONT_RUNNER = "front_runner"
    MIDFIELD = "midfield"
    BACKMARKER = "backmarker"


class RiskProfile(str, Enum):
    """Driving and strategy risk appetite."""

    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class OvertakingDifficulty(str, Enum):
    """How hard it is to pass on track."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class AeroClassification(str, Enum):
    """Dominant aerodynamic demand of the circuit."""

    DOWNFORCE_RELIANT = "downforce_reliant"
    DRAG_RELIANT = "drag_reliant"
    BALANCED = "balanced"


class TireCompound(str, Enum):
    """Tyre compounds, spelled in upper case as in the DSL."""

    SOFT = "SOFT"
    MEDIUM = "MEDIUM"
    HARD = "HARD"
    INTERMEDIATE = "INTERMEDIATE"
    WET = "WET"

    @property
    def is_wet_weather(self) -> bool:
        return self in (TireCompound.INTERMEDIATE, TireCompound.WET)


class LapEvent(str, Enum):
    """Event tag attached to a simulated lap."""

    START = "start"
    PIT_STOP = "pit_stop"
    OVERTAKE = "overtake"
    OVERTAKEN = "overtaken"


class WarningCategory(str, Enum):
    """Area a simulation advisory is about."""

    TIRE = "tire"
    STRATEGY = "strategy"
    TRAFFIC = "traffic"
    TRACK = "track"
    WEATHER = "weather"


class Severity(str, Enum):
    """Advisory severity, ranked by :attr:`rank` (higher is more severe)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


def choices(enum_cls: type[Enum]) -> str:
    """Return the comma-separated spellings of *enum_cls* for messages."""
    return ", ".join(member.value for member in enum_cls)
