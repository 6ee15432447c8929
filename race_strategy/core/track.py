"""Track profile model: aero demand, overtaking and notable corners."""

from __future__ import annotations

from dataclasses import dataclass, field

from race_strategy.core.enums import (
    AeroClassification,
    OvertakingDifficulty,
    TireCompound,
)


@dataclass(frozen=True)
class CriticalTurn:
    """A corner worth calling out in the race brief.

    Attributes:
        turn_number: Official turn number.
        name: Corner name.
        risk_tags: Lower-case risk tags (e.g. ``tire_stress``).
        note: Free-text engineering note.
    """

    turn_number: int
    name: str
    risk_tags: tuple[str, ...]
    note: str

    def has_tag(self, tag: str) -> bool:
        return tag in self.risk_tags


@dataclass(frozen=True)
class PreviousWinnerStint:
    """One stint of a historical winning strategy."""

    tire_compound: TireCompound
    laps: int


@dataclass(frozen=True)
class PreviousWinnerStrategy:
    """Strategy used by a previous winner at this circuit."""

    year: int
    label: str
    stints: tuple[PreviousWinnerStint, ...] = ()


@dataclass(frozen=True)
class TrackProfile:
    """Immutable description of the circuit's racing characteristics.

    Attributes:
        aero_classification: Dominant aerodynamic demand.
        overtaking_difficulty: Qualitative passing difficulty.
        overtaking_chance: Numeric passing chance in [0, 1].
        critical_turns: Notable corners in lap order.
        previous_winner_strategy: Optional historical reference strategy.
    """

    aero_classification: AeroClassification
    overtaking_difficulty: OvertakingDifficulty
    overtaking_chance: float
    critical_turns: tuple[CriticalTurn, ...] = field(default_factory=tuple)
    previous_winner_strategy: PreviousWinnerStrategy | None = None
