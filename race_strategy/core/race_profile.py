"""Human-readable race brief derived from a track profile."""

from __future__ import annotations

from dataclasses import dataclass

from race_strategy.core.enums import AeroClassification, OvertakingDifficulty
from race_strategy.core.track import PreviousWinnerStrategy, TrackProfile

_OVERTAKING_SUMMARIES: dict[OvertakingDifficulty, str] = {
    OvertakingDifficulty.EASY: (
        "Easy overtaking (expect 2-4 on-track passes possible) - "
        "undercuts and strategy can pay off"
    ),
    OvertakingDifficulty.MEDIUM: (
        "Moderate overtaking (expect 1-2 on-track passes possible) - "
        "track position matters but strategy helps"
    ),
    OvertakingDifficulty.HARD: (
        "Hard overtaking (0-1 on-track passes likely) - "
        "track position is critical, avoid losing places in pits"
    ),
}

_AERO_DESCRIPTIONS: dict[AeroClassification, str] = {
    AeroClassification.DOWNFORCE_RELIANT: (
        "High downforce track - focus on mechanical grip and corner speed"
    ),
    AeroClassification.DRAG_RELIANT: (
        "Low downforce track - top speed and DRS zones are crucial"
    ),
    AeroClassification.BALANCED: (
        "Balanced aerodynamic requirements - versatile setup options"
    ),
}


@dataclass(frozen=True)
class RaceProfileSummary:
    """Prose summary of the circuit echoed in simulation results."""

    overtaking_chance_summary: str
    aero_classification: AeroClassification
    aero_description: str
    critical_turns_summary: tuple[str, ...]
    previous_winner_summary: str | None = None


def summarize_previous_winner(winner: PreviousWinnerStrategy) -> str:
    """Return e.g. ``2023: One-stop - MEDIUM(32) -> HARD(46)``."""
    stints = " -> ".join(f"{s.tire_compound.value}({s.laps})" for s in winner.stints)
    return f"{winner.year}: {winner.label} - {stints}"


def build_race_profile(track: TrackProfile) -> RaceProfileSummary:
    """Build the race brief for *track*."""
    winner = track.previous_winner_strategy
    return RaceProfileSummary(
        overtaking_chance_summary=_OVERTAKING_SUMMARIES[track.overtaking_difficulty],
        aero_classification=track.aero_classification,
        aero_description=_AERO_DESCRIPTIONS[track.aero_classification],
        critical_turns_summary=tuple(
            f"Turn {t.turn_number} ({t.name}): {t.note}" for t in track.critical_turns
        ),
        previous_winner_summary=(
            summarize_previous_winner(winner) if winner is not None else None
        ),
    )
