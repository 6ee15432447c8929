"""Render a strategy document back into canonical DSL text.

Canonical form uses upper-case keywords and compounds, lower-case enum
values, two-space indentation inside blocks and one blank line between
blocks. Parsing the output of :func:`format_document` yields an equal
document.
"""

from __future__ import annotations

from decimal import Decimal

from race_strategy.core.document import StrategyDocument

_INDENT = "  "


def format_document(document: StrategyDocument) -> str:
    """Return the canonical DSL text for *document*."""
    race = document.race_config
    car = document.car_profile
    track = document.track_profile
    strategy = document.strategy

    target = (
        f"P{car.target_min_position}"
        if car.target_min_position is not None
        else "NONE"
    )
    lines: list[str] = [
        f"RACE {race.track_name.upper()} LAPS={race.total_laps} "
        f"WEATHER={race.weather.value} FIELD={race.field_size}",
        f"CAR START=P{car.starting_grid_position} PACE={car.pace_class.value} "
        f"RISK={car.risk_profile.value} TARGET={target}",
        f"TRACK AERO={track.aero_classification.value}",
        f"TRACK OVERTAKING={track.overtaking_difficulty.value} "
        f"CHANCE={_format_chance(track.overtaking_chance)}",
        "",
        f'STRATEGY "{strategy.label}"',
    ]
    lines.extend(
        f"{_INDENT}STINT {s.stint_number} TIRE={s.tire_compound.value} "
        f"LAPS={s.laps_in_stint}"
        for s in strategy.stints
    )
    lines.append("END")

    if track.critical_turns:
        lines.extend(["", "CRITICAL_TURNS"])
        lines.extend(
            f'{_INDENT}TURN {t.turn_number} NAME="{t.name}" '
            f'RISK={",".join(t.risk_tags)} NOTE="{t.note}"'
            for t in track.critical_turns
        )
        lines.append("END")

    winner = track.previous_winner_strategy
    if winner is not None:
        lines.extend(
            ["", "PREVIOUS_WINNER", f'{_INDENT}YEAR={winner.year} LABEL="{winner.label}"']
        )
        if winner.stints:
            lines.append(f"{_INDENT}STINTS:")
            lines.extend(
                f"{_INDENT * 2}TIRE={s.tire_compound.value} LAPS={s.laps}"
                for s in winner.stints
            )
        lines.append("END")

    return "\n".join(lines) + "\n"


def _format_chance(chance: float) -> str:
    # Shortest round-tripping spelling, never in exponent notation.
    return format(Decimal(repr(chance)), "f")
