"""Deterministic two-regime position model.

Position changes are driven by small integer hashes of the lap number and
the running position instead of a random-number generator, so a given
input always produces the same race:

* lap 1 uses ``((position * 47 + 13) % 100) / 100``;
* every later lap uses ``((lap * 17 + position * 31) % 100) / 100``.

At most one place is gained or lost per regular lap. All moves respect
the pace class envelope (ceiling / floor) clipped to the field size.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from race_strategy.core.tables import PaceClassEffect, RiskProfileEffect


@dataclass(frozen=True)
class PositionChange:
    """Outcome of one lap of the position model."""

    new_position: int
    overtook: bool = False
    was_overtaken: bool = False


def start_seed(position: int) -> float:
    """Return the lap-1 pseudo-random draw in [0, 1) for *position*."""
    return (position * 47 + 13) % 100 / 100


def lap_seed(lap_number: int, position: int) -> float:
    """Return the pseudo-random draw in [0, 1) for a regular lap."""
    return (lap_number * 17 + position * 31) % 100 / 100


def envelope(pace: PaceClassEffect, field_size: int) -> tuple[int, int]:
    """Return the pace class ``(ceiling, floor)`` clipped into the field."""
    ceiling = max(1, min(pace.realistic_ceiling, field_size))
    floor = max(ceiling, min(pace.realistic_floor, field_size))
    return ceiling, floor


def first_lap_change(
    position: int,
    pace: PaceClassEffect,
    risk: RiskProfileEffect,
    field_size: int,
) -> PositionChange:
    """Apply the opening-lap shuffle.

    Cars starting further back can gain more (up to 3 places from outside
    the top 10, 2 from P6-P10, 1 from the top 5); a lost place is always a
    single one. Gains stop at the pace class ceiling.
    """
    ceiling, _ = envelope(pace, field_size)
    seed = start_seed(position)

    if position > 10:
        potential_gain = 3
    elif position > 5:
        potential_gain = 2
    else:
        potential_gain = 1

    gain_threshold = 0.3 * pace.overtaking_ability * risk.overtaking_aggressiveness
    loss_threshold = 0.15 / pace.defense_ability

    if seed < gain_threshold and position > ceiling:
        gain = min(potential_gain, math.floor(seed / gain_threshold * potential_gain) + 1)
        new_position = max(ceiling, position - gain)
        return PositionChange(new_position, overtook=new_position < position)

    if seed > 1 - loss_threshold:
        new_position = min(field_size, position + 1)
        return PositionChange(new_position, was_overtaken=new_position > position)

    return PositionChange(position)


def overtake_probability(
    position: int,
    base_rate: float,
    pace: PaceClassEffect,
    risk: RiskProfileEffect,
    field_size: int,
) -> float:
    """Return the chance of passing the car ahead on a regular lap."""
    ceiling, _ = envelope(pace, field_size)
    probability = base_rate * pace.overtaking_ability * risk.overtaking_aggressiveness

    # Cars near their ceiling are racing faster machinery.
    if position <= ceiling + 2:
        probability *= 0.1
    elif position <= ceiling + 4:
        probability *= 0.4

    if position > pace.typical_finish:
        probability *= 1.3

    return probability


def overtaken_probability(
    position: int,
    base_rate: float,
    pace: PaceClassEffect,
    field_size: int,
) -> float:
    """Return the chance of being passed by the car behind on a regular lap."""
    _, floor = envelope(pace, field_size)
    probability = base_rate * 0.5 / pace.defense_ability

    if position < pace.typical_finish - 2:
        probability *= 1.5

    if position >= floor:
        probability *= 0.3

    return probability


def regular_lap_change(
    position: int,
    lap_number: int,
    base_rate: float,
    pace: PaceClassEffect,
    risk: RiskProfileEffect,
    field_size: int,
) -> PositionChange:
    """Apply at most one place gained or lost on a regular lap."""
    ceiling, floor = envelope(pace, field_size)
    seed = lap_seed(lap_number, position)

    gain_probability = overtake_probability(position, base_rate, pace, risk, field_size)
    loss_probability = overtaken_probability(position, base_rate, pace, field_size)

    if seed < gain_probability and position > 1 and position > ceiling:
        new_position = max(ceiling, position - 1)
        return PositionChange(new_position, overtook=new_position < position)

    if seed > 1 - loss_probability and position < field_size and position < floor:
        return PositionChange(position + 1, was_overtaken=True)

    return PositionChange(position)


def position_change(
    position: int,
    lap_number: int,
    base_rate: float,
    pace: PaceClassEffect,
    risk: RiskProfileEffect,
    field_size: int,
) -> PositionChange:
    """Dispatch to the lap-1 or regular-lap regime."""
    if lap_number == 1:
        return first_lap_change(position, pace, risk, field_size)
    return regular_lap_change(position, lap_number, base_rate, pace, risk, field_size)
