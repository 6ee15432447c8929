"""Deterministic lap-time terms for the simulation engine.

Each helper returns one additive component of a lap time (seconds) or a
tyre-wear fraction; :func:`race_strategy.core.simulation.simulate_race`
combines them lap by lap.
"""

from __future__ import annotations

from race_strategy.core.tables import CircuitData, TireProfile

# Number of laps over which the post-cliff penalty ramps to full strength.
CLIFF_RAMP_LAPS: int = 10

# Stint laps during which a fresh set has not yet reached working grip.
FRESH_TIRE_LAPS: int = 3


def tire_degradation(
    profile: TireProfile,
    lap_in_stint: int,
    weather_multiplier: float,
    tire_management: float,
) -> float:
    """Return the lap-time loss caused by tyre age.

    The formula is::

        rate = degradation_rate * weather_multiplier * tire_management
        rate += degradation_rate * (cliff_multiplier - 1) * ramp
        loss = rate * lap_in_stint

    where ``ramp = min(lap_in_stint - cliff_lap, 10) / 10`` once the stint
    is past the cliff lap, and 0 before it.

    Args:
        profile: Degradation profile of the fitted compound.
        lap_in_stint: 1-based lap number within the stint.
        weather_multiplier: Weather degradation scalar.
        tire_management: Risk-profile tyre management scalar.

    Returns:
        Seconds lost this lap to tyre degradation.
    """
    rate = profile.degradation_rate * weather_multiplier * tire_management

    if lap_in_stint > profile.cliff_lap:
        laps_after_cliff = lap_in_stint - profile.cliff_lap
        cliff_extra = (
            profile.degradation_rate * profile.cliff_multiplier
            - profile.degradation_rate
        )
        rate += cliff_extra * min(laps_after_cliff, CLIFF_RAMP_LAPS) / CLIFF_RAMP_LAPS

    return rate * lap_in_stint


def tire_wear(profile: TireProfile, lap_in_stint: int) -> float:
    """Return the worn fraction of the tyre in [0, 1].

    Wear grows linearly to 1.0 at ``1.5 * cliff_lap``; past the cliff an
    extra ``0.5 * (lap - cliff) / cliff`` is added. The result is capped
    at 1.0 and never decreases within a stint.
    """
    base_wear = lap_in_stint / (profile.cliff_lap * 1.5)

    if lap_in_stint > profile.cliff_lap:
        extra_wear = (lap_in_stint - profile.cliff_lap) / profile.cliff_lap * 0.5
        return min(base_wear + extra_wear, 1.0)

    return min(base_wear, 1.0)


def fuel_effect(circuit: CircuitData, fuel_remaining: float) -> float:
    """Return the (non-positive) lap-time change from fuel already burned."""
    burned = circuit.starting_fuel_kg - fuel_remaining
    return -burned * circuit.fuel_effect_per_kg * 0.5


def burn_fuel(circuit: CircuitData, fuel_remaining: float) -> float:
    """Return the fuel left after one lap, floored at zero."""
    return max(0.0, fuel_remaining - circuit.fuel_consumption_per_lap)


def fresh_tire_penalty(profile: TireProfile, lap_in_stint: int) -> float:
    """Return the warm-up penalty of a fresh set on the first stint laps."""
    if lap_in_stint > FRESH_TIRE_LAPS:
        return 0.0
    return (1.0 - profile.initial_grip) * 2.0
