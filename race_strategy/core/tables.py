"""Read-only domain lookup tables for the simulation engine.

The engine never reads module globals directly: it receives a
:class:`DomainTables` instance (``DEFAULT_TABLES`` unless the caller injects
another one, e.g. loaded via :func:`race_strategy.config.load_domain_tables`).
All mappings are exposed as ``MappingProxyType`` views so a table cannot be
modified after construction.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType

from race_strategy.core.enums import (
    OvertakingDifficulty,
    PaceClass,
    RiskProfile,
    TireCompound,
    Weather,
)

# ---------------------------------------------------------------------------
# Table entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CircuitData:
    """Baseline timing and fuel model for a circuit.

    Attributes:
        base_lap_time: Reference lap time in seconds.
        pit_lane_time_loss: Time lost to a pit stop in seconds.
        fuel_effect_per_kg: Lap-time cost of each kg of fuel (s/kg).
        starting_fuel_kg: Fuel load at the start.
        fuel_consumption_per_lap: Fuel burned per lap (kg).
    """

    base_lap_time: float
    pit_lane_time_loss: float
    fuel_effect_per_kg: float
    starting_fuel_kg: float
    fuel_consumption_per_lap: float


@dataclass(frozen=True)
class TireProfile:
    """Degradation profile of a tyre compound.

    Attributes:
        initial_grip: Grip level of a fresh set (0-1).
        degradation_rate: Seconds lost per lap of tyre age.
        cliff_lap: Stint lap after which degradation accelerates.
        cliff_multiplier: Degradation multiplier reached 10 laps past the cliff.
    """

    initial_grip: float
    degradation_rate: float
    cliff_lap: int
    cliff_multiplier: float


@dataclass(frozen=True)
class PaceClassEffect:
    """Performance envelope of a pace class.

    ``realistic_ceiling`` and ``realistic_floor`` bound every simulated
    outcome: a car never finishes better than its ceiling or worse than its
    floor.
    """

    lap_time_delta: float
    overtaking_ability: float
    defense_ability: float
    realistic_ceiling: int
    realistic_floor: int
    typical_finish: int


@dataclass(frozen=True)
class RiskProfileEffect:
    """Behavioural multipliers of a risk profile."""

    overtaking_aggressiveness: float
    tire_management: float
    pit_stop_efficiency: float


# ---------------------------------------------------------------------------
# Built-in data
# ---------------------------------------------------------------------------

DEFAULT_CIRCUIT = CircuitData(
    base_lap_time=85.0,
    pit_lane_time_loss=22.0,
    fuel_effect_per_kg=0.035,
    starting_fuel_kg=110.0,
    fuel_consumption_per_lap=1.8,
)

# Overrides are merged onto DEFAULT_CIRCUIT; keys are normalised names.
_CIRCUIT_OVERRIDES: dict[str, dict[str, float]] = {
    "MONZA": {"base_lap_time": 82.0, "pit_lane_time_loss": 24.0},
    "MONACO": {"base_lap_time": 73.0, "pit_lane_time_loss": 18.0},
    "SPA": {"base_lap_time": 105.0, "pit_lane_time_loss": 21.0},
    "SILVERSTONE": {"base_lap_time": 88.0, "pit_lane_time_loss": 20.0},
    "SUZUKA": {"base_lap_time": 91.0, "pit_lane_time_loss": 22.0},
    "BAHRAIN": {"base_lap_time": 90.0, "pit_lane_time_loss": 21.0},
    "JEDDAH": {"base_lap_time": 88.0, "pit_lane_time_loss": 23.0},
    "MELBOURNE": {"base_lap_time": 79.0, "pit_lane_time_loss": 24.0},
    "IMOLA": {"base_lap_time": 76.0, "pit_lane_time_loss": 25.0},
    "MIAMI": {"base_lap_time": 89.0, "pit_lane_time_loss": 22.0},
    "BARCELONA": {"base_lap_time": 78.0, "pit_lane_time_loss": 21.0},
    "MONTREAL": {"base_lap_time": 73.0, "pit_lane_time_loss": 23.0},
    "AUSTRIA": {"base_lap_time": 65.0, "pit_lane_time_loss": 20.0},
    "BUDAPEST": {"base_lap_time": 77.0, "pit_lane_time_loss": 21.0},
    "ZANDVOORT": {"base_lap_time": 72.0, "pit_lane_time_loss": 18.0},
    "SINGAPORE": {"base_lap_time": 94.0, "pit_lane_time_loss": 26.0},
    "AUSTIN": {"base_lap_time": 96.0, "pit_lane_time_loss": 22.0},
    "MEXICO": {"base_lap_time": 78.0, "pit_lane_time_loss": 20.0},
    "INTERLAGOS": {"base_lap_time": 72.0, "pit_lane_time_loss": 22.0},
    "VEGAS": {"base_lap_time": 93.0, "pit_lane_time_loss": 23.0},
    "QATAR": {"base_lap_time": 84.0, "pit_lane_time_loss": 21.0},
    "ABUDHABI": {"base_lap_time": 85.0, "pit_lane_time_loss": 20.0},
}

_TIRE_PROFILES: dict[TireCompound, TireProfile] = {
    TireCompound.SOFT: TireProfile(1.0, 0.08, 15, 2.5),
    TireCompound.MEDIUM: TireProfile(0.97, 0.05, 25, 2.0),
    TireCompound.HARD: TireProfile(0.94, 0.03, 40, 1.8),
    TireCompound.INTERMEDIATE: TireProfile(0.95, 0.04, 30, 2.0),
    TireCompound.WET: TireProfile(0.92, 0.035, 35, 1.5),
}

_WEATHER_MULTIPLIERS: dict[Weather, float] = {
    Weather.COOL: 0.85,
    Weather.NORMAL: 1.0,
    Weather.HOT: 1.25,
    Weather.WET: 1.1,
}

_PACE_CLASSES: dict[PaceClass, PaceClassEffect] = {
    PaceClass.FRONT_RUNNER: PaceClassEffect(-1.5, 1.4, 1.5, 1, 6, 3),
    PaceClass.MIDFIELD: PaceClassEffect(0.0, 1.0, 1.0, 5, 14, 9),
    PaceClass.BACKMARKER: PaceClassEffect(1.2, 0.6, 0.7, 10, 20, 16),
}

_RISK_PROFILES: dict[RiskProfile, RiskProfileEffect] = {
    RiskProfile.CONSERVATIVE: RiskProfileEffect(0.7, 0.85, 0.98),
    RiskProfile.BALANCED: RiskProfileEffect(1.0, 1.0, 1.0),
    RiskProfile.AGGRESSIVE: RiskProfileEffect(1.4, 1.2, 1.05),
}

# Per-lap base overtaking rate by difficulty.
_OVERTAKE_BASE_RATES: dict[OvertakingDifficulty, float] = {
    OvertakingDifficulty.EASY: 0.04,
    OvertakingDifficulty.MEDIUM: 0.025,
    OvertakingDifficulty.HARD: 0.012,
}

_NON_LETTERS = re.compile(r"[^A-Z]")


def normalize_circuit_name(name: str) -> str:
    """Upper-case *name* and strip every non-letter character."""
    return _NON_LETTERS.sub("", name.upper())


# ---------------------------------------------------------------------------
# Table container
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DomainTables:
    """Immutable bundle of every lookup table the engine consumes."""

    default_circuit: CircuitData
    circuit_overrides: Mapping[str, Mapping[str, float]]
    tire_profiles: Mapping[TireCompound, TireProfile]
    weather_multipliers: Mapping[Weather, float]
    pace_classes: Mapping[PaceClass, PaceClassEffect]
    risk_profiles: Mapping[RiskProfile, RiskProfileEffect]
    overtake_base_rates: Mapping[OvertakingDifficulty, float]

    @classmethod
    def build(
        cls,
        default_circuit: CircuitData,
        circuit_overrides: Mapping[str, Mapping[str, float]],
        tire_profiles: Mapping[TireCompound, TireProfile],
        weather_multipliers: Mapping[Weather, float],
        pace_classes: Mapping[PaceClass, PaceClassEffect],
        risk_profiles: Mapping[RiskProfile, RiskProfileEffect],
        overtake_base_rates: Mapping[OvertakingDifficulty, float],
    ) -> DomainTables:
        """Copy the given mappings into read-only views and build tables."""
        overrides = {
            normalize_circuit_name(name): MappingProxyType(dict(values))
            for name, values in circuit_overrides.items()
        }
        return cls(
            default_circuit=default_circuit,
            circuit_overrides=MappingProxyType(overrides),
            tire_profiles=MappingProxyType(dict(tire_profiles)),
            weather_multipliers=MappingProxyType(dict(weather_multipliers)),
            pace_classes=MappingProxyType(dict(pace_classes)),
            risk_profiles=MappingProxyType(dict(risk_profiles)),
            overtake_base_rates=MappingProxyType(dict(overtake_base_rates)),
        )

    def circuit(self, track_name: str) -> CircuitData:
        """Return circuit data for *track_name*, falling back to defaults."""
        override = self.circuit_overrides.get(normalize_circuit_name(track_name))
        if not override:
            return self.default_circuit
        return replace(self.default_circuit, **override)

    def tire(self, compound: TireCompound) -> TireProfile:
        return self.tire_profiles[compound]

    def weather_multiplier(self, weather: Weather) -> float:
        """Return the degradation multiplier for *weather* (1.0 if unknown)."""
        return self.weather_multipliers.get(weather, 1.0)

    def pace(self, pace_class: PaceClass) -> PaceClassEffect:
        return self.pace_classes[pace_class]

    def risk(self, risk_profile: RiskProfile) -> RiskProfileEffect:
        return self.risk_profiles[risk_profile]

    def overtake_base_rate(self, difficulty: OvertakingDifficulty) -> float:
        return self.overtake_base_rates.get(
            difficulty, _OVERTAKE_BASE_RATES[OvertakingDifficulty.MEDIUM]
        )


DEFAULT_TABLES: DomainTables = DomainTables.build(
    default_circuit=DEFAULT_CIRCUIT,
    circuit_overrides=_CIRCUIT_OVERRIDES,
    tire_profiles=_TIRE_PROFILES,
    weather_multipliers=_WEATHER_MULTIPLIERS,
    pace_classes=_PACE_CLASSES,
    risk_profiles=_RISK_PROFILES,
    overtake_base_rates=_OVERTAKE_BASE_RATES,
)
