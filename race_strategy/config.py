"""Configuration loader for the domain lookup tables.

Tables are described in YAML. Every section is optional; whatever a file
provides is merged onto :data:`~race_strategy.core.tables.DEFAULT_TABLES`:

.. code-block:: yaml

    default_circuit: {base_lap_time: 85.0, pit_lane_time_loss: 22.0}
    circuits:
      MONZA: {base_lap_time: 82.0, pit_lane_time_loss: 24.0}
    tires:
      SOFT: {degradation_rate: 0.09, cliff_lap: 14}
    weather: {hot: 1.3}
    pace_classes:
      midfield: {realistic_floor: 15}
    risk_profiles:
      aggressive: {tire_management: 1.25}
    overtake_base_rates: {hard: 0.01}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, fields
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from race_strategy.core.enums import (
    OvertakingDifficulty,
    PaceClass,
    RiskProfile,
    TireCompound,
    Weather,
)
from race_strategy.core.tables import (
    DEFAULT_TABLES,
    CircuitData,
    DomainTables,
    PaceClassEffect,
    RiskProfileEffect,
    TireProfile,
    normalize_circuit_name,
)

logger = logging.getLogger(__name__)

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
TABLES_PATH: Path = DATA_DIR / "domain_tables.yaml"

_SECTIONS: tuple[str, ...] = (
    "default_circuit",
    "circuits",
    "tires",
    "weather",
    "pace_classes",
    "risk_profiles",
    "overtake_base_rates",
)

# Fields allowed to be negative (a faster-than-reference pace class).
_SIGNED_FIELDS: frozenset[str] = frozenset({"lap_time_delta"})
_INT_FIELDS: frozenset[str] = frozenset(
    {"cliff_lap", "realistic_ceiling", "realistic_floor", "typical_finish"}
)


def load_domain_tables(
    path: Path | None = None,
    base: DomainTables = DEFAULT_TABLES,
) -> DomainTables:
    """Load domain tables from a YAML file.

    Each section of the file is validated and merged onto *base*.

    Args:
        path: Optional override for the tables file path.
        base: Tables the file is merged onto.

    Returns:
        A new :class:`DomainTables` instance.

    Raises:
        FileNotFoundError: If the tables file does not exist.
        ValueError: If a section or entry is unknown, is missing fields or
            has out-of-range values.
    """
    tables_path = path or TABLES_PATH
    if not tables_path.exists():
        raise FileNotFoundError(f"Domain tables file not found: {tables_path}")

    with open(tables_path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    if not isinstance(data, Mapping):
        raise ValueError(f"{tables_path}: top level must be a mapping")

    tables = tables_from_mapping(data, base)
    logger.info("Loaded domain tables from %s", tables_path)
    return tables


def tables_from_mapping(
    data: Mapping[str, Any], base: DomainTables = DEFAULT_TABLES
) -> DomainTables:
    """Validate a parsed tables mapping and merge it onto *base*."""
    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown domain table sections: {sorted(unknown)}")

    default_circuit = base.default_circuit
    if "default_circuit" in data:
        default_circuit = _merge_entry(
            CircuitData, default_circuit, data["default_circuit"], "default_circuit"
        )

    circuit_overrides = {k: dict(v) for k, v in base.circuit_overrides.items()}
    circuit_fields = {f.name for f in fields(CircuitData)}
    for name, override in _section(data, "circuits").items():
        entry = f"circuits.{name}"
        if not isinstance(override, Mapping):
            raise ValueError(f"{entry} must be a mapping")
        bad = set(override) - circuit_fields
        if bad:
            raise ValueError(f"{entry} has unknown fields {sorted(bad)}")
        for key, value in override.items():
            _check_number(f"{entry}.{key}", key, value)
        merged = circuit_overrides.setdefault(normalize_circuit_name(str(name)), {})
        merged.update({k: float(v) for k, v in override.items()})

    tire_profiles = _merge_keyed(
        TireCompound, TireProfile, base.tire_profiles, data, "tires"
    )
    pace_classes = _merge_keyed(
        PaceClass, PaceClassEffect, base.pace_classes, data, "pace_classes"
    )
    risk_profiles = _merge_keyed(
        RiskProfile, RiskProfileEffect, base.risk_profiles, data, "risk_profiles"
    )
    weather = _merge_scalars(Weather, base.weather_multipliers, data, "weather")
    base_rates = _merge_scalars(
        OvertakingDifficulty, base.overtake_base_rates, data, "overtake_base_rates"
    )

    for compound, profile in tire_profiles.items():
        if profile.cliff_lap < 1:
            raise ValueError(f"tires.{compound.value}: cliff_lap must be >= 1")
    for pace_class, pace in pace_classes.items():
        if not pace.realistic_ceiling <= pace.typical_finish <= pace.realistic_floor:
            raise ValueError(
                f"pace_classes.{pace_class.value}: expected "
                "realistic_ceiling <= typical_finish <= realistic_floor"
            )
        if pace.defense_ability <= 0.0:
            raise ValueError(
                f"pace_classes.{pace_class.value}: defense_ability must be > 0"
            )

    return DomainTables.build(
        default_circuit=default_circuit,
        circuit_overrides=circuit_overrides,
        tire_profiles=tire_profiles,
        weather_multipliers=weather,
        pace_classes=pace_classes,
        risk_profiles=risk_profiles,
        overtake_base_rates=base_rates,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _section(data: Mapping[str, Any], name: str) -> Mapping[Any, Any]:
    section = data.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Section '{name}' must be a mapping")
    return section


def _enum_key(enum_cls: type[Enum], key: Any, section: str) -> Enum:
    try:
        return enum_cls(str(key))
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(
            f"{section}: unknown key '{key}', expected one of: {allowed}"
        ) from None


def _check_number(entry: str, field_name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{entry} must be numeric, got {type(value).__name__}")
    if field_name not in _SIGNED_FIELDS and value < 0:
        raise ValueError(f"{entry} must be >= 0, got {value}")
    if field_name in _INT_FIELDS and int(value) != value:
        raise ValueError(f"{entry} must be a whole number, got {value}")


def _merge_entry(cls: type, current: Any, override: Any, entry: str) -> Any:
    if not isinstance(override, Mapping):
        raise ValueError(f"{entry} must be a mapping")
    values = asdict(current)
    bad = set(override) - set(values)
    if bad:
        raise ValueError(f"{entry} has unknown fields {sorted(bad)}")
    for key, value in override.items():
        _check_number(f"{entry}.{key}", key, value)
        values[key] = int(value) if key in _INT_FIELDS else float(value)
    return cls(**values)


def _merge_keyed(
    enum_cls: type[Enum],
    cls: type,
    current: Mapping[Any, Any],
    data: Mapping[str, Any],
    section: str,
) -> dict[Any, Any]:
    merged = dict(current)
    for key, override in _section(data, section).items():
        member = _enum_key(enum_cls, key, section)
        merged[member] = _merge_entry(
            cls, merged[member], override, f"{section}.{member.value}"
        )
    return merged


def _merge_scalars(
    enum_cls: type[Enum],
    current: Mapping[Any, float],
    data: Mapping[str, Any],
    section: str,
) -> dict[Any, float]:
    merged = dict(current)
    for key, value in _section(data, section).items():
        member = _enum_key(enum_cls, key, section)
        _check_number(f"{section}.{member.value}", section, value)
        merged[member] = float(value)
    return merged
