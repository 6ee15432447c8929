"""Core domain model and simulation engine."""

from race_strategy.core.advisories import (
    RULES,
    SimulationWarning,
    generate_warnings,
    sort_warnings,
    stint_warnings,
)
from race_strategy.core.document import StrategyDocument, plan_summary
from race_strategy.core.enums import (
    AeroClassification,
    LapEvent,
    OvertakingDifficulty,
    PaceClass,
    RiskProfile,
    Severity,
    TireCompound,
    WarningCategory,
    Weather,
)
from race_strategy.core.race import CarProfile, RaceConfig
from race_strategy.core.race_profile import RaceProfileSummary, build_race_profile
from race_strategy.core.simulation import (
    LapRecord,
    PositionRange,
    SimulationResult,
    StintMetrics,
    simulate_race,
)
from race_strategy.core.strategy import Stint, Strategy
from race_strategy.core.tables import (
    DEFAULT_TABLES,
    CircuitData,
    DomainTables,
    PaceClassEffect,
    RiskProfileEffect,
    TireProfile,
)
from race_strategy.core.track import (
    CriticalTurn,
    PreviousWinnerStint,
    PreviousWinnerStrategy,
    TrackProfile,
)

__all__ = [
    "AeroClassification",
    "CarProfile",
    "CircuitData",
    "CriticalTurn",
    "DEFAULT_TABLES",
    "DomainTables",
    "LapEvent",
    "LapRecord",
    "OvertakingDifficulty",
    "PaceClass",
    "PaceClassEffect",
    "PositionRange",
    "PreviousWinnerStint",
    "PreviousWinnerStrategy",
    "RULES",
    "RaceConfig",
    "RaceProfileSummary",
    "RiskProfile",
    "RiskProfileEffect",
    "Severity",
    "SimulationResult",
    "SimulationWarning",
    "Stint",
    "StintMetrics",
    "Strategy",
    "StrategyDocument",
    "TireCompound",
    "TireProfile",
    "TrackProfile",
    "WarningCategory",
    "Weather",
    "build_race_profile",
    "generate_warnings",
    "plan_summary",
    "simulate_race",
    "sort_warnings",
    "stint_warnings",
]
