"""The validated product of parsing a strategy DSL text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from race_strategy.core.race import CarProfile, RaceConfig
from race_strategy.core.strategy import Strategy
from race_strategy.core.track import TrackProfile


@dataclass(frozen=True)
class StrategyDocument:
    """All sections of a successfully parsed strategy DSL text."""

    race_config: RaceConfig
    car_profile: CarProfile
    track_profile: TrackProfile
    strategy: Strategy


def plan_summary(document: StrategyDocument) -> dict[str, Any]:
    """Return the compact plan view persisted alongside run reports.

    Returns:
        Dictionary containing:
            race_config    -- The parsed :class:`RaceConfig`.
            car_profile    -- The parsed :class:`CarProfile`.
            strategy_label -- Strategy label (str).
            stints         -- ``[{"tire": str, "laps": int}, ...]``.
    """
    return {
        "race_config": document.race_config,
        "car_profile": document.car_profile,
        "strategy_label": document.strategy.label,
        "stints": [
            {"tire": s.tire_compound.value, "laps": s.laps_in_stint}
            for s in document.strategy.stints
        ],
    }
