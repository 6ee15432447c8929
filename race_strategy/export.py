"""Tabular and plain-data views of simulation results."""

from __future__ import annotations

from dataclasses import asdict
from enum import Enum
from typing import Any

import pandas as pd

from race_strategy.core.simulation import SimulationResult

LAP_COLUMNS: list[str] = [
    "lap_number",
    "stint_number",
    "tire_compound",
    "lap_time",
    "tire_wear",
    "fuel_load",
    "traffic_penalty",
    "position",
    "event",
    "event_detail",
]

STINT_COLUMNS: list[str] = [
    "stint_number",
    "tire_compound",
    "total_laps",
    "avg_lap_time",
    "best_lap_time",
    "worst_lap_time",
    "total_degradation_loss",
    "pit_time_loss",
    "start_position",
    "end_position",
]


def result_to_dict(result: SimulationResult) -> dict[str, Any]:
    """Return *result* as nested plain data (enums become their values)."""
    return _plain(asdict(result))


def lap_frame(result: SimulationResult) -> pd.DataFrame:
    """Return the lap trace as a DataFrame indexed by lap number."""
    rows = [_plain(asdict(lap)) for lap in result.lap_data]
    frame = pd.DataFrame(rows, columns=LAP_COLUMNS)
    return frame.set_index("lap_number")


def stint_frame(result: SimulationResult) -> pd.DataFrame:
    """Return per-stint metrics as a DataFrame indexed by stint number."""
    rows = [_plain(asdict(stint)) for stint in result.stint_metrics]
    frame = pd.DataFrame(rows, columns=STINT_COLUMNS)
    return frame.set_index("stint_number")


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
