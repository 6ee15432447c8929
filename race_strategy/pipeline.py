"""End-to-end run: DSL text -> parsed document -> simulation result."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from race_strategy.core.simulation import SimulationResult, simulate_race
from race_strategy.core.tables import DEFAULT_TABLES, DomainTables
from race_strategy.dsl.parser import ParseResult, parse_strategy, validate_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyRun:
    """Bundle handed to downstream consumers.

    Attributes:
        parse_result: Parser outcome (document or diagnostics, warnings).
        validation_issues: Soft range issues on a parsed document.
        simulation: Simulation result, or ``None`` when parsing failed.
    """

    parse_result: ParseResult
    validation_issues: list[str] = field(default_factory=list)
    simulation: SimulationResult | None = None

    @property
    def success(self) -> bool:
        return self.simulation is not None


def run_strategy(text: str, tables: DomainTables = DEFAULT_TABLES) -> StrategyRun:
    """Parse *text* and, when it is valid, simulate the race it describes.

    Parse diagnostics stop the pipeline before simulation; they are
    returned, never raised.
    """
    parse_result = parse_strategy(text)
    document = parse_result.document
    if document is None:
        logger.info(
            "Strategy rejected with %d diagnostics", len(parse_result.diagnostics)
        )
        return StrategyRun(parse_result=parse_result)

    simulation = simulate_race(
        document.race_config,
        document.car_profile,
        document.strategy,
        document.track_profile,
        tables=tables,
    )
    return StrategyRun(
        parse_result=parse_result,
        validation_issues=validate_document(document),
        simulation=simulation,
    )
