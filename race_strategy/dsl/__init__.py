"""Strategy DSL: parser, canonical formatter and reference text."""

from race_strategy.dsl.formatter import format_document
from race_strategy.dsl.parser import (
    ParseDiagnostic,
    ParseResult,
    parse_strategy,
    validate_document,
)

__all__ = [
    "ParseDiagnostic",
    "ParseResult",
    "format_document",
    "parse_strategy",
    "validate_document",
]
