"""Ingestion layer: bulk text blocks -> stored, embedded verses."""

from .dto import BatchReport, LineFailure, LineOutcome, LineStatus
from .parser import ParsedLine, parse_block
from .pipeline import IngestionPipeline

__all__ = [
    "BatchReport",
    "LineFailure",
    "LineOutcome",
    "LineStatus",
    "ParsedLine",
    "parse_block",
    "IngestionPipeline",
]
