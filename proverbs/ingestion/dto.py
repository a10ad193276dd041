"""Ingestion Data Transfer Objects.

A batch is folded into a BatchReport: per-line outcomes are counted and
failures listed by ordinal. Partial failure is a normal report, not an
exception.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional


class LineStatus(str, Enum):
    EMBEDDED = "embedded"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass(frozen=True)
class LineOutcome:
    """Result of processing one line.

    Attributes:
        ordinal: Line position (verse number)
        status: embedded (stored with vector), degraded (stored without), failed (not stored)
        group_key: Chapter of the line
        item_id: Id of the stored item, None when failed
        reason: Why the line degraded or failed
    """

    ordinal: int
    status: LineStatus
    group_key: int
    item_id: Optional[int] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class LineFailure:
    ordinal: int
    reason: str
    group_key: Optional[int] = None


@dataclass
class BatchReport:
    """Summary of one ingestion batch.

    Attributes:
        group_key: Chapter the batch was written to (None for cross-chapter jobs)
        processed: Non-blank lines attempted
        stored: Lines inserted or updated (embedded + degraded)
        embedded: Lines stored with a vector
        degraded: Lines stored without a vector because embedding failed
        failures: Lines that could not be stored, ordered by ordinal
        degraded_ordinals: Ordinals stored without a vector, ascending
    """

    group_key: Optional[int]
    processed: int = 0
    stored: int = 0
    embedded: int = 0
    degraded: int = 0
    failures: List[LineFailure] = field(default_factory=list)
    degraded_ordinals: List[int] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def failed_ordinals(self) -> List[int]:
        return [f.ordinal for f in self.failures]

    @property
    def ok(self) -> bool:
        return not self.failures

    @classmethod
    def from_outcomes(cls, group_key: Optional[int], outcomes: Iterable[LineOutcome]) -> "BatchReport":
        report = cls(group_key=group_key)
        for outcome in sorted(outcomes, key=lambda o: (o.group_key, o.ordinal)):
            report.processed += 1
            if outcome.status is LineStatus.FAILED:
                report.failures.append(
                    LineFailure(
                        ordinal=outcome.ordinal,
                        reason=outcome.reason or "unknown error",
                        group_key=outcome.group_key,
                    )
                )
                continue
            report.stored += 1
            if outcome.status is LineStatus.EMBEDDED:
                report.embedded += 1
            else:
                report.degraded += 1
                report.degraded_ordinals.append(outcome.ordinal)
        return report


__all__ = ["LineStatus", "LineOutcome", "LineFailure", "BatchReport"]
