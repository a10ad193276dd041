"""Bulk ingestion: text block -> embedded, stored verses.

Each non-blank line is handled independently:
1. Request an embedding
2. Upsert the verse with its vector
3. On embedding failure, upsert without a vector (degraded insert)
4. On store failure, record the line as failed and move on

No transaction spans the batch. Lines already written stay written if the
caller goes away, and re-submitting the same block is idempotent because
every write is an upsert on (chapter, verse).
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from loguru import logger

from proverbs.domain import Item, validate_group_key
from proverbs.embedding import EmbeddingProvider
from proverbs.shared.config import AppConfig
from proverbs.shared.exceptions import ProviderError, StoreError, ValidationError
from proverbs.shared.vectors import validate_vector
from proverbs.storage import VectorStore

from .dto import BatchReport, LineOutcome, LineStatus
from .parser import ParsedLine, parse_block


class IngestionPipeline:
    """Orchestrates per-line embedding and storage for a chapter.

    Per-line work runs on a bounded thread pool. Each task carries its own
    ordinal, so completion order never affects which row a line lands in.

    Example:
        >>> pipeline = IngestionPipeline(store, embedder, config)
        >>> report = pipeline.ingest_batch(3, "Trust in the LORD...\\nIn all thy ways...")
        >>> report.embedded, report.degraded, report.failed
        (2, 0, 0)
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: EmbeddingProvider,
        config: AppConfig,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.config = config

    def ingest_batch(self, group_key: int, raw_block: str) -> BatchReport:
        """Ingest a block of lines into one chapter.

        Args:
            group_key: Chapter number
            raw_block: Newline-separated verse texts; line N becomes verse N

        Returns:
            BatchReport with counts and failed verse numbers

        Raises:
            ValidationError: If the chapter is out of range or the block is not text
        """
        group_key = validate_group_key(group_key, self.config.min_chapter, self.config.max_chapter)
        if not isinstance(raw_block, str):
            raise ValidationError("Lines block must be a string")

        lines = parse_block(raw_block)
        logger.info(f"Ingesting chapter {group_key}: {len(lines)} non-blank lines")

        outcomes = self._run(lambda line: self._process_line(group_key, line), lines)
        report = BatchReport.from_outcomes(group_key, outcomes)
        self._log_report(report)
        return report

    def embed_missing(self, group_key: Optional[int] = None) -> BatchReport:
        """Retry embedding for verses stored without a vector.

        Args:
            group_key: Restrict to one chapter, or None for all chapters

        Returns:
            BatchReport; verses whose embedding fails again count as degraded
        """
        if group_key is not None:
            group_key = validate_group_key(
                group_key, self.config.min_chapter, self.config.max_chapter
            )

        items = self.store.list_missing_vectors(group_key)
        logger.info(f"Embedding {len(items)} verses without vectors")

        outcomes = self._run(self._embed_existing, items)
        report = BatchReport.from_outcomes(group_key, outcomes)
        self._log_report(report)
        return report

    def _run(self, task, inputs: List) -> List[LineOutcome]:
        if not inputs:
            return []
        workers = min(self.config.ingest_max_workers, len(inputs))
        if workers == 1:
            return [task(value) for value in inputs]
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest") as executor:
            return list(executor.map(task, inputs))

    def _embed(self, text: str):
        """Return (vector, None) or (None, reason) when the provider fails."""
        try:
            vector = self.embedder.embed(text)
            return validate_vector(vector, self.config.embedding_dim), None
        except ValidationError as e:
            return None, f"Malformed embedding: {e}"
        except ProviderError as e:
            return None, str(e) or "Embedding provider error"
        except Exception as e:
            logger.exception("Unexpected embedding failure")
            return None, f"Embedding failed: {type(e).__name__}"

    def _process_line(self, group_key: int, line: ParsedLine) -> LineOutcome:
        vector, embed_error = self._embed(line.text)
        if vector is None:
            logger.warning(
                f"Verse {group_key}:{line.ordinal} stored without vector: {embed_error}"
            )

        try:
            item = self.store.upsert_by_key(group_key, line.ordinal, line.text, vector)
        except StoreError as e:
            logger.error(f"Verse {group_key}:{line.ordinal} failed: {e}")
            return LineOutcome(
                ordinal=line.ordinal,
                status=LineStatus.FAILED,
                reason=str(e),
                group_key=group_key,
            )
        except Exception as e:
            logger.exception(f"Verse {group_key}:{line.ordinal} failed")
            return LineOutcome(
                ordinal=line.ordinal,
                status=LineStatus.FAILED,
                reason=f"Store write failed: {type(e).__name__}",
                group_key=group_key,
            )

        return LineOutcome(
            ordinal=line.ordinal,
            status=LineStatus.DEGRADED if vector is None else LineStatus.EMBEDDED,
            item_id=item.id,
            reason=embed_error,
            group_key=group_key,
        )

    def _embed_existing(self, item: Item) -> LineOutcome:
        vector, embed_error = self._embed(item.text)
        if vector is None:
            return LineOutcome(
                ordinal=item.ordinal,
                status=LineStatus.DEGRADED,
                item_id=item.id,
                reason=embed_error,
                group_key=item.group_key,
            )

        try:
            found = self.store.set_vector(item.id, vector)
        except StoreError as e:
            logger.error(f"Verse {item.group_key}:{item.ordinal} failed: {e}")
            return LineOutcome(
                ordinal=item.ordinal,
                status=LineStatus.FAILED,
                reason=str(e),
                group_key=item.group_key,
            )
        except Exception as e:
            logger.exception(f"Verse {item.group_key}:{item.ordinal} failed")
            return LineOutcome(
                ordinal=item.ordinal,
                status=LineStatus.FAILED,
                reason=f"Store write failed: {type(e).__name__}",
                group_key=item.group_key,
            )
        if not found:
            return LineOutcome(
                ordinal=item.ordinal,
                status=LineStatus.FAILED,
                reason="Item was deleted during embedding",
                group_key=item.group_key,
            )
        return LineOutcome(
            ordinal=item.ordinal,
            status=LineStatus.EMBEDDED,
            item_id=item.id,
            group_key=item.group_key,
        )

    @staticmethod
    def _log_report(report: BatchReport) -> None:
        logger.info(
            f"Batch done (chapter={report.group_key}): processed={report.processed}, "
            f"embedded={report.embedded}, degraded={report.degraded}, failed={report.failed}"
        )


__all__ = ["IngestionPipeline"]
