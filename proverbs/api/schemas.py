"""API request/response schemas.

Wire names are chapter/verse/similarity; the core layers call the same
things group_key/ordinal/score.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from proverbs.domain import Item
from proverbs.ingestion import BatchReport
from proverbs.retrieval import SimilarityHit


class ProverbResponse(BaseModel):
    """A stored verse"""
    id: int
    chapter: int
    verse: int
    text: str
    has_vector: bool = False
    vector: Optional[List[float]] = Field(None, description="Only present with include_vector=true")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_item(cls, item: Item, include_vector: bool = False) -> "ProverbResponse":
        return cls(
            id=item.id,
            chapter=item.group_key,
            verse=item.ordinal,
            text=item.text,
            has_vector=item.has_vector,
            vector=item.vector if include_vector else None,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class ProverbEnvelope(BaseModel):
    proverb: ProverbResponse


class ProverbListResponse(BaseModel):
    proverbs: List[ProverbResponse] = Field(default_factory=list)


class ChapterListResponse(BaseModel):
    chapters: List[int] = Field(default_factory=list)


class SearchResult(BaseModel):
    """Text search hit"""
    id: int
    chapter: int
    verse: int
    text: str

    @classmethod
    def from_item(cls, item: Item) -> "SearchResult":
        return cls(id=item.id, chapter=item.group_key, verse=item.ordinal, text=item.text)


class SimilarResult(SearchResult):
    """Similarity search hit; similarity = 1 - cosine distance"""
    similarity: float

    @classmethod
    def from_hit(cls, hit: SimilarityHit) -> "SimilarResult":
        item = hit.item
        return cls(
            id=item.id,
            chapter=item.group_key,
            verse=item.ordinal,
            text=item.text,
            similarity=hit.score,
        )


class SearchResponse(BaseModel):
    results: List[SearchResult] = Field(default_factory=list)


class SimilarResponse(BaseModel):
    results: List[SimilarResult] = Field(default_factory=list)


class SimilarRequest(BaseModel):
    """Nearest-neighbour query. Length is checked against the embedding dimension."""
    vector: Optional[List[float]] = None
    k: Optional[int] = Field(None, ge=1, description="Number of results (server-capped)")


class VectorRequest(BaseModel):
    vector: Optional[List[float]] = None


class VectorUpdateItem(BaseModel):
    id: Optional[int] = None
    vector: Optional[List[float]] = None


class BulkVectorRequest(BaseModel):
    updates: Optional[List[VectorUpdateItem]] = None


class VectorUpdateResponse(BaseModel):
    success: bool = True
    id: int


class BulkVectorResponse(BaseModel):
    success: bool = True
    updatedCount: int


class IngestRequest(BaseModel):
    """Bulk import: line N of `lines` becomes verse N of `chapter`"""
    chapter: int
    lines: str = Field(..., description="Newline-separated verse texts; blank lines leave gaps")


class EmbedMissingRequest(BaseModel):
    chapter: Optional[int] = Field(None, description="Restrict to one chapter")


class LineFailureResponse(BaseModel):
    chapter: Optional[int] = None
    verse: int
    reason: str


class BatchReportResponse(BaseModel):
    """Ingestion summary"""
    chapter: Optional[int] = None
    processed: int
    stored: int
    embedded: int
    degraded: int
    failed: int
    degraded_verses: List[int] = Field(default_factory=list)
    failed_verses: List[int] = Field(default_factory=list)
    failures: List[LineFailureResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: BatchReport) -> "BatchReportResponse":
        return cls(
            chapter=report.group_key,
            processed=report.processed,
            stored=report.stored,
            embedded=report.embedded,
            degraded=report.degraded,
            failed=report.failed,
            degraded_verses=list(report.degraded_ordinals),
            failed_verses=list(report.failed_ordinals),
            failures=[
                LineFailureResponse(chapter=f.group_key, verse=f.ordinal, reason=f.reason)
                for f in report.failures
            ],
        )


class ProverbCreateRequest(BaseModel):
    chapter: int
    verse: int
    text: str
    vector: Optional[List[float]] = None


class ProverbUpdateRequest(BaseModel):
    """Partial edit; omitted fields stay unchanged"""
    chapter: Optional[int] = None
    verse: Optional[int] = None
    text: Optional[str] = None
    vector: Optional[List[float]] = None


class DeleteResponse(BaseModel):
    success: bool = True
    id: int


class StatsResponse(BaseModel):
    proverbs: int
    embedded: int
    chapters: int


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "ok"
    store: str
    embedding_model: str
