"""API routes.

Core services are synchronous (psycopg pool, blocking embedding calls), so
handlers push them onto a worker thread with anyio.
"""
from functools import partial
from typing import Optional

from anyio import to_thread
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from loguru import logger

from proverbs.auth import User, UserResponse, require_admin, verify_current_user
from proverbs.ingestion import IngestionPipeline
from proverbs.items import ItemService
from proverbs.retrieval import RetrievalEngine
from proverbs.shared.exceptions import (
    DatabaseNotConfiguredError,
    NotFoundError,
    SharedError,
    ValidationError,
)

from .dependencies import get_ingestion_pipeline, get_item_service, get_retrieval_engine
from .schemas import (
    BatchReportResponse,
    BulkVectorRequest,
    BulkVectorResponse,
    ChapterListResponse,
    DeleteResponse,
    EmbedMissingRequest,
    HealthResponse,
    IngestRequest,
    ProverbCreateRequest,
    ProverbEnvelope,
    ProverbListResponse,
    ProverbResponse,
    ProverbUpdateRequest,
    SearchResponse,
    SearchResult,
    SimilarRequest,
    SimilarResponse,
    SimilarResult,
    StatsResponse,
    VectorRequest,
    VectorUpdateResponse,
)

router = APIRouter()


def _http_error(e: SharedError, failure_detail: str) -> HTTPException:
    """Map a core exception onto an HTTP error.

    Store and provider failures are logged with their stack trace and hidden
    behind `failure_detail`.
    """
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Proverb not found")
    if isinstance(e, DatabaseNotConfiguredError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    logger.opt(exception=e).error(failure_detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail)


def _internal_error(failure_detail: str) -> HTTPException:
    # 🔒 Security: Log full error with stack trace internally, but hide details from user
    logger.exception(failure_detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail)


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check"""
    return HealthResponse(
        status="ok",
        store=request.app.state.store.backend_name,
        embedding_model=request.app.state.embedder.model_name,
    )


@router.get("/search", response_model=SearchResponse)
async def search(
    q: Optional[str] = Query(None, description="Substring to look for (case-insensitive)"),
    limit: Optional[int] = Query(None, ge=1),
    engine: RetrievalEngine = Depends(get_retrieval_engine),
) -> SearchResponse:
    try:
        items = await to_thread.run_sync(engine.search_text, q, limit)
        return SearchResponse(results=[SearchResult.from_item(item) for item in items])
    except SharedError as e:
        raise _http_error(e, "Search failed")
    except Exception:
        raise _internal_error("Search failed")


@router.post("/search/similar", response_model=SimilarResponse)
async def search_similar(
    request: SimilarRequest,
    engine: RetrievalEngine = Depends(get_retrieval_engine),
) -> SimilarResponse:
    try:
        hits = await to_thread.run_sync(engine.search_similar, request.vector, request.k)
        return SimilarResponse(results=[SimilarResult.from_hit(hit) for hit in hits])
    except SharedError as e:
        raise _http_error(e, "Similarity search failed")
    except Exception:
        raise _internal_error("Similarity search failed")


@router.get("/chapters", response_model=ChapterListResponse)
async def list_chapters(service: ItemService = Depends(get_item_service)) -> ChapterListResponse:
    try:
        return ChapterListResponse(chapters=await to_thread.run_sync(service.list_groups))
    except SharedError as e:
        raise _http_error(e, "Failed to fetch chapters")
    except Exception:
        raise _internal_error("Failed to fetch chapters")


@router.get("/proverbs", response_model=ProverbListResponse, response_model_exclude_none=True)
async def list_proverbs(
    chapter: Optional[int] = Query(None),
    include_vector: bool = Query(False),
    service: ItemService = Depends(get_item_service),
) -> ProverbListResponse:
    try:
        items = await to_thread.run_sync(service.list_items, chapter)
        return ProverbListResponse(
            proverbs=[ProverbResponse.from_item(item, include_vector) for item in items]
        )
    except SharedError as e:
        raise _http_error(e, "Failed to fetch proverbs")
    except Exception:
        raise _internal_error("Failed to fetch proverbs")


@router.get("/proverbs/{proverb_id}", response_model=ProverbEnvelope, response_model_exclude_none=True)
async def get_proverb(
    proverb_id: int,
    include_vector: bool = Query(False),
    service: ItemService = Depends(get_item_service),
) -> ProverbEnvelope:
    try:
        item = await to_thread.run_sync(service.get_item, proverb_id)
        return ProverbEnvelope(proverb=ProverbResponse.from_item(item, include_vector))
    except SharedError as e:
        raise _http_error(e, "Failed to fetch proverb")
    except Exception:
        raise _internal_error("Failed to fetch proverb")


@router.put("/proverbs/{proverb_id}/vector", response_model=VectorUpdateResponse)
async def update_vector(
    proverb_id: int,
    request: VectorRequest,
    current_user: User = Depends(require_admin),
    engine: RetrievalEngine = Depends(get_retrieval_engine),
) -> VectorUpdateResponse:
    try:
        item_id = await to_thread.run_sync(engine.set_vector, proverb_id, request.vector)
        logger.info(f"User {current_user.id} set vector of proverb {item_id}")
        return VectorUpdateResponse(success=True, id=item_id)
    except SharedError as e:
        raise _http_error(e, "Failed to update vector")
    except Exception:
        raise _internal_error("Failed to update vector")


@router.post("/proverbs/vectors", response_model=BulkVectorResponse)
async def update_vectors_bulk(
    request: BulkVectorRequest,
    current_user: User = Depends(require_admin),
    engine: RetrievalEngine = Depends(get_retrieval_engine),
) -> BulkVectorResponse:
    if request.updates is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid format. Expected { updates: [{ id, vector }] }",
        )
    updates = [(update.id, update.vector) for update in request.updates]
    try:
        updated = await to_thread.run_sync(engine.set_vectors_bulk, updates)
        logger.info(f"User {current_user.id} bulk-updated {updated} vectors")
        return BulkVectorResponse(success=True, updatedCount=updated)
    except SharedError as e:
        raise _http_error(e, "Failed to update vectors")
    except Exception:
        raise _internal_error("Failed to update vectors")


@router.post("/proverbs/ingest", response_model=BatchReportResponse)
async def ingest_chapter(
    request: IngestRequest,
    current_user: User = Depends(require_admin),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
) -> BatchReportResponse:
    """Bulk import. Per-line failures are reported, not raised."""
    try:
        report = await to_thread.run_sync(pipeline.ingest_batch, request.chapter, request.lines)
        logger.info(f"User {current_user.id} ingested chapter {request.chapter}")
        return BatchReportResponse.from_report(report)
    except SharedError as e:
        raise _http_error(e, "Failed to ingest proverbs")
    except Exception:
        raise _internal_error("Failed to ingest proverbs")


@router.post("/proverbs/embed-missing", response_model=BatchReportResponse)
async def embed_missing(
    request: EmbedMissingRequest,
    current_user: User = Depends(require_admin),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
) -> BatchReportResponse:
    """Retry embedding for verses stored without a vector."""
    try:
        report = await to_thread.run_sync(pipeline.embed_missing, request.chapter)
        return BatchReportResponse.from_report(report)
    except SharedError as e:
        raise _http_error(e, "Failed to embed proverbs")
    except Exception:
        raise _internal_error("Failed to embed proverbs")


@router.post(
    "/proverbs",
    response_model=ProverbResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_proverb(
    request: ProverbCreateRequest,
    current_user: User = Depends(require_admin),
    service: ItemService = Depends(get_item_service),
) -> ProverbResponse:
    """Create the verse, or overwrite the one at (chapter, verse)."""
    try:
        item = await to_thread.run_sync(
            service.upsert_item, request.chapter, request.verse, request.text, request.vector
        )
        return ProverbResponse.from_item(item)
    except SharedError as e:
        raise _http_error(e, "Error saving proverb")
    except Exception:
        raise _internal_error("Error saving proverb")


@router.patch("/proverbs/{proverb_id}", response_model=ProverbResponse, response_model_exclude_none=True)
async def update_proverb(
    proverb_id: int,
    request: ProverbUpdateRequest,
    current_user: User = Depends(require_admin),
    service: ItemService = Depends(get_item_service),
) -> ProverbResponse:
    try:
        item = await to_thread.run_sync(
            partial(
                service.update_item,
                proverb_id,
                group_key=request.chapter,
                ordinal=request.verse,
                text=request.text,
                vector=request.vector,
            )
        )
        return ProverbResponse.from_item(item)
    except SharedError as e:
        raise _http_error(e, "Error updating proverb")
    except Exception:
        raise _internal_error("Error updating proverb")


@router.delete("/proverbs/{proverb_id}", response_model=DeleteResponse)
async def delete_proverb(
    proverb_id: int,
    current_user: User = Depends(require_admin),
    service: ItemService = Depends(get_item_service),
) -> DeleteResponse:
    try:
        item_id = await to_thread.run_sync(service.delete_item, proverb_id)
        logger.info(f"User {current_user.id} deleted proverb {item_id}")
        return DeleteResponse(success=True, id=item_id)
    except SharedError as e:
        raise _http_error(e, "Error deleting proverb")
    except Exception:
        raise _internal_error("Error deleting proverb")


@router.get("/stats", response_model=StatsResponse)
async def stats(
    current_user: User = Depends(require_admin),
    service: ItemService = Depends(get_item_service),
) -> StatsResponse:
    try:
        counts = await to_thread.run_sync(service.stats)
        return StatsResponse(proverbs=counts.items, embedded=counts.embedded, chapters=counts.groups)
    except SharedError as e:
        raise _http_error(e, "Error loading stats")
    except Exception:
        raise _internal_error("Error loading stats")


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(verify_current_user)) -> UserResponse:
    return UserResponse(user=current_user)
