"""Dependencies resolving the services wired onto app.state at startup."""
from fastapi import HTTPException, Request, status

from proverbs.ingestion import IngestionPipeline
from proverbs.items import ItemService
from proverbs.retrieval import RetrievalEngine
from proverbs.storage import VectorStore


def _state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return service


def get_store(request: Request) -> VectorStore:
    return _state(request, "store")


def get_item_service(request: Request) -> ItemService:
    return _state(request, "item_service")


def get_retrieval_engine(request: Request) -> RetrievalEngine:
    return _state(request, "retrieval_engine")


def get_ingestion_pipeline(request: Request) -> IngestionPipeline:
    return _state(request, "ingestion_pipeline")
