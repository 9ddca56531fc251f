"""Handlers for REST API calls working with cached documents."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from cache.document_cache import DocumentCache
from configuration import configuration
from documents.search import search_documents
from models.cache_entry import SearchHit
from models.requests import DocumentSearchRequest
from models.responses import (
    DocumentCategoryStatus,
    DocumentRefreshResponse,
    DocumentStatusResponse,
)
from utils.endpoints import document_cache_dependency

logger = logging.getLogger("app.endpoints.handlers")
router = APIRouter(prefix="/documents", tags=["documents"])


search_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "Matching segments per category",
        "model": list[SearchHit],
    },
    422: {"description": "Empty query or unknown category"},
}


@router.post("/search", responses=search_responses)
async def document_search_endpoint_handler(
    search_request: DocumentSearchRequest,
    document_cache: Annotated[DocumentCache, Depends(document_cache_dependency)],
) -> list[SearchHit]:
    """
    Handle request to the /documents/search endpoint.

    Refreshes stale cache first, then returns segments of raw document text
    containing the query, grouped by category.
    """
    snapshot = await document_cache.ensure_fresh()
    hits = search_documents(
        snapshot,
        search_request.query,
        search_request.category,
        configuration.search_configuration.max_matches_per_category,
    )
    logger.info(
        "Search for %r found matches in %d categories",
        search_request.query,
        len(hits),
    )
    return hits


@router.get("/status", response_model=DocumentStatusResponse)
async def document_status_endpoint_handler(
    document_cache: Annotated[DocumentCache, Depends(document_cache_dependency)],
) -> DocumentStatusResponse:
    """
    Handle request to the /documents/status endpoint.

    Reports cached content per category without triggering refresh.
    """
    snapshot = document_cache.get()
    categories = {}
    for category in document_cache.sources:
        entry = snapshot.entries.get(category)
        categories[category] = DocumentCategoryStatus(
            loaded=entry is not None and entry.loaded,
            document_count=entry.document_count if entry is not None else 0,
            configured_count=document_cache.configured_document_count(category),
            character_count=len(entry.raw_text) if entry is not None else 0,
        )
    return DocumentStatusResponse(
        categories=categories,
        last_refreshed_at=snapshot.refreshed_at,
        stale=document_cache.is_stale(),
    )


@router.post("/refresh", response_model=DocumentRefreshResponse)
async def document_refresh_endpoint_handler(
    document_cache: Annotated[DocumentCache, Depends(document_cache_dependency)],
) -> DocumentRefreshResponse:
    """
    Handle request to the /documents/refresh endpoint.

    Invalidates the cache and refetches all documents.
    """
    logger.info("Forced document refresh requested")
    snapshot = await document_cache.refresh()
    return DocumentRefreshResponse(
        categories_loaded=[
            category for category, entry in snapshot.entries.items() if entry.loaded
        ],
        refreshed_at=snapshot.refreshed_at,
    )
