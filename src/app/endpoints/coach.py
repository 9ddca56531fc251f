"""Handler for REST API call to get a coaching response."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status

import constants
from cache.document_cache import DocumentCache
from client import AsyncLlamaStackClientHolder
from coaching.composer import build_prompt
from configuration import configuration
from models.requests import CoachingRequest
from models.responses import CoachingResponse
from utils.completion import CompletionError, complete, select_model_id
from utils.endpoints import (
    check_configuration_loaded,
    document_cache_dependency,
    get_system_prompt,
)

logger = logging.getLogger("app.endpoints.handlers")
router = APIRouter(tags=["coach"])


coach_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "response": "1. Find a niche: pick products with 65%+ margins...",
    },
    422: {
        "description": "Missing or malformed message or context",
    },
    500: {
        "detail": {
            "response": constants.UNABLE_TO_PROCESS_RESPONSE,
            "cause": "Connection error.",
        }
    },
}


@router.post("/coach", responses=coach_responses)
async def coach_endpoint_handler(
    coaching_request: CoachingRequest,
    document_cache: Annotated[DocumentCache, Depends(document_cache_dependency)],
) -> CoachingResponse:
    """
    Handle request to the /coach endpoint.

    Makes sure the document cache is fresh, composes the system prompt from
    condensed documents, optional search hits and the caller's status and
    forwards it together with the message to the language model.

    Returns:
        CoachingResponse: Text generated by the language model.
    """
    check_configuration_loaded(configuration)

    snapshot = await document_cache.ensure_fresh()
    system_prompt = build_prompt(
        coaching_request.message,
        coaching_request.context,
        snapshot,
        configuration.prompt_configuration,
        role_prompt=get_system_prompt(configuration),
        max_matches=configuration.search_configuration.max_matches_per_category,
    )
    logger.debug("Using system prompt: %s", system_prompt)

    inference = configuration.inference
    try:
        client = AsyncLlamaStackClientHolder().get_client()
        model_id = await select_model_id(client, inference)
        response = await complete(
            client,
            model_id,
            system_prompt,
            coaching_request.message,
            temperature=inference.temperature,
            max_tokens=inference.max_tokens,
            timeout=inference.timeout,
        )
    except CompletionError as e:
        logger.error("Unable to get coaching response: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "response": constants.UNABLE_TO_PROCESS_RESPONSE,
                "cause": str(e),
            },
        ) from e

    return CoachingResponse(response=response)
