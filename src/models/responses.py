"""Models for REST API responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class CoachingResponse(BaseModel):
    """Model representing the AI coach response.

    Attributes:
        response: Text generated by the language model.
    """

    response: str = Field(
        description="Response from the AI coach",
        examples=["1. Find a niche: pick products with 65%+ margins..."],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "response": "1. Find a niche: pick products with 65%+ margins...",
                }
            ]
        }
    }


class DocumentCategoryStatus(BaseModel):
    """Model representing cached content of one category.

    Attributes:
        loaded: True when the category has any text.
        document_count: Number of sources with fetched text.
        configured_count: Number of enabled sources with identifier.
        character_count: Length of the raw text.
    """

    loaded: bool = Field(description="Category has content", examples=[True])
    document_count: int = Field(description="Fetched documents", examples=[2])
    configured_count: int = Field(
        0, description="Configured documents", examples=[2]
    )
    character_count: int = Field(description="Raw text length", examples=[15230])


class DocumentStatusResponse(BaseModel):
    """Model representing status of the document cache."""

    categories: dict[str, DocumentCategoryStatus] = Field(
        description="Status per category",
        examples=[
            {
                "financial": {
                    "loaded": True,
                    "document_count": 2,
                    "configured_count": 2,
                    "character_count": 15230,
                },
                "health": {
                    "loaded": False,
                    "document_count": 0,
                    "configured_count": 1,
                    "character_count": 0,
                },
            }
        ],
    )
    last_refreshed_at: Optional[datetime] = Field(
        None, description="Time of the last refresh cycle"
    )
    stale: bool = Field(description="Next request will refresh the cache")


class DocumentRefreshResponse(BaseModel):
    """Model representing result of forced document refresh."""

    categories_loaded: list[str] = Field(
        description="Categories with content after the refresh",
        examples=[["financial", "purpose"]],
    )
    refreshed_at: Optional[datetime] = Field(
        None, description="Time of the refresh cycle"
    )


class LivenessResponse(BaseModel):
    """Model representing a response to a liveness request.

    Attributes:
        alive: If app is alive.
    """

    alive: bool = Field(description="Flag indicating that the app is alive")

    model_config = {"json_schema_extra": {"examples": [{"alive": True}]}}


class ReadinessResponse(BaseModel):
    """Model representing response to a readiness request.

    Attributes:
        ready: If service is ready.
        reason: The reason for the readiness.
        checks: Startup checks and their results.
    """

    ready: bool = Field(description="Flag indicating if service is ready")
    reason: str = Field(description="The reason for the readiness")
    checks: dict[str, Any] = Field(
        default_factory=dict, description="Startup checks and their results"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "ready": True,
                    "reason": "Service is ready",
                    "checks": {"configuration_loaded": True},
                }
            ]
        }
    }
