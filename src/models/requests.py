"""Models for REST API requests."""

from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

import constants


class Pillar(BaseModel):
    """Model representing the caller's status in one life-balance pillar.

    Attributes:
        name: Pillar name, like "Financial".
        value: Current score in percents.
        goal: Target score in percents.
    """

    name: str = Field(min_length=1, description="Pillar name", examples=["Financial"])
    value: float = Field(ge=0, le=100, description="Current score", examples=[40])
    goal: float = Field(ge=0, le=100, description="Target score", examples=[80])

    model_config = {"extra": "forbid"}


class CoachingContext(BaseModel):
    """Model representing the caller's status sent with coaching request.

    Attributes:
        pillars: Status of all five pillars, in fixed order.
        overall_score: The optional overall score.
        lowest_pillar: The optional name of the weakest pillar.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    pillars: list[Pillar] = Field(
        min_length=constants.NUMBER_OF_PILLARS,
        max_length=constants.NUMBER_OF_PILLARS,
        description="Status of financial, health, relationships, growth and purpose pillars",
    )
    overall_score: Optional[float] = Field(
        None, alias="overallScore", ge=0, le=100, examples=[62.5]
    )
    lowest_pillar: Optional[str] = Field(
        None, alias="lowestPillar", examples=["Health"]
    )


class CoachingRequest(BaseModel):
    """Model representing a request for the AI coach.

    Attributes:
        message: The user's message.
        context: The caller's status metrics.

    Example:
        ```python
        coaching_request = CoachingRequest(
            message="Give me a step by step guide",
            context={"pillars": [...]},
        )
        ```
    """

    message: str = Field(
        description="The user's message",
        examples=["How do I start dropshipping, step by step?"],
    )
    context: CoachingContext

    # provides examples for /docs endpoint
    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "examples": [
                {
                    "message": "How do I start dropshipping, step by step?",
                    "context": {
                        "pillars": [
                            {"name": "Financial", "value": 40, "goal": 80},
                            {"name": "Health", "value": 70, "goal": 90},
                            {"name": "Relationships", "value": 65, "goal": 85},
                            {"name": "Growth", "value": 55, "goal": 80},
                            {"name": "Purpose", "value": 50, "goal": 75},
                        ],
                        "overallScore": 56,
                        "lowestPillar": "Financial",
                    },
                }
            ]
        },
    }

    @field_validator("message")
    @classmethod
    def check_message(cls, value: str) -> str:
        """Reject empty messages."""
        if not value.strip():
            raise ValueError("Message must not be empty")
        return value


class DocumentSearchRequest(BaseModel):
    """Model representing a document search request.

    Attributes:
        query: Substring to search for.
        category: The optional category to limit the search to.
    """

    query: str = Field(
        min_length=1, description="Substring to search for", examples=["step by step"]
    )
    category: Optional[str] = Field(
        None,
        description="The optional category to search in",
        examples=list(constants.CATEGORIES),
    )

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def check_category(self) -> Self:
        """Check that the category is one of the known categories."""
        if self.category is not None and self.category not in constants.CATEGORIES:
            raise ValueError(
                f"Unknown category '{self.category}'. "
                f"Supported categories: {', '.join(constants.CATEGORIES)}"
            )
        return self
