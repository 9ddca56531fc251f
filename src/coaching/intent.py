"""Classification of coaching messages by trigger phrases."""

from enum import Enum

from models.config import PromptConfiguration


class Intent(str, Enum):
    """Kind of answer the message asks for."""

    # plain coaching conversation
    GENERAL = "general"

    # request for a guide, steps or a named procedure
    DETAIL = "detail"

    # e-commerce question, answered in detail mode as well
    ECOMMERCE = "ecommerce"

    @property
    def detail_mode(self) -> bool:
        """Check if document search should run for this intent."""
        return self in (Intent.DETAIL, Intent.ECOMMERCE)


def matched_phrases(message: str, phrases: list[str]) -> list[str]:
    """Return trigger phrases contained in the message, in configured order."""
    text = message.lower()
    return [phrase for phrase in phrases if phrase in text]


def classify_intent(message: str, config: PromptConfiguration) -> Intent:
    """
    Classify the message by keyword containment.

    E-commerce phrases take precedence over detail phrases.

    Returns:
        Intent: ECOMMERCE, DETAIL or GENERAL.
    """
    if matched_phrases(message, config.ecommerce_trigger_phrases):
        return Intent.ECOMMERCE
    if matched_phrases(message, config.detail_trigger_phrases):
        return Intent.DETAIL
    return Intent.GENERAL
