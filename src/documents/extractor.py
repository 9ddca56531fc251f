"""Content extractors deriving condensed text from raw document text.

Two interchangeable strategies exist:

1. `HeuristicExtractor` keeps "key sections": a section starts at a
heading-like line (numbered item, bullet, short title-cased `Title:` line or
a line containing one of the marker keywords as a whole word, in any letter
case and optionally in plural, e.g. "steps" for "Step") and collects the
following non-empty lines until the next heading.
1. `ModelExtractor` asks the completion capability to extract key actionable
points from long documents and falls back to a truncated prefix when the
model is not available.

Both are pure functions of text, category and configuration.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional, Pattern

import constants
from log import get_logger
from models.config import ExtractionConfiguration
from utils.completion import CompletionError
from utils.types import CompletionFunction

logger = get_logger(__name__)


NUMBERED_LINE_PATTERN = re.compile(r"^\d+[.)]\s+\S")
BULLET_LINE_PATTERN = re.compile(r"^[-*•]\s+\S")
TITLE_WORD_PATTERN = re.compile(r"[^\W\d_][\w'-]*")


def marker_keywords_pattern(marker_keywords: list[str]) -> Optional[Pattern[str]]:
    """Compile whole-word, case-insensitive pattern matching any marker keyword.

    Plural forms ending with "s" match too.
    """
    keywords = [re.escape(keyword) for keyword in marker_keywords if keyword]
    if not keywords:
        return None
    return re.compile(r"\b(?:" + "|".join(keywords) + r")s?\b", re.IGNORECASE)


def is_title(text: str) -> bool:
    """Check if all words are capitalized, except minor words after the first."""
    words = TITLE_WORD_PATTERN.findall(text)
    if not words or not words[0][0].isupper():
        return False
    return all(
        word[0].isupper() or word.lower() in constants.TITLE_MINOR_WORDS
        for word in words[1:]
    )


def is_heading(line: str, keywords_pattern: Optional[Pattern[str]]) -> bool:
    """Check if the stripped line opens a new key section."""
    if NUMBERED_LINE_PATTERN.match(line) or BULLET_LINE_PATTERN.match(line):
        return True
    if (
        len(line) <= constants.MAX_TITLE_HEADING_LENGTH
        and line.endswith(":")
        and is_title(line[:-1])
    ):
        return True
    return keywords_pattern is not None and keywords_pattern.search(line) is not None


def extract_key_sections(
    text: str,
    max_length: int = constants.DEFAULT_EXTRACTION_MAX_LENGTH,
    marker_keywords: Optional[list[str]] = None,
) -> str:
    """
    Extract heading-led sections from text.

    Lines before the first heading are dropped. Accumulation stops as soon
    as the output grows over `max_length` characters, the section open at
    that moment is still part of the output.

    Returns:
        str: Sections separated by blank lines, empty string when no heading
        was found.
    """
    if marker_keywords is None:
        marker_keywords = list(constants.DEFAULT_MARKER_KEYWORDS)
    keywords_pattern = marker_keywords_pattern(marker_keywords)

    sections: list[str] = []
    sections_length = 0
    current: list[str] = []
    current_length = 0

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if is_heading(line, keywords_pattern):
            if current:
                sections.append("\n".join(current))
                sections_length += current_length + (2 if len(sections) > 1 else 0)
            current = [line]
            current_length = len(line)
        elif current:
            current.append(line)
            current_length += len(line) + 1
        else:
            continue

        separator = 2 if sections else 0
        if sections_length + separator + current_length > max_length:
            logger.debug("Extraction stopped after %d characters", max_length)
            break

    if current:
        sections.append("\n".join(current))
    return "\n\n".join(sections)


def truncate(text: str, length: int) -> str:
    """Return prefix of the text followed by truncation marker."""
    if len(text) <= length:
        return text
    return text[:length] + constants.TRUNCATION_MARKER


async def summarize_with_model(
    text: str,
    category: str,
    config: ExtractionConfiguration,
    completion: CompletionFunction,
) -> str:
    """
    Summarize long text with the completion capability.

    Text shorter than `summarize_threshold` is returned unchanged. Only the
    first `summarize_prefix_length` characters are sent to the model. When
    the model fails or answers with nothing, truncated raw text is used.
    """
    if len(text) < config.summarize_threshold:
        return text

    prompt = constants.SUMMARIZATION_PROMPT.format(
        category=category, text=text[: config.summarize_prefix_length]
    )
    try:
        summary = await completion(constants.SUMMARIZATION_SYSTEM_PROMPT, prompt)
    except CompletionError as e:
        logger.warning(
            "Summarization of %s content failed, using truncated text: %s", category, e
        )
        return truncate(text, config.fallback_length)

    summary = summary.strip()
    if not summary:
        logger.warning("Model returned empty summary for %s content", category)
        return truncate(text, config.fallback_length)
    return summary


class ContentExtractor(ABC):  # pylint: disable=too-few-public-methods
    """Base class for all content extractors."""

    @abstractmethod
    async def extract(self, text: str, category: str) -> str:
        """Return condensed representation of the text."""


class HeuristicExtractor(ContentExtractor):  # pylint: disable=too-few-public-methods
    """Extractor keeping key sections found by heading heuristics."""

    def __init__(self, config: ExtractionConfiguration) -> None:
        """Create a new heuristic extractor."""
        self.config = config

    async def extract(self, text: str, category: str) -> str:
        """Return key sections of the text."""
        condensed = extract_key_sections(
            text, self.config.max_length, self.config.marker_keywords
        )
        logger.debug(
            "Extracted %d of %d characters from %s content",
            len(condensed),
            len(text),
            category,
        )
        return condensed


class ModelExtractor(ContentExtractor):  # pylint: disable=too-few-public-methods
    """Extractor delegating summarization to the language model."""

    def __init__(
        self, config: ExtractionConfiguration, completion: CompletionFunction
    ) -> None:
        """Create a new model assisted extractor."""
        self.config = config
        self.completion = completion

    async def extract(self, text: str, category: str) -> str:
        """Return model summary of the text."""
        return await summarize_with_model(text, category, self.config, self.completion)
