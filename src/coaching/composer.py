"""Composition of the system prompt sent with coaching requests.

The prompt follows a fixed template:

1. role framing
1. condensed document content per category
1. search hits and structured guides (detail mode only)
1. the caller's status
1. behavioral directives
"""

import re
from typing import Optional

import constants
from coaching.intent import Intent, classify_intent, matched_phrases
from documents.search import search_documents
from models.cache_entry import CacheSnapshot, SearchHit
from models.config import PromptConfiguration
from models.requests import CoachingContext

NUMBERED_ITEM_PATTERN = re.compile(r"^[ \t]*\d+[.)][ \t]+\S.*$", re.MULTILINE)


def detail_search_terms(message: str, config: PromptConfiguration) -> list[str]:
    """Return the message followed by every trigger phrase it contains."""
    terms = [message]
    for phrase in matched_phrases(
        message, config.ecommerce_trigger_phrases + config.detail_trigger_phrases
    ):
        if phrase not in terms:
            terms.append(phrase)
    return terms


def detail_search(
    snapshot: CacheSnapshot,
    terms: list[str],
    max_matches: int = constants.DEFAULT_MAX_MATCHES_PER_CATEGORY,
) -> list[SearchHit]:
    """
    Search for all terms and merge hits per category.

    Segments keep the order of the terms that found them, duplicates are
    dropped and each category is capped at `max_matches` segments.
    """
    merged: dict[str, list[str]] = {}
    for term in terms:
        for hit in search_documents(snapshot, term, max_matches=max_matches):
            matches = merged.setdefault(hit.category, [])
            for segment in hit.matches:
                if segment not in matches and len(matches) < max_matches:
                    matches.append(segment)
    return [
        SearchHit(category=category, matches=matches)
        for category, matches in merged.items()
    ]


def extract_numbered_items(
    text: str, limit: int = constants.DEFAULT_STRUCTURED_GUIDE_LIMIT
) -> list[str]:
    """Return first numbered lines (`1. ...`, `2) ...`) of the text."""
    return [item.strip() for item in NUMBERED_ITEM_PATTERN.findall(text)[:limit]]


def render_documents(snapshot: CacheSnapshot, categories: list[str]) -> str:
    """Render condensed content of categories that have any."""
    blocks = []
    for category in categories:
        entry = snapshot.entries.get(category)
        if entry is not None and entry.condensed_text:
            blocks.append(f"[{category.upper()}]\n{entry.condensed_text}")
    return "\n\n".join(blocks)


def render_search_hits(hits: list[SearchHit]) -> str:
    """Render search hits grouped by category."""
    blocks = []
    for hit in hits:
        segments = "\n---\n".join(hit.matches)
        blocks.append(f"FROM {hit.category.upper()}:\n{segments}")
    return "\n\n".join(blocks)


def render_structured_guides(snapshot: CacheSnapshot, limit: int) -> str:
    """Render numbered items found in raw text of every category."""
    blocks = []
    for category, entry in snapshot.entries.items():
        items = extract_numbered_items(entry.raw_text, limit)
        if items:
            blocks.append(
                f"STRUCTURED GUIDE FROM {category.upper()}:\n" + "\n".join(items)
            )
    return "\n\n".join(blocks)


def _percent(value: float) -> str:
    return f"{value:g}%"


def render_status(context: CoachingContext) -> str:
    """Render the caller's pillar values."""
    lines = [
        f"- {pillar.name}: {_percent(pillar.value)} (goal {_percent(pillar.goal)})"
        for pillar in context.pillars
    ]
    if context.overall_score is not None:
        lines.append(f"- Overall score: {_percent(context.overall_score)}")
    if context.lowest_pillar:
        lines.append(f"- Lowest pillar: {context.lowest_pillar}")
    return "\n".join(lines)


def render_directives(intent: Intent) -> str:
    """Render numbered behavioral directives."""
    directives = list(constants.BEHAVIORAL_DIRECTIVES)
    if intent is Intent.ECOMMERCE:
        directives.append(constants.ECOMMERCE_DIRECTIVE)
    return "\n".join(
        f"{number}. {directive}" for number, directive in enumerate(directives, 1)
    )


def compose_prompt(  # pylint: disable=too-many-arguments
    role_prompt: str,
    snapshot: CacheSnapshot,
    context: CoachingContext,
    intent: Intent,
    search_hits: Optional[list[SearchHit]],
    config: PromptConfiguration,
) -> str:
    """Assemble the system prompt from its parts."""
    parts = [role_prompt.strip()]

    documents = render_documents(snapshot, config.categories)
    parts.append("DOCUMENT CONTENT:\n" + (documents or "(no documents available)"))

    if search_hits:
        parts.append("SEARCH RESULTS:\n" + render_search_hits(search_hits))

    if intent.detail_mode:
        guides = render_structured_guides(snapshot, config.structured_guide_limit)
        if guides:
            parts.append(guides)

    parts.append("USER STATUS:\n" + render_status(context))
    parts.append("STRICT RULES:\n" + render_directives(intent))
    parts.append(constants.CLOSING_DIRECTIVE)
    return "\n\n".join(parts)


def build_prompt(  # pylint: disable=too-many-arguments
    message: str,
    context: CoachingContext,
    snapshot: CacheSnapshot,
    config: PromptConfiguration,
    role_prompt: str = constants.DEFAULT_SYSTEM_PROMPT,
    max_matches: int = constants.DEFAULT_MAX_MATCHES_PER_CATEGORY,
) -> str:
    """
    Build the system prompt for one coaching message.

    Document search runs only when the message is classified as a request
    for details (guide, steps or an e-commerce question).
    """
    intent = classify_intent(message, config)
    search_hits = None
    if intent.detail_mode:
        search_hits = detail_search(
            snapshot, detail_search_terms(message, config), max_matches
        )
    return compose_prompt(role_prompt, snapshot, context, intent, search_hits, config)
