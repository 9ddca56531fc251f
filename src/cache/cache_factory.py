"""Cache factory class."""

import constants
from cache.document_cache import DocumentCache
from client import AsyncLlamaStackClientHolder
from documents.extractor import (
    ContentExtractor,
    HeuristicExtractor,
    ModelExtractor,
)
from documents.fetcher import DocumentFetcher
from log import get_logger
from models.config import Configuration
from utils.completion import complete, select_model_id
from utils.types import CompletionFunction

logger = get_logger("cache.cache_factory")


def summary_completion(configuration: Configuration) -> CompletionFunction:
    """Create completion function used for model assisted summarization."""

    async def _complete(system_prompt: str, user_message: str) -> str:
        client = AsyncLlamaStackClientHolder().get_client()
        model_id = await select_model_id(client, configuration.inference)
        return await complete(
            client,
            model_id,
            system_prompt,
            user_message,
            temperature=constants.DEFAULT_SUMMARY_TEMPERATURE,
            max_tokens=configuration.extraction.summary_max_tokens,
            timeout=configuration.inference.timeout,
            purpose="summary",
        )

    return _complete


# pylint: disable=R0903
class CacheFactory:
    """Cache factory class."""

    @staticmethod
    def content_extractor(configuration: Configuration) -> ContentExtractor:
        """Create content extractor selected by the extraction strategy.

        Returns:
            An instance of `ContentExtractor` (either `HeuristicExtractor` or `ModelExtractor`).
        """
        config = configuration.extraction
        logger.info("Creating content extractor of type %s", config.strategy)
        match config.strategy:
            case constants.EXTRACTION_STRATEGY_HEURISTIC:
                return HeuristicExtractor(config)
            case constants.EXTRACTION_STRATEGY_MODEL:
                return ModelExtractor(config, summary_completion(configuration))
            case _:
                raise ValueError(
                    f"Invalid extraction strategy: {config.strategy}. "
                    f"Use '{constants.EXTRACTION_STRATEGY_HEURISTIC}' or "
                    f"'{constants.EXTRACTION_STRATEGY_MODEL}' options."
                )

    @staticmethod
    def document_cache(configuration: Configuration) -> DocumentCache:
        """Create an instance of DocumentCache based on loaded configuration."""
        sources = configuration.documents.configured_sources()
        logger.info(
            "Creating document cache with %d configured sources",
            sum(len(category_sources) for category_sources in sources.values()),
        )
        return DocumentCache(
            configuration.document_cache,
            sources,
            DocumentFetcher(configuration.documents),
            CacheFactory.content_extractor(configuration),
        )
