"""Retrieval of plain text documents from the remote document store."""

import asyncio
import logging
import re

import aiohttp

import metrics
from models.config import DocumentSource, DocumentsConfiguration

logger = logging.getLogger(__name__)

# identifiers end up in URL path, only URL safe characters are accepted
DOCUMENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class DocumentFetcher:
    """Fetch plain text of one document by its identifier.

    Any failure (connection problem, timeout, non-2xx status, body that is
    not valid text in the declared charset, malformed identifier) is logged
    and reported as an empty string so one broken document never stops the
    refresh of other documents. Nothing is retried.
    """

    def __init__(self, config: DocumentsConfiguration) -> None:
        """Create a new fetcher for the configured document store."""
        self.url_template = config.url_template
        self.timeout = aiohttp.ClientTimeout(total=config.fetch_timeout)

    def document_url(self, document_id: str) -> str:
        """Construct URL of the plain text export of the document."""
        return self.url_template.format(document_id=document_id)

    async def fetch(self, source: DocumentSource) -> str:
        """Return text of the source or an empty string on any failure."""
        document_id = source.document_id
        if not source.configured or document_id is None:
            logger.debug("Skipping unconfigured source in %s", source.category)
            return ""
        if not DOCUMENT_ID_PATTERN.match(document_id):
            logger.warning(
                "Malformed document identifier %r in category %s",
                document_id,
                source.category,
            )
            metrics.document_fetch_failures_total.labels(source.category).inc()
            return ""

        url = self.document_url(document_id)
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url) as resp:
                    resp.raise_for_status()
                    text = (await resp.text()).lstrip("\ufeff")
        except aiohttp.ClientResponseError as e:
            logger.error(
                "Document %s (%s) returned HTTP %s: %s",
                document_id,
                source.category,
                e.status,
                e.message,
            )
        except aiohttp.ClientError as e:
            logger.error(
                "Unable to fetch document %s (%s): %s", document_id, source.category, e
            )
        except UnicodeDecodeError as e:
            logger.error(
                "Document %s (%s) is not valid text: %s", document_id, source.category, e
            )
        except asyncio.TimeoutError:
            logger.error(
                "Fetching document %s (%s) timed out", document_id, source.category
            )
        else:
            logger.info(
                "Fetched document %s (%s): %d characters",
                document_id,
                source.category,
                len(text),
            )
            return text

        metrics.document_fetch_failures_total.labels(source.category).inc()
        return ""
