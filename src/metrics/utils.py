"""Utility functions for metrics handling."""

import metrics
from cache.document_cache import DocumentCache


def update_document_cache_metrics(document_cache: DocumentCache) -> None:
    """
    Copy current document cache state into gauges.

    Categories without cached content are reported with zero values, so
    every configured category is always present in the output. Reading the
    state never triggers a refresh.
    """
    snapshot = document_cache.get()
    metrics.document_cache_stale.set(1 if document_cache.is_stale() else 0)
    for category in document_cache.sources:
        entry = snapshot.entries.get(category)
        metrics.document_cache_documents.labels(category).set(
            entry.document_count if entry is not None else 0
        )
        metrics.document_cache_characters.labels(category).set(
            len(entry.raw_text) if entry is not None else 0
        )
