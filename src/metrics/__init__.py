"""Metrics module for the life coach service."""

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
)

# Counter to track REST API calls
# This will be used to count how many times each API endpoint is called
# and the status code of the response
rest_api_calls_total = Counter(
    "lc_rest_api_calls_total", "REST API calls counter", ["path", "status_code"]
)

# Histogram to measure response durations
# This will be used to track how long it takes to handle requests
response_duration_seconds = Histogram(
    "lc_response_duration_seconds", "Response durations", ["path"]
)

# Metric that counts how many LLM calls were made for each purpose + model
llm_calls_total = Counter(
    "lc_llm_calls_total", "LLM calls counter", ["purpose", "model"]
)

# Metric that counts how many LLM calls failed
llm_calls_failures_total = Counter(
    "lc_llm_calls_failures_total", "LLM calls failures", ["purpose"]
)

# Documents that could not be fetched from the document store
document_fetch_failures_total = Counter(
    "lc_document_fetch_failures_total", "Document fetch failures", ["category"]
)

# Full refresh cycles of the document cache
document_cache_refreshes_total = Counter(
    "lc_document_cache_refreshes_total", "Document cache refresh cycles"
)

# Time spent by one refresh cycle (fetch + extraction of all documents)
document_cache_refresh_duration_seconds = Histogram(
    "lc_document_cache_refresh_duration_seconds", "Document cache refresh durations"
)

# Whether the document cache has to be refreshed before next use (1) or not (0)
document_cache_stale = Gauge(
    "lc_document_cache_stale", "Document cache needs refresh before next use"
)

# Number of documents with content cached per category
document_cache_documents = Gauge(
    "lc_document_cache_documents", "Cached documents", ["category"]
)

# Size of raw document text cached per category
document_cache_characters = Gauge(
    "lc_document_cache_characters", "Cached raw text characters", ["category"]
)
