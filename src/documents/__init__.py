"""Document retrieval, extraction and search."""
