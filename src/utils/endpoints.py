"""Utility functions for endpoint handlers."""

from fastapi import HTTPException, status

import constants
from cache.document_cache import DocumentCache
from configuration import AppConfig, configuration
from log import get_logger

logger = get_logger(__name__)


def check_configuration_loaded(config: AppConfig) -> None:
    """
    Ensure the application configuration object is present and loaded.

    Raises:
        HTTPException: HTTP 500 Internal Server Error with detail `{"response":
        "Configuration is not loaded"}` when configuration is not loaded.
    """
    if config is None or not config.is_loaded():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"response": "Configuration is not loaded"},
        )


def get_system_prompt(config: AppConfig) -> str:
    """
    Resolve the role framing placed at the beginning of the coaching prompt.

    Precedence:
    1. The customization `system_prompt` (inline or loaded from
       `system_prompt_path`).
    2. Otherwise the module default `constants.DEFAULT_SYSTEM_PROMPT`.
    """
    if (
        config.customization is not None
        and config.customization.system_prompt is not None
    ):
        return config.customization.system_prompt

    # default system prompt has the lowest precedence
    return constants.DEFAULT_SYSTEM_PROMPT


def document_cache_dependency() -> DocumentCache:
    """Provide the process wide document cache to endpoint handlers."""
    check_configuration_loaded(configuration)
    return configuration.document_cache
