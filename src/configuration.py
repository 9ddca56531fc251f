"""Configuration loader."""

import logging
from typing import Any, Optional

# We want to support environment variable replacement in the configuration
# similarly to how it is done in llama-stack, so we use their function directly
from llama_stack.core.stack import replace_env_vars

import yaml
from models.config import (
    Configuration,
    Customization,
    DocumentCacheConfiguration,
    DocumentsConfiguration,
    ExtractionConfiguration,
    InferenceConfiguration,
    LlamaStackConfiguration,
    PromptConfiguration,
    SearchConfiguration,
    ServiceConfiguration,
)

from cache.cache_factory import CacheFactory
from cache.document_cache import DocumentCache


logger = logging.getLogger(__name__)


class LogicError(Exception):
    """Error in application logic."""


class AppConfig:
    """Singleton class to load and store the configuration."""

    _instance = None

    def __new__(cls, *args: Any, **kwargs: Any) -> "AppConfig":
        """Create a new instance of the class."""
        if not isinstance(cls._instance, cls):
            cls._instance = super().__new__(cls, *args, **kwargs)
        return cls._instance

    def __init__(self) -> None:
        """Initialize the class instance."""
        self._configuration: Optional[Configuration] = None
        self._document_cache: Optional[DocumentCache] = None

    def load_configuration(self, filename: str) -> None:
        """Load configuration from YAML file."""
        with open(filename, encoding="utf-8") as fin:
            config_dict = yaml.safe_load(fin)
            config_dict = replace_env_vars(config_dict)
            logger.info("Loaded configuration: %s", config_dict)
            self.init_from_dict(config_dict)

    def init_from_dict(self, config_dict: dict[Any, Any]) -> None:
        """Initialize configuration from a dictionary."""
        self._configuration = Configuration(**config_dict)
        # cache is bound to the configuration it was created from
        self._document_cache = None

    def is_loaded(self) -> bool:
        """Check if configuration is loaded."""
        return self._configuration is not None

    @property
    def configuration(self) -> Configuration:
        """Return the whole configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration

    @property
    def service_configuration(self) -> ServiceConfiguration:
        """Return service configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.service

    @property
    def llama_stack_configuration(self) -> LlamaStackConfiguration:
        """Return Llama stack configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.llama_stack

    @property
    def customization(self) -> Optional[Customization]:
        """Return customization configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.customization

    @property
    def inference(self) -> InferenceConfiguration:
        """Return inference configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.inference

    @property
    def documents_configuration(self) -> DocumentsConfiguration:
        """Return document sources configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.documents

    @property
    def document_cache_configuration(self) -> DocumentCacheConfiguration:
        """Return document cache configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.document_cache

    @property
    def extraction_configuration(self) -> ExtractionConfiguration:
        """Return content extraction configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.extraction

    @property
    def search_configuration(self) -> SearchConfiguration:
        """Return search configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.search

    @property
    def prompt_configuration(self) -> PromptConfiguration:
        """Return prompt composition configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.prompt

    @property
    def document_cache(self) -> DocumentCache:
        """Return the document cache, create it on first access."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        if self._document_cache is None:
            self._document_cache = CacheFactory.document_cache(self._configuration)
        return self._document_cache


configuration: AppConfig = AppConfig()
