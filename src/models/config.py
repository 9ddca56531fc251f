"""Model with service configuration."""

from pathlib import Path
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
    field_validator,
    constr,
    FilePath,
    PositiveFloat,
    PositiveInt,
    SecretStr,
)

from typing_extensions import Self, Literal

import constants

from utils import checks


class ConfigurationBase(BaseModel):
    """Base class for all configuration models that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


class TLSConfiguration(ConfigurationBase):
    """TLS configuration."""

    tls_certificate_path: Optional[FilePath] = None
    tls_key_path: Optional[FilePath] = None
    tls_key_password: Optional[FilePath] = None


class CORSConfiguration(ConfigurationBase):
    """CORS configuration."""

    allow_origins: list[str] = [
        "*"
    ]  # not AnyHttpUrl: we need to support "*" that is not valid URL
    allow_credentials: bool = False
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @model_validator(mode="after")
    def check_cors_configuration(self) -> Self:
        """Check CORS configuration."""
        # credentials are not allowed with wildcard origins per CORS/Fetch spec.
        # see https://fastapi.tiangolo.com/tutorial/cors/
        if self.allow_credentials and "*" in self.allow_origins:
            raise ValueError(
                "Invalid CORS configuration: allow_credentials can not be set to true when "
                "allow origins contains '*' wildcard."
                "Use explicit origins or disable credential."
            )
        return self


class ServiceConfiguration(ConfigurationBase):
    """Service configuration."""

    host: str = "localhost"
    port: PositiveInt = 8080
    workers: PositiveInt = 1
    color_log: bool = True
    access_log: bool = True
    tls_config: TLSConfiguration = Field(default_factory=TLSConfiguration)
    cors: CORSConfiguration = Field(default_factory=CORSConfiguration)

    @model_validator(mode="after")
    def check_service_configuration(self) -> Self:
        """Check service configuration."""
        if self.port > 65535:
            raise ValueError("Port value should be less than 65536")
        return self


class LlamaStackConfiguration(ConfigurationBase):
    """Llama stack configuration."""

    url: Optional[str] = None
    api_key: Optional[SecretStr] = None
    use_as_library_client: Optional[bool] = None
    library_client_config_path: Optional[str] = None

    @model_validator(mode="after")
    def check_llama_stack_model(self) -> Self:
        """
        Validate the Llama stack configuration after model initialization.

        Ensures that either a URL is provided for server mode or library client
        mode is explicitly enabled. If library client mode is enabled, verifies
        that a configuration file path is specified and points to an existing,
        readable file. Raises a ValueError if any required condition is not
        met.

        Returns:
            Self: The validated LlamaStackConfiguration instance.
        """
        if self.url is None:
            if self.use_as_library_client is None:
                raise ValueError(
                    "Llama stack URL is not specified and library client mode is not specified"
                )
            if self.use_as_library_client is False:
                raise ValueError(
                    "Llama stack URL is not specified and library client mode is not enabled"
                )
        if self.use_as_library_client is None:
            self.use_as_library_client = False
        if self.use_as_library_client:
            if self.library_client_config_path is None:
                # pylint: disable=line-too-long
                raise ValueError(
                    "Llama stack library client mode is enabled but a configuration file path is not specified"  # noqa: E501
                )
            # the configuration file must exists and be regular readable file
            checks.file_check(
                Path(self.library_client_config_path), "Llama Stack configuration file"
            )
        return self


class InferenceConfiguration(ConfigurationBase):
    """Inference configuration."""

    default_model: Optional[str] = None
    default_provider: Optional[str] = None
    temperature: float = Field(default=constants.DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: PositiveInt = constants.DEFAULT_MAX_TOKENS
    timeout: PositiveFloat = constants.DEFAULT_COMPLETION_TIMEOUT

    @model_validator(mode="after")
    def check_default_model_and_provider(self) -> Self:
        """Check default model and provider."""
        if self.default_model is None and self.default_provider is not None:
            raise ValueError(
                "Default model must be specified when default provider is set"
            )
        if self.default_model is not None and self.default_provider is None:
            raise ValueError(
                "Default provider must be specified when default model is set"
            )
        return self


class Customization(ConfigurationBase):
    """Service customization."""

    system_prompt_path: Optional[FilePath] = None
    system_prompt: Optional[str] = None

    @model_validator(mode="after")
    def check_customization_model(self) -> Self:
        """Load system prompt from file when the path is set."""
        if self.system_prompt_path is not None:
            checks.file_check(self.system_prompt_path, "system prompt")
            self.system_prompt = checks.get_attribute_from_file(
                dict(self), "system_prompt_path"
            )
        return self


class DocumentSource(ConfigurationBase):
    """One external document feeding a category.

    A source is fetched only when it is enabled and has an identifier.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    category: str
    document_id: Optional[constr(strip_whitespace=True, min_length=1)] = None  # type: ignore
    enabled: bool = True

    @property
    def configured(self) -> bool:
        """Check if the source can be fetched."""
        return self.enabled and self.document_id is not None


class DocumentsConfiguration(ConfigurationBase):
    """Document store and per-category document sources.

    Each category accepts a single identifier, a list of identifiers or a
    list of objects with `document_id` and `enabled` keys. All forms are
    normalized into an ordered list of `DocumentSource` instances.
    """

    url_template: str = constants.DEFAULT_DOCUMENT_URL_TEMPLATE
    fetch_timeout: PositiveFloat = constants.DEFAULT_FETCH_TIMEOUT
    sources: dict[str, list[DocumentSource]] = Field(default_factory=dict)

    @field_validator("sources", mode="before")
    @classmethod
    def normalize_sources(cls, value: Any) -> dict[str, list[dict[str, Any]]]:
        """Normalize every supported shape into a list of source mappings."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("Document sources must be a mapping of category names")
        normalized: dict[str, list[dict[str, Any]]] = {}
        for category, entries in value.items():
            if category not in constants.CATEGORIES:
                raise ValueError(
                    f"Unknown document category '{category}'. "
                    f"Supported categories: {', '.join(constants.CATEGORIES)}"
                )
            if entries is None:
                entries = []
            elif not isinstance(entries, list):
                entries = [entries]
            normalized[category] = [
                cls._normalize_entry(category, entry) for entry in entries
            ]
        return normalized

    @staticmethod
    def _normalize_identifier(document_id: Any) -> Any:
        # unset environment variables resolve to None or empty string and
        # numeric identifiers are converted to numbers by the expansion
        if isinstance(document_id, int) and not isinstance(document_id, bool):
            document_id = str(document_id)
        if isinstance(document_id, str):
            return document_id.strip() or None
        return document_id

    @classmethod
    def _normalize_entry(cls, category: str, entry: Any) -> dict[str, Any]:
        if isinstance(entry, DocumentSource):
            return entry.model_dump()
        if isinstance(entry, dict):
            return {
                **entry,
                "category": category,
                "document_id": cls._normalize_identifier(entry.get("document_id")),
            }
        if entry is None or isinstance(entry, (str, int)):
            return {"category": category, "document_id": cls._normalize_identifier(entry)}
        raise ValueError(
            f"Invalid document source for category '{category}': {entry!r}"
        )

    @model_validator(mode="after")
    def check_url_template(self) -> Self:
        """Check that the URL template contains the identifier placeholder."""
        checks.url_template_check(
            self.url_template, "document_id", "Document URL template"
        )
        return self

    def configured_sources(self) -> dict[str, list[DocumentSource]]:
        """Return enabled sources with identifier for every category."""
        return {
            category: [source for source in sources if source.configured]
            for category, sources in self.sources.items()
        }


class DocumentCacheConfiguration(ConfigurationBase):
    """Document cache configuration."""

    ttl_seconds: PositiveInt = constants.DEFAULT_CACHE_TTL_SECONDS
    refresh_mode: Literal["wait", "serve_stale"] = constants.REFRESH_MODE_WAIT
    warm_on_startup: bool = False


class ExtractionConfiguration(ConfigurationBase):
    """Content extraction configuration."""

    strategy: Literal["heuristic", "model"] = constants.EXTRACTION_STRATEGY_HEURISTIC
    max_length: PositiveInt = constants.DEFAULT_EXTRACTION_MAX_LENGTH
    marker_keywords: list[str] = Field(
        default_factory=lambda: list(constants.DEFAULT_MARKER_KEYWORDS)
    )
    summarize_threshold: PositiveInt = constants.DEFAULT_SUMMARIZE_THRESHOLD
    summarize_prefix_length: PositiveInt = constants.DEFAULT_SUMMARIZE_PREFIX_LENGTH
    fallback_length: PositiveInt = constants.DEFAULT_SUMMARY_FALLBACK_LENGTH
    summary_max_tokens: PositiveInt = constants.DEFAULT_SUMMARY_MAX_TOKENS


class SearchConfiguration(ConfigurationBase):
    """Naive document search configuration."""

    max_matches_per_category: PositiveInt = constants.DEFAULT_MAX_MATCHES_PER_CATEGORY


class PromptConfiguration(ConfigurationBase):
    """Prompt composition configuration."""

    categories: list[str] = Field(default_factory=lambda: list(constants.CATEGORIES))
    detail_trigger_phrases: list[str] = Field(
        default_factory=lambda: list(constants.DEFAULT_DETAIL_TRIGGER_PHRASES)
    )
    ecommerce_trigger_phrases: list[str] = Field(
        default_factory=lambda: list(constants.DEFAULT_ECOMMERCE_TRIGGER_PHRASES)
    )
    structured_guide_limit: PositiveInt = constants.DEFAULT_STRUCTURED_GUIDE_LIMIT

    @field_validator("categories")
    @classmethod
    def check_categories(cls, value: list[str]) -> list[str]:
        """Check that only known categories are rendered."""
        unknown = [category for category in value if category not in constants.CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown prompt categories: {', '.join(unknown)}")
        return value

    @field_validator("detail_trigger_phrases", "ecommerce_trigger_phrases")
    @classmethod
    def lowercase_phrases(cls, value: list[str]) -> list[str]:
        """Trigger phrases are compared with lower-cased messages."""
        return [phrase.lower() for phrase in value if phrase.strip()]


class Configuration(ConfigurationBase):
    """Global service configuration."""

    name: str
    service: ServiceConfiguration = Field(default_factory=ServiceConfiguration)
    llama_stack: LlamaStackConfiguration
    customization: Optional[Customization] = None
    inference: InferenceConfiguration = Field(default_factory=InferenceConfiguration)
    documents: DocumentsConfiguration = Field(default_factory=DocumentsConfiguration)
    document_cache: DocumentCacheConfiguration = Field(
        default_factory=DocumentCacheConfiguration
    )
    extraction: ExtractionConfiguration = Field(
        default_factory=ExtractionConfiguration
    )
    search: SearchConfiguration = Field(default_factory=SearchConfiguration)
    prompt: PromptConfiguration = Field(default_factory=PromptConfiguration)

    def dump(self, filename: str = "configuration.json") -> None:
        """Dump actual configuration into JSON file."""
        with open(filename, "w", encoding="utf-8") as fout:
            fout.write(self.model_dump_json(indent=4))
