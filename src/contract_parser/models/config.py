"""Configuration models for the contract parser.

The YAML configuration file maps onto ``ParserConfig``::

    llm:
      provider: openai
      name: gpt-4o-mini
      api_key: ${OPENAI_API_KEY}
    segmentation:
      max_chunk_size: 700
      min_chunk_size: 100
    classification:
      concurrency: 5
    extraction:
      max_prompt_chars: 20000
    document_source:
      base_url: https://localhost:7001

Omitting the ``llm`` section disables the generative capability; every
AI-primary path then runs its deterministic fallback.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProviderEnum(str, Enum):
    """Supported chat completion providers."""

    OPENAI = "openai"
    AZURE_OPENAI = "azure_openai"
    ANTHROPIC = "anthropic"


class LLMConfig(BaseModel):
    """Generative text capability configuration."""

    model_config = ConfigDict(extra="forbid")

    provider: ProviderEnum = Field(..., description="Chat completion provider")
    name: str = Field(..., description="Model or deployment name")
    api_key: str | None = Field(None, description="Provider API key")
    endpoint: str | None = Field(
        None, description="Provider endpoint (required for azure_openai)"
    )
    timeout: float = Field(
        default=60.0, gt=0, description="Per-attempt timeout in seconds"
    )
    max_retries: int = Field(
        default=2, ge=1, description="Attempts per generation call"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate model name is not empty."""
        if not v.strip():
            raise ValueError("name must be non-empty")
        return v

    @model_validator(mode="after")
    def validate_endpoint(self) -> "LLMConfig":
        """Require an endpoint for Azure OpenAI deployments."""
        if self.provider == ProviderEnum.AZURE_OPENAI and not self.endpoint:
            raise ValueError("endpoint is required for azure_openai provider")
        return self


class SegmentationConfig(BaseModel):
    """Chunk size bounds, in characters."""

    model_config = ConfigDict(extra="forbid")

    max_chunk_size: int = Field(default=700, gt=0)
    min_chunk_size: int = Field(default=100, ge=0)

    @model_validator(mode="after")
    def validate_bounds(self) -> "SegmentationConfig":
        """Ensure the minimum chunk size is below the maximum."""
        if self.min_chunk_size >= self.max_chunk_size:
            raise ValueError(
                f"min_chunk_size ({self.min_chunk_size}) must be less than "
                f"max_chunk_size ({self.max_chunk_size})"
            )
        return self


class ClassificationConfig(BaseModel):
    """Per-chunk structural classification settings."""

    model_config = ConfigDict(extra="forbid")

    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(default=10, gt=0)
    max_sample_chars: int = Field(default=800, gt=0)
    concurrency: int = Field(default=5, ge=1)
    heuristic_fallback: bool = Field(
        default=False,
        description="Use keyword heuristics instead of 'Other' when AI is absent",
    )


class ExtractionConfig(BaseModel):
    """Document-level metadata extraction settings."""

    model_config = ConfigDict(extra="forbid")

    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, gt=0)
    max_prompt_chars: int = Field(default=20000, gt=0)
    paragraph_backoff_chars: int = Field(default=500, ge=0)


class DocumentSourceConfig(BaseModel):
    """Document byte source (upload service) settings."""

    model_config = ConfigDict(extra="forbid")

    base_url: str = Field(default="https://localhost:7001")
    timeout: float = Field(default=300.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate the base URL is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


class ParserConfig(BaseModel):
    """Root configuration for the contract parser."""

    model_config = ConfigDict(extra="forbid")

    llm: LLMConfig | None = None
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    classification: ClassificationConfig = Field(
        default_factory=ClassificationConfig
    )
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    document_source: DocumentSourceConfig = Field(
        default_factory=DocumentSourceConfig
    )
