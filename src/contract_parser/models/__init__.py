"""Data models for chunks, contract metadata and parser configuration."""

from contract_parser.models.chunk import (
    STRUCTURAL_LABELS,
    Chunk,
    SectionInfo,
    StructuralType,
)
from contract_parser.models.config import (
    ClassificationConfig,
    DocumentSourceConfig,
    ExtractionConfig,
    LLMConfig,
    ParserConfig,
    ProviderEnum,
    SegmentationConfig,
)
from contract_parser.models.metadata import ContractMetadata

__all__ = [
    "STRUCTURAL_LABELS",
    "Chunk",
    "ClassificationConfig",
    "ContractMetadata",
    "DocumentSourceConfig",
    "ExtractionConfig",
    "LLMConfig",
    "ParserConfig",
    "ProviderEnum",
    "SectionInfo",
    "SegmentationConfig",
    "StructuralType",
]
