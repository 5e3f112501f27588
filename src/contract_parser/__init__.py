"""Contract parser - turn contract text into typed chunks and structured metadata.

Main features:
- Size-bounded segmentation with structural, paragraph and fixed-size strategies
- Per-chunk structural classification (Header, Clause, Term, Condition, Signature)
- Document-level metadata extraction (title, parties, dates, value, key terms)
- LLM-primary extraction with deterministic rule-based fallback
- Support for multiple LLM providers (OpenAI, Azure, Anthropic)
"""

from contract_parser.lib.errors import ConfigError, ContractParserError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigError",
    "ContractParserError",
]
