"""Default configuration values for the contract parser."""

# Config files looked up in the working directory when none is given
DEFAULT_CONFIG_FILENAMES: tuple[str, ...] = (
    "contract-parser.yaml",
    "contract-parser.yml",
)

# Environment overrides: (section, field) -> variable name
ENV_VAR_MAP: dict[tuple[str, str], str] = {
    ("llm", "provider"): "CONTRACT_PARSER_LLM_PROVIDER",
    ("llm", "name"): "CONTRACT_PARSER_LLM_MODEL",
    ("llm", "api_key"): "CONTRACT_PARSER_LLM_API_KEY",
    ("llm", "endpoint"): "CONTRACT_PARSER_LLM_ENDPOINT",
    ("llm", "timeout"): "CONTRACT_PARSER_LLM_TIMEOUT",
    ("segmentation", "max_chunk_size"): "CONTRACT_PARSER_MAX_CHUNK_SIZE",
    ("segmentation", "min_chunk_size"): "CONTRACT_PARSER_MIN_CHUNK_SIZE",
    ("classification", "concurrency"): "CONTRACT_PARSER_CLASSIFY_CONCURRENCY",
    ("classification", "heuristic_fallback"): "CONTRACT_PARSER_HEURISTIC_FALLBACK",
    ("document_source", "base_url"): "CONTRACT_PARSER_DOCUMENT_SOURCE_URL",
}
