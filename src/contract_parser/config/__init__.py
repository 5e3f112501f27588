"""Configuration loading and validation for the contract parser.

Main components:
- load_parser_config: Load and validate a YAML configuration file
- Environment variable substitution (${VAR_NAME} and ${VAR_NAME:default})
- CONTRACT_PARSER_* environment overrides
"""

from contract_parser.config.env_loader import get_env_var, substitute_env_vars
from contract_parser.config.loader import apply_env_overrides, load_parser_config

__all__ = [
    "apply_env_overrides",
    "get_env_var",
    "load_parser_config",
    "substitute_env_vars",
]
