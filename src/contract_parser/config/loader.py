"""Configuration loader for the contract parser.

Configuration precedence (highest to lowest):

1. ``CONTRACT_PARSER_*`` environment variables
2. The YAML configuration file
3. Model defaults
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from contract_parser.config.defaults import DEFAULT_CONFIG_FILENAMES, ENV_VAR_MAP
from contract_parser.config.env_loader import substitute_env_vars
from contract_parser.config.validator import flatten_pydantic_errors
from contract_parser.lib.errors import ConfigError, FileNotFoundError
from contract_parser.lib.logging_config import get_logger
from contract_parser.models.config import ParserConfig

logger = get_logger(__name__)


def _read_yaml_with_env_substitution(path: Path) -> dict[str, Any]:
    """Read a YAML file, substituting environment references first.

    Args:
        path: Path to YAML file

    Returns:
        Parsed mapping, empty when the file is empty

    Raises:
        FileNotFoundError: If the file cannot be read
        ConfigError: If YAML parsing or env substitution fails
    """
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FileNotFoundError(
            str(path),
            f"Configuration file not found at {path}. "
            f"Please ensure the file exists at this path.",
        ) from e

    try:
        content = yaml.safe_load(substitute_env_vars(raw_text))
    except yaml.YAMLError as e:
        raise ConfigError(
            "yaml_parse", f"Failed to parse YAML file {path}: {str(e)}"
        ) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(
            "root", f"Configuration file {path} must contain a mapping at the top level"
        )
    return content


def _find_default_config(base_dir: Path) -> Path | None:
    for filename in DEFAULT_CONFIG_FILENAMES:
        candidate = base_dir / filename
        if candidate.is_file():
            return candidate
    return None


def apply_env_overrides(
    data: dict[str, Any], env_vars: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Overlay ``CONTRACT_PARSER_*`` environment variables onto config data.

    Values stay strings; pydantic coerces them during validation.

    Args:
        data: Raw configuration mapping (not modified)
        env_vars: Environment to read. Defaults to ``os.environ``.

    Returns:
        A new mapping with overrides applied
    """
    env = os.environ if env_vars is None else env_vars
    merged: dict[str, Any] = {
        key: dict(value) if isinstance(value, dict) else value
        for key, value in data.items()
    }

    for (section, field), env_var_name in ENV_VAR_MAP.items():
        value = env.get(env_var_name)
        if value is None or value == "":
            continue
        section_data = merged.get(section)
        if not isinstance(section_data, dict):
            section_data = {}
            merged[section] = section_data
        section_data[field] = value
        logger.debug(f"Applied {env_var_name} to {section}.{field}")

    return merged


def load_parser_config(
    file_path: str | Path | None = None,
    env_vars: Mapping[str, str] | None = None,
) -> ParserConfig:
    """Load and validate parser configuration.

    Args:
        file_path: Path to a YAML config file. When None, a default file in
            the working directory is used if present, else model defaults.
        env_vars: Environment used for overrides. Defaults to ``os.environ``.

    Returns:
        Validated ParserConfig

    Raises:
        FileNotFoundError: If an explicit file does not exist
        ConfigError: If the file cannot be parsed or fails validation
    """
    if file_path is not None:
        path: Path | None = Path(file_path)
    else:
        path = _find_default_config(Path.cwd())

    data: dict[str, Any] = {}
    if path is not None:
        logger.debug(f"Loading configuration from {path}")
        data = _read_yaml_with_env_substitution(path)

    data = apply_env_overrides(data, env_vars)

    try:
        config = ParserConfig.model_validate(data)
    except PydanticValidationError as e:
        error_messages = flatten_pydantic_errors(e)
        raise ConfigError("config", "\n".join(error_messages)) from e

    if config.llm is None:
        logger.debug("Configuration loaded without an LLM section")
    else:
        logger.debug(
            f"Configuration loaded: provider={config.llm.provider.value}, "
            f"model={config.llm.name}"
        )
    return config
