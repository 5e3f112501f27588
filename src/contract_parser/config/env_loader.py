"""Environment variable helpers for configuration files.

Configuration text may reference the environment with ``${VAR}`` or
``${VAR:default}``. References are resolved on the raw text, before YAML
parsing.
"""

import os
import re

from contract_parser.lib.errors import ConfigError

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


def get_env_var(name: str, default: str | None = None) -> str | None:
    """Return an environment variable, or ``default`` when unset or empty."""
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value


def substitute_env_vars(text: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:default}`` references in text.

    Args:
        text: Raw configuration text.

    Returns:
        Text with every reference replaced by its value.

    Raises:
        ConfigError: If a referenced variable is unset and has no default.

    Example:
        >>> os.environ["OPENAI_API_KEY"] = "sk-test"
        >>> substitute_env_vars("api_key: ${OPENAI_API_KEY}")
        'api_key: sk-test'
    """

    def replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        value = get_env_var(name, default)
        if value is None:
            raise ConfigError(
                name,
                f"Environment variable '{name}' is not set and has no default. "
                f"Set it or use ${{{name}:default}}.",
            )
        return value

    return ENV_VAR_PATTERN.sub(replace, text)
