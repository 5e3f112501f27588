"""Shared fixtures for CLI command tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from contract_parser.config.defaults import ENV_VAR_MAP
from contract_parser.lib.logging_config import PACKAGE_LOGGER_NAME

LLM_CONFIG = "llm:\n  provider: openai\n  name: gpt-4o-mini\n  api_key: sk-test\n"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_cli_state(
    temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Run in an empty directory without parser env overrides.

    Restores the package logger, which setup_logging reconfigures.
    """
    for env_var_name in ENV_VAR_MAP.values():
        monkeypatch.delenv(env_var_name, raising=False)
    monkeypatch.chdir(temp_dir)

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate

    yield

    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


@pytest.fixture
def contract_file(temp_dir: Path, service_contract: str) -> Path:
    """Service contract written to a text file."""
    path = temp_dir / "agreement.txt"
    path.write_text(service_contract, encoding="utf-8")
    return path


@pytest.fixture
def llm_config_file(temp_dir: Path) -> Path:
    """Config file with an OpenAI llm section."""
    path = temp_dir / "llm.yaml"
    path.write_text(LLM_CONFIG)
    return path
