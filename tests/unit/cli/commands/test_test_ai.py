"""Tests for the 'test-ai' CLI command."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from contract_parser.cli.main import main


@pytest.mark.unit
class TestTestAICommand:
    """Tests for 'contract-parser test-ai'."""

    def test_without_llm(self, cli_runner: CliRunner) -> None:
        """Test the command fails when no LLM is configured."""
        result = cli_runner.invoke(main, ["-q", "test-ai"])
        assert result.exit_code == 1
        assert "No LLM configured" in result.output

    def test_connection_ok(self, cli_runner: CliRunner, llm_config_file: Path) -> None:
        """Test a successful check exits 0."""
        with (
            patch(
                "contract_parser.cli.commands.test_ai.build_text_generator",
                return_value=MagicMock(),
            ),
            patch(
                "contract_parser.cli.commands.test_ai.check_connection",
                new=AsyncMock(return_value=True),
            ),
        ):
            result = cli_runner.invoke(
                main, ["-q", "-c", str(llm_config_file), "test-ai"]
            )

        assert result.exit_code == 0
        assert "AI connection OK (openai/gpt-4o-mini)" in result.output

    def test_connection_failed(
        self, cli_runner: CliRunner, llm_config_file: Path
    ) -> None:
        """Test a failed check exits 1."""
        with (
            patch(
                "contract_parser.cli.commands.test_ai.build_text_generator",
                return_value=None,
            ),
            patch(
                "contract_parser.cli.commands.test_ai.check_connection",
                new=AsyncMock(return_value=False),
            ),
        ):
            result = cli_runner.invoke(
                main, ["-q", "-c", str(llm_config_file), "test-ai"]
            )

        assert result.exit_code == 1
        assert "AI connection failed" in result.output

    def test_invalid_config(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        """Test configuration errors exit with status 1."""
        config_path = temp_dir / "bad.yaml"
        config_path.write_text("llm:\n  provider: openai\n")

        result = cli_runner.invoke(main, ["-q", "-c", str(config_path), "test-ai"])

        assert result.exit_code == 1
        assert "Failed to load configuration" in result.output
