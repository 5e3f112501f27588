"""Entry point for the contract-parser command line interface."""

import click

from contract_parser import __version__
from contract_parser.cli.commands.parse import chunk, parse
from contract_parser.cli.commands.test_ai import test_ai
from contract_parser.lib.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="contract-parser")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a contract-parser YAML configuration file",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, config_path: str | None) -> None:
    """Parse contracts into typed chunks and structured metadata.

    \b
    EXAMPLES:

        Extract metadata from a contract:
            contract-parser parse agreement.txt

        Split a contract into classified chunks:
            contract-parser chunk agreement.txt --document-id 42

        Check the configured LLM answers:
            contract-parser -c contract-parser.yaml test-ai
    """
    setup_logging(verbose=verbose, quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(parse)
main.add_command(chunk)
main.add_command(test_ai)


if __name__ == "__main__":
    main()
