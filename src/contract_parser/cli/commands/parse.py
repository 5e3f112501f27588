"""CLI commands for parsing and chunking contract files.

Implements 'contract-parser parse' and 'contract-parser chunk'. Both read a
local file, decode it by its guessed content type and print JSON to stdout.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import NoReturn

import click

from contract_parser.config.loader import load_parser_config
from contract_parser.lib.errors import (
    ConfigError,
    ContractParserError,
    FileNotFoundError,
    UnsupportedFormatError,
    UpstreamFetchError,
)
from contract_parser.lib.logging_config import get_logger
from contract_parser.services.document_source import LocalFileDocumentSource
from contract_parser.services.parsing_service import DocumentParsingService

logger = get_logger(__name__)


def build_local_service(config_path: str | None) -> DocumentParsingService:
    """Build a parsing service that reads documents from the local disk.

    Args:
        config_path: Optional YAML configuration path.

    Returns:
        DocumentParsingService backed by LocalFileDocumentSource.

    Raises:
        ConfigError: If the configuration is invalid.
        FileNotFoundError: If the configuration file does not exist.
    """
    config = load_parser_config(config_path)
    return DocumentParsingService.from_config(
        config, source=LocalFileDocumentSource()
    )


def _fail(message: str, error: Exception) -> NoReturn:
    logger.error(f"{message}: {error}", exc_info=True)
    click.secho(f"Error: {message}", fg="red", err=True)
    click.echo(f"  {str(error)}", err=True)
    sys.exit(1)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def parse(ctx: click.Context, file: str) -> None:
    """Extract contract metadata from FILE and print it as JSON.

    Example:

        contract-parser parse agreement.txt
    """
    config_path = ctx.obj.get("config_path") if ctx.obj else None

    try:
        service = build_local_service(config_path)
        document_id = str(Path(file).resolve())
        metadata = asyncio.run(service.parse_document(document_id))
    except (ConfigError, FileNotFoundError) as e:
        _fail("Failed to load configuration", e)
    except UnsupportedFormatError as e:
        _fail("Unsupported document format", e)
    except UpstreamFetchError as e:
        _fail("Failed to read document", e)
    except ContractParserError as e:
        _fail("Parsing failed", e)

    click.echo(json.dumps(metadata.to_record_dict(), indent=2))


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--document-id",
    "-d",
    default=None,
    help="Document id stamped on every chunk (default: file name)",
)
@click.pass_context
def chunk(ctx: click.Context, file: str, document_id: str | None) -> None:
    """Split FILE into classified chunks and print them as JSON.

    Example:

        contract-parser chunk agreement.txt --document-id 42
    """
    config_path = ctx.obj.get("config_path") if ctx.obj else None

    async def run(service: DocumentParsingService) -> list[dict[str, object]]:
        text = await service.load_text(str(Path(file).resolve()))
        chunks = await service.chunk_text(text, document_id or Path(file).name)
        return [c.to_record_dict() for c in chunks]

    try:
        service = build_local_service(config_path)
        records = asyncio.run(run(service))
    except (ConfigError, FileNotFoundError) as e:
        _fail("Failed to load configuration", e)
    except UnsupportedFormatError as e:
        _fail("Unsupported document format", e)
    except UpstreamFetchError as e:
        _fail("Failed to read document", e)
    except ContractParserError as e:
        _fail("Parsing failed", e)

    click.echo(json.dumps(records, indent=2))
