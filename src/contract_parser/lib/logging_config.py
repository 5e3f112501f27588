"""Logging configuration for the contract parser.

Library modules obtain loggers with ``get_logger(__name__)``; entry points
(the CLI) call ``setup_logging`` once to attach a handler to the package
logger and pick a level from the verbosity flags.
"""

import logging
import sys

PACKAGE_LOGGER_NAME = "contract_parser"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Noisy third-party loggers kept at WARNING unless running verbose
_THIRD_PARTY_LOGGERS = ("semantic_kernel", "httpx", "openai", "urllib3")


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Module name, usually ``__name__``.

    Returns:
        Standard library logger.
    """
    return logging.getLogger(name)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure the package logger.

    Quiet wins over verbose: a quiet run only reports errors.

    Args:
        verbose: Emit DEBUG messages.
        quiet: Only emit ERROR messages.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(level)

    # Replace handlers so repeated CLI invocations don't duplicate output
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    package_logger.addHandler(handler)
    package_logger.propagate = False

    third_party_level = logging.DEBUG if verbose and not quiet else logging.WARNING
    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
