"""Command line interface for the contract parser."""
