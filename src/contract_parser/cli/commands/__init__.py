"""Click commands for the contract-parser CLI."""
