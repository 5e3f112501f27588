"""Document sources and the parsing service orchestrator."""
