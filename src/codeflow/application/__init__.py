"""Application layer - editor orchestration and maintenance services."""
