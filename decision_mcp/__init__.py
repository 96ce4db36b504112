"""MCP surface for the decision Monte Carlo engine (stdio and streamable HTTP)."""
