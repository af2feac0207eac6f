"""Project Coordinator - track a portfolio of software projects over MCP stdio."""

__version__ = "1.0.0"
