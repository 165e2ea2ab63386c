"""markdownlint MCP server: Markdown style checks with deterministic fixes."""

__version__ = "1.0.0"
