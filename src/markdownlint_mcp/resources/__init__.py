"""markdownlint MCP resources."""
from . import rule_resources

__all__ = ["rule_resources"]
