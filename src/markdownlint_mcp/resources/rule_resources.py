"""Expose the rule catalog as MCP resources."""
import json
import logging

from markdownlint_mcp.config import Config
from markdownlint_mcp.core.linter.rules import RULES, describe_rule, get_rule

logger = logging.getLogger(__name__)


def register(mcp, config: Config):
    """Register rule resources with MCP server."""

    @mcp.resource("rules://index")
    def get_rule_index() -> str:
        """
        Get JSON index of every rule.

        Returns:
            JSON string with each rule's id, aliases, description and
            whether it can be fixed automatically
        """
        rules = [describe_rule(RULES[rule_id]) for rule_id in sorted(RULES)]
        result = {
            "rules": rules,
            "total_count": len(rules),
            "fixable_count": sum(1 for rule in rules if rule["fixable"]),
        }
        return json.dumps(result, indent=2)

    @mcp.resource("rules://{rule_id}")
    def get_rule_details(rule_id: str) -> str:
        """
        Get details for one rule by id or alias (e.g. MD013 or line-length).

        Returns:
            JSON string with the rule description
        """
        rule = get_rule(rule_id)
        if rule is None:
            logger.warning(f"Unknown rule requested: {rule_id}")
            return json.dumps({"error": f"Rule not found: {rule_id}"}, indent=2)
        return json.dumps(describe_rule(rule), indent=2)
