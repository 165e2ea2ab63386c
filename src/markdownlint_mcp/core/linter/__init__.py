"""Markdown style checker with per-rule fixers."""
from .engine import fix_content, fix_file, get_available_rules, lint_content, lint_file
from .models import FallbackCounter, FixReport, LintIssue, LintReport, Rule, RuleViolation

__all__ = [
    "lint_file",
    "lint_content",
    "fix_file",
    "fix_content",
    "get_available_rules",
    "FallbackCounter",
    "FixReport",
    "LintIssue",
    "LintReport",
    "Rule",
    "RuleViolation",
]
