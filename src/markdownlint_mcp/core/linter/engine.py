"""Lint engine - runs rules and applies fixes."""
import logging
from pathlib import Path
from typing import Optional

from ..config_loader import load_configuration
from .models import FallbackCounter, FixReport, LintIssue, LintReport
from .rules import RULES, apply_rule_fixes, enabled_rules, get_rule, rule_settings

logger = logging.getLogger(__name__)


def content_to_lines(content: str) -> list[str]:
    return content.split('\n')


def lines_to_content(lines: list[str]) -> str:
    return '\n'.join(lines)


def _selected_rules(
    config: Optional[dict],
    rules: Optional[list[str]],
    counter: Optional[FallbackCounter],
):
    if not rules:
        return enabled_rules(config)

    selected = []
    for name in rules:
        rule = get_rule(name)
        if rule is None:
            logger.warning(f"Unknown rule: {name}")
            if counter is not None:
                counter.record("unknown_rule")
            continue
        selected.append((rule, rule_settings(config, rule)[1]))
    return selected


def lint_content(
    content: str,
    config: Optional[dict] = None,
    rules: Optional[list[str]] = None,
    source_path: str = "<string>",
    counter: Optional[FallbackCounter] = None,
) -> LintReport:
    """
    Lint markdown content.

    Args:
        content: The markdown content to lint
        config: markdownlint-style configuration (default: every rule, defaults)
        rules: Specific rule ids or aliases to run, ignoring enablement
        source_path: Path for reporting (doesn't need to exist)
        counter: Optional counter for rule failures and unknown rules

    Returns:
        LintReport sorted by line, then rule id
    """
    report = LintReport(path=source_path)
    lines = content_to_lines(content)

    for rule, options in _selected_rules(config, rules, counter):
        try:
            violations = rule.validate(lines, options)
        except Exception as e:
            logger.error(f"Rule {rule.name} failed: {e}", exc_info=True)
            if counter is not None:
                counter.record("rule_failed")
            continue

        for violation in violations:
            report.add_issue(LintIssue(
                rule=rule.name,
                line=violation.line_number,
                message=violation.details or rule.description,
                range=violation.range,
                aliases=rule.aliases,
                fixable=rule.fixable,
            ))

    report.issues.sort(key=lambda i: (i.line, i.rule))
    logger.debug(f"{source_path}: {report.total_issues} issues ({report.fixable} fixable)")

    return report


def fix_content(
    content: str,
    config: Optional[dict] = None,
    counter: Optional[FallbackCounter] = None,
    source_path: str = "<string>",
) -> FixReport:
    """
    Apply every available fixer for the rules the content violates.

    Rules are applied in first-seen order of their violations, so the
    same input always produces the same output. A fixer that raises
    aborts the pass and the exception propagates.

    Returns:
        FixReport with the fixed content and the issues that remain
    """
    before = lint_content(content, config, source_path=source_path, counter=counter)
    to_apply = [rule_id for rule_id in before.rule_ids() if RULES[rule_id].fixable]

    report = FixReport(
        path=source_path,
        content=content,
        rules_applied=to_apply,
        issues_before=before.total_issues,
    )

    if not to_apply:
        report.issues_after = before.total_issues
        report.remaining = before.issues
        return report

    logger.debug(f"Applying fixes: {', '.join(to_apply)}")
    original = content_to_lines(content)
    fixed = apply_rule_fixes(original, to_apply, config)
    fixed_content = lines_to_content(fixed)

    after = lint_content(fixed_content, config, source_path=source_path, counter=counter)

    report.content = fixed_content
    report.changed = fixed_content != content
    report.issues_after = after.total_issues
    report.remaining = after.issues
    report.estimated_fixes = _estimate_fixes(original, fixed, report.changed)

    return report


def _estimate_fixes(original: list[str], fixed: list[str], changed: bool) -> int:
    # Line-count delta; a same-length edit still counts as one.
    delta = abs(len(original) - len(fixed))
    if delta == 0 and changed:
        return 1
    return delta


async def lint_file(
    path: Path,
    config: Optional[dict] = None,
    rules: Optional[list[str]] = None,
    counter: Optional[FallbackCounter] = None,
) -> LintReport:
    """
    Lint a markdown file.

    When ``config`` is None the directory's .markdownlint file is used.
    """
    content = path.read_text(encoding='utf-8')
    if config is None:
        config = _directory_config(path, counter)
    return lint_content(content, config, rules=rules, source_path=str(path), counter=counter)


async def fix_file(
    path: Path,
    write: bool = True,
    config: Optional[dict] = None,
    counter: Optional[FallbackCounter] = None,
) -> FixReport:
    """
    Fix a markdown file, writing it back only if ``write`` and the content changed.
    """
    content = path.read_text(encoding='utf-8')
    if config is None:
        config = _directory_config(path, counter)

    report = fix_content(content, config, counter=counter, source_path=str(path))

    if write and report.changed:
        path.write_text(report.content, encoding='utf-8')
        report.written = True
        logger.info(f"Wrote {len(report.rules_applied)} rule fixes to {path}")

    return report


def _directory_config(path: Path, counter: Optional[FallbackCounter]) -> dict:
    directory = path.resolve().parent
    return load_configuration(directory, counter=counter)


def get_available_rules() -> dict[str, str]:
    """
    Get list of available rules with descriptions.

    Returns:
        Dict mapping rule id to description
    """
    return {rule_id: RULES[rule_id].description for rule_id in sorted(RULES)}
