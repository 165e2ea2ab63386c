"""Terminal rendering of lint and fix reports."""
from rich.console import Console
from rich.table import Table
from rich.text import Text

from markdownlint_mcp.core.linter.models import FixReport, LintReport, Rule

ACCENT = "#5f8787"  # Muted teal
HIGHLIGHT = "#ddeecc"  # Pale mint


def lint_table(report: LintReport) -> Table:
    """One row per issue: line, rule, message, fixable marker."""
    table = Table(title=Text(report.path, style=f"bold {HIGHLIGHT}"), title_justify="left")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Rule", style=f"bold {ACCENT}")
    table.add_column("Message")
    table.add_column("Fix", justify="center")

    for issue in report.issues:
        rule = issue.rule if not issue.aliases else f"{issue.rule}/{issue.aliases[0]}"
        message = issue.message[:100] + "..." if len(issue.message) > 100 else issue.message
        table.add_row(str(issue.line), rule, message, "✓" if issue.fixable else "")

    return table


def render_lint(console: Console, report: LintReport) -> None:
    if not report.issues:
        console.print(Text(f"{report.path}: no issues", style=HIGHLIGHT))
        return
    console.print(lint_table(report))
    console.print(f"{report.total_issues} issues ({report.fixable} fixable)")


def render_fix(console: Console, report: FixReport, dry_run: bool = False) -> None:
    if not report.changed:
        console.print(Text(f"{report.path}: nothing to fix", style=HIGHLIGHT))
    else:
        verb = "would fix" if dry_run else "fixed"
        console.print(
            f"[bold {ACCENT}]{report.path}[/]: {verb} {report.resolved} issues "
            f"with {', '.join(report.rules_applied)}"
        )

    if report.remaining:
        remaining = LintReport(path=f"{report.path} (remaining)")
        for issue in report.remaining:
            remaining.add_issue(issue)
        console.print(lint_table(remaining))


def rules_table(rules: list[Rule]) -> Table:
    table = Table(title="markdownlint rules", title_justify="left")
    table.add_column("Rule", style=f"bold {ACCENT}")
    table.add_column("Aliases", style="dim")
    table.add_column("Description")
    table.add_column("Fix", justify="center")

    for rule in rules:
        table.add_row(rule.name, ", ".join(rule.aliases), rule.description, "✓" if rule.fixable else "")

    return table
