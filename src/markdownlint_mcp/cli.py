"""CLI for markdownlint-mcp.

Provides direct terminal access to linting and fixing without MCP.
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console

from markdownlint_mcp import __version__
from markdownlint_mcp.config import Config
from markdownlint_mcp.core.config_loader import CONFIG_FILES, parse_config_file
from markdownlint_mcp.core.linter import engine
from markdownlint_mcp.core.linter.models import FallbackCounter
from markdownlint_mcp.core.linter.rules import RULES, get_implemented_rules
from markdownlint_mcp.report import render_fix, render_lint, rules_table
from markdownlint_mcp.tools.lint import check_markdown_file, config_for

MARKDOWN_SUFFIXES = (".md", ".markdown")


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="markdownlint-mcp-cli",
        description="Lint and fix Markdown files with markdownlint rules"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log rule and config decisions to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # lint command
    lint = subparsers.add_parser("lint", help="Report style issues")
    lint.add_argument("paths", nargs="+", type=Path, help="Markdown files or directories")
    lint.add_argument(
        "-c", "--config", type=Path,
        help="markdownlint config file (default: per-directory .markdownlint file)"
    )
    lint.add_argument(
        "-r", "--rules", nargs="+",
        help="Only run these rule ids or aliases"
    )

    # fix command
    fix = subparsers.add_parser("fix", help="Apply automatic fixes")
    fix.add_argument("paths", nargs="+", type=Path, help="Markdown files or directories")
    fix.add_argument(
        "-c", "--config", type=Path,
        help="markdownlint config file (default: per-directory .markdownlint file)"
    )
    fix.add_argument(
        "--dry-run", action="store_true",
        help="Show what would change without writing files"
    )

    # rules command
    subparsers.add_parser("rules", help="List available rules")

    # check command
    subparsers.add_parser("check", help="Health check (config, workspace, rules)")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "lint":
        sys.exit(asyncio.run(lint_command(args)))
    elif args.command == "fix":
        sys.exit(asyncio.run(fix_command(args)))
    elif args.command == "rules":
        rules_command()
    elif args.command == "check":
        check_command()


def collect_markdown_files(paths: list[Path]) -> list[Path]:
    """Expand directories into the Markdown files beneath them."""
    files = []
    for path in paths:
        path = path.expanduser()
        if path.is_dir():
            files.extend(
                sorted(p for p in path.rglob("*") if p.suffix in MARKDOWN_SUFFIXES and p.is_file())
            )
        else:
            files.append(path)
    return files


def _explicit_config(path: Path | None) -> dict | None:
    if path is None:
        return None
    try:
        return parse_config_file(path.expanduser())
    except Exception as e:
        print(f"Error: Failed to read config {path}: {e}", file=sys.stderr)
        sys.exit(2)


async def lint_command(args) -> int:
    """Execute the lint command. Returns the exit status."""
    config = Config.load()
    console = Console()
    explicit = _explicit_config(args.config)

    issues = 0
    for path in collect_markdown_files(args.paths):
        if error := check_markdown_file(path, config):
            print(f"Error: {error}", file=sys.stderr)
            issues += 1
            continue

        counter = FallbackCounter()
        md_config = explicit if explicit is not None else config_for(path.resolve().parent, config, counter)
        report = await engine.lint_file(path, config=md_config, rules=args.rules, counter=counter)
        render_lint(console, report)
        issues += report.total_issues

    return 1 if issues else 0


async def fix_command(args) -> int:
    """Execute the fix command. Returns the exit status."""
    config = Config.load()
    console = Console()
    explicit = _explicit_config(args.config)

    remaining = 0
    for path in collect_markdown_files(args.paths):
        if error := check_markdown_file(path, config):
            print(f"Error: {error}", file=sys.stderr)
            remaining += 1
            continue

        counter = FallbackCounter()
        md_config = explicit if explicit is not None else config_for(path.resolve().parent, config, counter)
        try:
            report = await engine.fix_file(
                path, write=not args.dry_run, config=md_config, counter=counter
            )
        except Exception as e:
            print(f"Error: Fixing {path} failed: {e}", file=sys.stderr)
            remaining += 1
            continue

        render_fix(console, report, dry_run=args.dry_run)
        remaining += report.issues_after

    return 1 if remaining else 0


def rules_command():
    """Execute the rules command."""
    console = Console()
    console.print(rules_table([RULES[rule_id] for rule_id in sorted(RULES)]))


def check_command():
    """Execute the check command."""
    print(f"markdownlint-mcp v{__version__}")
    print("=" * 40)

    config = Config.load()
    print("\nConfiguration:")
    print(f"  Workspace root: {config.workspace_root}")
    print(f"  Default config: {config.default_config or 'built-in'}")
    print(f"  Max file size: {config.max_file_bytes} bytes")
    print(f"  Log level: {config.log_level}")

    print("\nmarkdownlint config:")
    found = [name for name in CONFIG_FILES if (config.workspace_root / name).is_file()]
    if found:
        print(f"  Workspace file: {found[0]}")
    else:
        print("  Workspace file: none (using defaults)")

    counter = FallbackCounter()
    config_for(config.workspace_root, config, counter)
    if problems := [name for name in counter.snapshot() if name != "config_missing"]:
        print(f"  Status: FALLBACK ({', '.join(problems)})")
    else:
        print("  Status: ok")

    print("\nRules:")
    print(f"  Total: {len(RULES)}")
    print(f"  With fixes: {len(get_implemented_rules())}")

    print("\nMCP tools:")
    print("  - lint_markdown")
    print("  - fix_markdown")
    print("  - get_configuration")

    print("\n" + "=" * 40)
    print("Ready to lint!")


if __name__ == "__main__":
    main()
