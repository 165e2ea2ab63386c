"""Tests for the CLI commands and environment configuration."""
import argparse
import asyncio

import pytest

from markdownlint_mcp import cli
from markdownlint_mcp.config import Config


def _run(coro):
    """Run async coroutine synchronously (avoids pytest-asyncio dep)."""
    return asyncio.run(coro)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.setenv("MARKDOWNLINT_MCP_WORKSPACE_ROOT", str(tmp_path))
    return tmp_path


# ---------------------------------------------------------------------------
# Config.load
# ---------------------------------------------------------------------------


def test_config_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("MARKDOWNLINT_MCP_WORKSPACE_ROOT", str(tmp_path))
    monkeypatch.setenv("MARKDOWNLINT_MCP_DEFAULT_CONFIG", str(tmp_path / "base.json"))
    monkeypatch.setenv("MARKDOWNLINT_MCP_MAX_FILE_BYTES", "1024")
    monkeypatch.setenv("MARKDOWNLINT_MCP_LOG_LEVEL", "debug")

    config = Config.load()
    assert config.workspace_root == tmp_path.resolve()
    assert config.default_config == tmp_path / "base.json"
    assert config.max_file_bytes == 1024
    assert config.log_level == "DEBUG"


def test_invalid_log_level_is_ignored(monkeypatch):
    monkeypatch.setenv("MARKDOWNLINT_MCP_LOG_LEVEL", "chatty")
    assert Config.load().log_level == "INFO"


# ---------------------------------------------------------------------------
# File collection
# ---------------------------------------------------------------------------


def test_collect_markdown_files(tmp_path):
    (tmp_path / "sub").mkdir()
    for name in ("b.md", "a.markdown", "notes.txt", "sub/c.md"):
        (tmp_path / name).write_text("# x\n")

    files = cli.collect_markdown_files([tmp_path, tmp_path / "notes.txt"])
    assert [f.relative_to(tmp_path).as_posix() for f in files] == [
        "a.markdown", "b.md", "sub/c.md", "notes.txt",
    ]


# ---------------------------------------------------------------------------
# lint / fix
# ---------------------------------------------------------------------------


def test_lint_command_exit_status(workspace):
    clean = workspace / "clean.md"
    clean.write_text("# Title\n\nText\n")
    dirty = workspace / "dirty.md"
    dirty.write_text("#Title\nText")

    assert _run(cli.lint_command(argparse.Namespace(paths=[clean], config=None, rules=None))) == 0
    assert _run(cli.lint_command(argparse.Namespace(paths=[dirty], config=None, rules=None))) == 1


def test_lint_command_rule_selection(workspace):
    path = workspace / "doc.md"
    path.write_text("#Title\nText\n")
    args = argparse.Namespace(paths=[path], config=None, rules=["MD047"])
    assert _run(cli.lint_command(args)) == 0


def test_lint_command_missing_file(workspace):
    args = argparse.Namespace(paths=[workspace / "nope.md"], config=None, rules=None)
    assert _run(cli.lint_command(args)) == 1


def test_fix_command_writes_and_passes(workspace):
    path = workspace / "doc.md"
    path.write_text("#Title\n\nText")

    args = argparse.Namespace(paths=[workspace], config=None, dry_run=False)
    assert _run(cli.fix_command(args)) == 0
    assert path.read_text() == "# Title\n\nText\n"


def test_fix_command_dry_run(workspace):
    path = workspace / "doc.md"
    path.write_text("#Title\n\nText")

    args = argparse.Namespace(paths=[path], config=None, dry_run=True)
    assert _run(cli.fix_command(args)) == 0
    assert path.read_text() == "#Title\n\nText"


def test_explicit_config(workspace):
    config_file = workspace / "strict.json"
    config_file.write_text('{"default": false, "MD047": true}')
    path = workspace / "doc.md"
    path.write_text("#Title\nText\n")

    args = argparse.Namespace(paths=[path], config=config_file, rules=None)
    assert _run(cli.lint_command(args)) == 0


def test_unreadable_explicit_config_exits(workspace):
    path = workspace / "doc.md"
    path.write_text("# Title\n")
    args = argparse.Namespace(paths=[path], config=workspace / "missing.json", rules=None)

    with pytest.raises(SystemExit) as exc:
        _run(cli.lint_command(args))
    assert exc.value.code == 2


# ---------------------------------------------------------------------------
# rules / check
# ---------------------------------------------------------------------------


def test_rules_command_lists_catalog(capsys):
    cli.rules_command()
    out = capsys.readouterr().out
    assert "MD001" in out
    assert "MD059" in out


def test_check_command(workspace, capsys):
    (workspace / ".markdownlint.yaml").write_text("MD013: false\n")
    cli.check_command()
    out = capsys.readouterr().out
    assert "Workspace file: .markdownlint.yaml" in out
    assert "Status: ok" in out
    assert "Total: 52" in out
