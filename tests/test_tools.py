"""Tests for the MCP tool and resource handlers."""
import asyncio
import json

import pytest

from markdownlint_mcp.config import Config
from markdownlint_mcp.core.config_loader import DEFAULT_CONFIG
from markdownlint_mcp.resources import rule_resources
from markdownlint_mcp.tools import lint
from markdownlint_mcp.tools.lint import base_config


def _run(coro):
    """Run async coroutine synchronously (avoids pytest-asyncio dep)."""
    return asyncio.run(coro)


class FakeMCP:
    """Captures the functions registered through the FastMCP decorators."""

    def __init__(self):
        self.tools = {}
        self.resources = {}

    def tool(self):
        def decorator(fn):
            self.tools[fn.__name__] = fn
            return fn
        return decorator

    def resource(self, uri):
        def decorator(fn):
            self.resources[uri] = fn
            return fn
        return decorator


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "workspace"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def tools(workspace):
    mcp = FakeMCP()
    lint.register(mcp, Config(workspace_root=workspace))
    return mcp.tools


# ---------------------------------------------------------------------------
# lint_markdown
# ---------------------------------------------------------------------------


def test_lint_markdown_relative_path(workspace, tools):
    (workspace / "doc.md").write_text("#Title\nText")

    result = _run(tools["lint_markdown"]("doc.md"))

    assert result["path"] == str(workspace / "doc.md")
    assert [issue["rule"] for issue in result["issues"]] == ["MD018", "MD047"]
    assert result["fixable"] == 2
    assert result["diagnostics"] == {"config_missing": 1}


def test_lint_markdown_uses_directory_config(workspace, tools):
    (workspace / ".markdownlint.json").write_text('{"MD018": false}')
    (workspace / "doc.md").write_text("#Title\nText")

    result = _run(tools["lint_markdown"](str(workspace / "doc.md")))

    assert [issue["rule"] for issue in result["issues"]] == ["MD041", "MD047"]
    assert "diagnostics" not in result


def test_lint_markdown_missing_file(workspace, tools):
    result = _run(tools["lint_markdown"]("nope.md"))
    assert result["error"].startswith("File not found:")


def test_lint_markdown_directory(workspace, tools):
    (workspace / "docs").mkdir()
    result = _run(tools["lint_markdown"]("docs"))
    assert result["error"].startswith("Not a file:")


def test_lint_markdown_too_large(workspace):
    mcp = FakeMCP()
    lint.register(mcp, Config(workspace_root=workspace, max_file_bytes=10))
    (workspace / "big.md").write_text("# Title\n\n" + "text " * 10)

    result = _run(mcp.tools["lint_markdown"]("big.md"))
    assert result["error"].startswith("File too large:")


# ---------------------------------------------------------------------------
# fix_markdown
# ---------------------------------------------------------------------------


def test_fix_markdown_dry_run(workspace, tools):
    path = workspace / "doc.md"
    path.write_text("#Title\nText")

    result = _run(tools["fix_markdown"]("doc.md", write_file=False))

    assert result["content"] == "# Title\nText\n"
    assert result["rules_applied"] == ["MD018", "MD047"]
    assert result["written"] is False
    assert [issue["rule"] for issue in result["remaining"]] == ["MD022"]
    assert path.read_text() == "#Title\nText"


def test_fix_markdown_writes_file(workspace, tools):
    path = workspace / "doc.md"
    path.write_text("#Title\nText")

    result = _run(tools["fix_markdown"]("doc.md"))

    assert result["written"] is True
    assert "content" not in result
    assert path.read_text() == "# Title\nText\n"


def test_fix_markdown_missing_file(tools):
    result = _run(tools["fix_markdown"]("nope.md"))
    assert "error" in result


# ---------------------------------------------------------------------------
# get_configuration
# ---------------------------------------------------------------------------


def test_get_configuration_defaults(workspace, tools):
    result = _run(tools["get_configuration"]())

    assert result["directory"] == str(workspace)
    assert result["configuration"] == DEFAULT_CONFIG
    assert result["source"] == "default"
    assert len(result["fixable_rules"]) == 39
    assert "MD044" in result["fixable_rules"]


def test_get_configuration_from_file(workspace, tools):
    (workspace / "docs").mkdir()
    (workspace / "docs" / ".markdownlint.yaml").write_text("MD013: false\n")

    result = _run(tools["get_configuration"]("docs"))

    assert result["configuration"] == {"MD013": False}
    assert result["source"] == "file"


def test_get_configuration_rejects_escape(tools):
    result = _run(tools["get_configuration"]("../.."))
    assert result["source"] == "default"
    assert result["configuration"] == DEFAULT_CONFIG


def test_server_default_config(tmp_path, workspace):
    default_file = tmp_path / "base.yaml"
    default_file.write_text("default: false\nMD001: true\n")
    config = Config(workspace_root=workspace, default_config=default_file)

    assert base_config(config) == {"default": False, "MD001": True}

    mcp = FakeMCP()
    lint.register(mcp, config)
    result = _run(mcp.tools["get_configuration"]())
    assert result["configuration"] == {"default": False, "MD001": True}


def test_unreadable_server_default_config_is_ignored(tmp_path, workspace):
    config = Config(workspace_root=workspace, default_config=tmp_path / "missing.json")
    assert base_config(config) is None


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


@pytest.fixture
def resources(workspace):
    mcp = FakeMCP()
    rule_resources.register(mcp, Config(workspace_root=workspace))
    return mcp.resources


def test_rule_index(resources):
    index = json.loads(resources["rules://index"]())
    assert index["total_count"] == 52
    assert index["fixable_count"] == 39
    assert index["rules"][0]["id"] == "MD001"


def test_rule_details_by_alias(resources):
    details = json.loads(resources["rules://{rule_id}"]("line-length"))
    assert details["id"] == "MD013"
    assert details["aliases"] == ["line-length"]
    assert details["fixable"] is False


def test_unknown_rule_details(resources):
    details = json.loads(resources["rules://{rule_id}"]("MD999"))
    assert details == {"error": "Rule not found: MD999"}
