"""Tests for table rules (MD055, MD056, MD058)."""
from markdownlint_mcp.core.linter.rules import tables


def _lines(violations):
    return [v.line_number for v in violations]


def test_pipe_style_consistent_with_first_row():
    lines = ["| a | b |", "| - | - |", "| 1 | 2"]
    violations = tables.table_pipe_style(lines)
    assert _lines(violations) == [3]
    assert violations[0].details == "Missing trailing pipe"
    assert tables.fix_table_pipe_style(lines) == ["| a | b |", "| - | - |", "| 1 | 2 |"]


def test_pipe_style_leading_only():
    lines = ["| a | b |", "| - | - |"]
    config = {"style": "leading_only"}
    violations = tables.table_pipe_style(lines, config)
    assert [v.details for v in violations] == ["Unexpected trailing pipe", "Unexpected trailing pipe"]
    fixed = tables.fix_table_pipe_style(lines, config)
    assert fixed == ["| a | b", "| - | -"]
    assert tables.table_pipe_style(fixed, config) == []


def test_single_column_table_keeps_its_pipes():
    lines = ["| a |", "| - |"]
    config = {"style": "no_leading_or_trailing"}
    assert len(tables.table_pipe_style(lines, config)) == 4
    assert tables.fix_table_pipe_style(lines, config) == lines


def test_column_count():
    lines = ["| a | b |", "| - | - |", "| 1 |", "| 1 | 2 | 3 |"]
    violations = tables.table_column_count(lines)
    assert [v.details for v in violations] == [
        "Expected: 2; Actual: 1; Too few cells, row will be missing data",
        "Expected: 2; Actual: 3; Too many cells, extra data will be missing",
    ]


def test_blanks_around_tables():
    lines = ["Text", "| a |", "| - |", "More"]
    violations = tables.blanks_around_tables(lines)
    assert [v.details for v in violations] == [
        "Missing blank line above table",
        "Missing blank line below table",
    ]
    assert tables.fix_blanks_around_tables(lines) == ["Text", "", "| a |", "| - |", "", "More"]


def test_table_in_code_block_is_ignored():
    lines = ["```", "| a | b |", "| - | - |", "```"]
    assert tables.table_pipe_style(lines, {"style": "no_leading_or_trailing"}) == []
    assert tables.blanks_around_tables(lines) == []
