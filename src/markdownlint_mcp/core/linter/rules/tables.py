"""GFM table rules."""
from typing import Optional

from ..blocks import Document, is_blank, split_table_cells, table_blocks
from ..models import RuleConfig, RuleViolation, get_option

PIPE_STYLES = {
    'leading_only': (True, False),
    'trailing_only': (False, True),
    'leading_and_trailing': (True, True),
    'no_leading_or_trailing': (False, False),
}


def _edge_pipes(row: str) -> tuple[bool, bool]:
    stripped = row.strip()
    leading = stripped.startswith('|')
    trailing = len(stripped) > 1 and stripped.endswith('|') and not stripped.endswith('\\|')
    return leading, trailing


# ---------------------------------------------------------------------------
# MD055 table-pipe-style
# ---------------------------------------------------------------------------


def _pipe_mismatches(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[int, bool, bool, int]]:
    """(index, want_leading, want_trailing, column_count) for rows off the expected style."""
    doc = Document.from_lines(lines)
    tables = table_blocks(doc)
    style = get_option(config, 'style', 'consistent')
    expected = PIPE_STYLES.get(style)
    if expected is None and tables:
        expected = _edge_pipes(lines[tables[0][0]])

    found = []
    for start, end in tables:
        columns = len(split_table_cells(lines[start + 1]))
        for i in range(start, end):
            if _edge_pipes(lines[i]) != expected:
                found.append((i, expected[0], expected[1], columns))
    return found


def table_pipe_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Table pipe style."""
    violations = []
    for i, want_leading, want_trailing, _ in _pipe_mismatches(lines, config):
        leading, trailing = _edge_pipes(lines[i])
        line = lines[i]
        if leading != want_leading:
            details = 'Missing leading pipe' if want_leading else 'Unexpected leading pipe'
            violations.append(RuleViolation(i + 1, details, (0, 1)))
        if trailing != want_trailing:
            details = 'Missing trailing pipe' if want_trailing else 'Unexpected trailing pipe'
            violations.append(RuleViolation(i + 1, details, (max(len(line) - 1, 0), len(line))))
    return violations


def fix_table_pipe_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for i, want_leading, want_trailing, columns in _pipe_mismatches(lines, config):
        # A single column needs at least one edge pipe to stay a table.
        if columns < 2 and not (want_leading or want_trailing):
            continue
        row = lines[i].strip()
        leading, trailing = _edge_pipes(row)
        if leading and not want_leading:
            row = row[1:].lstrip()
        elif want_leading and not leading:
            row = f"| {row}"
        if trailing and not want_trailing:
            row = row[:-1].rstrip()
        elif want_trailing and not trailing:
            row = f"{row} |"
        fixed[i] = row
    return fixed


# ---------------------------------------------------------------------------
# MD056 table-column-count
# ---------------------------------------------------------------------------


def table_column_count(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Table column count."""
    doc = Document.from_lines(lines)
    violations = []
    for start, end in table_blocks(doc):
        expected = len(split_table_cells(lines[start]))
        for i in range(start + 1, end):
            actual = len(split_table_cells(lines[i]))
            if actual == expected:
                continue
            hint = 'Too few cells, row will be missing data' if actual < expected \
                else 'Too many cells, extra data will be missing'
            violations.append(RuleViolation(
                i + 1, f"Expected: {expected}; Actual: {actual}; {hint}", (0, len(lines[i])),
            ))
    return violations


# ---------------------------------------------------------------------------
# MD058 blanks-around-tables
# ---------------------------------------------------------------------------


def _table_gaps(lines: list[str]) -> list[tuple[int, str]]:
    doc = Document.from_lines(lines)
    gaps = []
    for start, end in table_blocks(doc):
        if start > doc.front_matter and not is_blank(lines[start - 1]):
            gaps.append((start, 'above'))
        if end < len(lines) and not is_blank(lines[end]):
            gaps.append((end - 1, 'below'))
    return gaps


def blanks_around_tables(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Tables should be surrounded by blank lines."""
    return [
        RuleViolation(i + 1, f"Missing blank line {side} table", (0, len(lines[i])))
        for i, side in _table_gaps(lines)
    ]


def fix_blanks_around_tables(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    before = set()
    after = set()
    for i, side in _table_gaps(lines):
        (before if side == 'above' else after).add(i)

    fixed = []
    for i, line in enumerate(lines):
        if i in before:
            fixed.append('')
        fixed.append(line)
        if i in after:
            fixed.append('')
    return fixed
