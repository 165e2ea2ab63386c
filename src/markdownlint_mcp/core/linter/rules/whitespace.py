"""Whitespace and line-shape rules."""
from typing import Optional

from ..blocks import Document, is_blank, is_blockquote, parse_list_item, table_blocks
from ..models import RuleConfig, RuleViolation, get_option


def _is_code(doc: Document, index: int) -> bool:
    return doc.fenced[index] or doc.indented[index]


# ---------------------------------------------------------------------------
# MD009 no-trailing-spaces
# ---------------------------------------------------------------------------


def _in_list_context(lines: list[str], index: int) -> bool:
    i = index - 1
    while i >= 0 and is_blank(lines[i]):
        i -= 1
    if i < 0:
        return False
    return parse_list_item(lines[i]) is not None or lines[i].startswith(' ')


def _trailing_space_spans(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[int, int]]:
    """(index, kept_length) for each line whose trailing whitespace must go."""
    doc = Document.from_lines(lines)
    br_spaces = get_option(config, 'br_spaces', 2)
    strict = get_option(config, 'strict', False)
    list_item_empty_lines = get_option(config, 'list_item_empty_lines', False)
    expected = br_spaces if br_spaces >= 2 else 0
    spans = []

    for i, line in enumerate(lines):
        stripped = line.rstrip(' \t')
        trailing = len(line) - len(stripped)
        if not trailing or _is_code(doc, i):
            continue

        if not stripped and list_item_empty_lines and _in_list_context(lines, i):
            continue

        if trailing == expected and line.endswith(' ' * expected):
            if not strict:
                continue
            next_line = lines[i + 1] if i + 1 < len(lines) else ''
            if stripped and not is_blank(next_line):
                continue

        spans.append((i, len(stripped)))

    return spans


def no_trailing_spaces(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Trailing spaces."""
    return [
        RuleViolation(
            i + 1,
            f"Expected: 0 or {get_option(config, 'br_spaces', 2)}; Actual: {len(lines[i]) - kept}",
            (kept, len(lines[i])),
        )
        for i, kept in _trailing_space_spans(lines, config)
    ]


def fix_no_trailing_spaces(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for i, kept in _trailing_space_spans(lines, config):
        fixed[i] = lines[i][:kept]
    return fixed


# ---------------------------------------------------------------------------
# MD010 no-hard-tabs
# ---------------------------------------------------------------------------


def _tab_lines(lines: list[str], config: Optional[RuleConfig]) -> list[int]:
    doc = Document.from_lines(lines)
    code_blocks = get_option(config, 'code_blocks', True)
    ignored = {lang.lower() for lang in get_option(config, 'ignore_code_languages', [])}

    skipped: set[int] = set()
    for block in doc.fences:
        if not code_blocks or block.info.split(' ')[0].lower() in ignored:
            stop = block.end if block.end is not None else len(lines)
            skipped.update(range(block.start + 1, stop))

    found = []
    for i, line in enumerate(lines):
        if '\t' not in line or i in skipped:
            continue
        if not code_blocks and doc.indented[i]:
            continue
        found.append(i)
    return found


def no_hard_tabs(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Hard tabs."""
    violations = []
    for i in _tab_lines(lines, config):
        line = lines[i]
        start = line.find('\t')
        while start != -1:
            end = start
            while end < len(line) and line[end] == '\t':
                end += 1
            violations.append(RuleViolation(i + 1, f"Column: {start + 1}", (start, end)))
            start = line.find('\t', end)
    return violations


def fix_no_hard_tabs(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    spaces = get_option(config, 'spaces_per_tab', 1)
    replacement = ' ' * max(spaces, 0)
    fixed = list(lines)
    for i in _tab_lines(lines, config):
        fixed[i] = lines[i].replace('\t', replacement)
    return fixed


# ---------------------------------------------------------------------------
# MD012 no-multiple-blanks
# ---------------------------------------------------------------------------


def _excess_blank_lines(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[int, int]]:
    """(index, run_length) for each blank line beyond the allowed maximum."""
    doc = Document.from_lines(lines)
    maximum = max(get_option(config, 'maximum', 1), 0)
    excess = []
    run = 0

    for i, line in enumerate(lines):
        if is_blank(line) and not doc.fenced[i] and not doc.in_front_matter(i):
            run += 1
            if run > maximum:
                excess.append((i, run))
        else:
            run = 0

    return excess


def no_multiple_blanks(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Multiple consecutive blank lines."""
    maximum = max(get_option(config, 'maximum', 1), 0)
    return [
        RuleViolation(i + 1, f"Expected: {maximum}; Actual: {run}", (0, len(lines[i])))
        for i, run in _excess_blank_lines(lines, config)
    ]


def fix_no_multiple_blanks(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    dropped = {i for i, _ in _excess_blank_lines(lines, config)}
    return [line for i, line in enumerate(lines) if i not in dropped]


# ---------------------------------------------------------------------------
# MD013 line-length
# ---------------------------------------------------------------------------


def _is_reference_definition(line: str) -> bool:
    stripped = line.strip()
    if not stripped.startswith('['):
        return False
    close = stripped.find(']:')
    return close > 1


def line_length(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Line length."""
    doc = Document.from_lines(lines)
    limit = get_option(config, 'line_length', 80)
    heading_limit = get_option(config, 'heading_line_length', limit)
    code_limit = get_option(config, 'code_block_line_length', limit)
    check_code = get_option(config, 'code_blocks', True)
    check_tables = get_option(config, 'tables', True)
    check_headings = get_option(config, 'headings', True)
    strict = get_option(config, 'strict', False)

    table_lines: set[int] = set()
    for start, end in table_blocks(doc):
        table_lines.update(range(start, end))
    heading_lines: set[int] = set()
    for heading in doc.headings():
        heading_lines.add(heading.index)

    violations = []
    for i, line in enumerate(lines):
        if doc.in_front_matter(i):
            continue
        if _is_code(doc, i):
            if not check_code:
                continue
            maximum = code_limit
        elif i in heading_lines:
            if not check_headings:
                continue
            maximum = heading_limit
        elif i in table_lines:
            if not check_tables:
                continue
            maximum = limit
        else:
            maximum = limit

        if len(line) <= maximum or _is_reference_definition(line):
            continue
        overflow = line[maximum:]
        if not strict and ' ' not in overflow and '\t' not in overflow:
            continue

        violations.append(RuleViolation(
            i + 1,
            f"Expected: {maximum}; Actual: {len(line)}",
            (maximum, len(line)),
        ))

    return violations


# ---------------------------------------------------------------------------
# MD027 no-multiple-space-blockquote
# ---------------------------------------------------------------------------


def _blockquote_gaps(line: str) -> list[tuple[int, int]]:
    """(start, end) of every run of 2+ spaces after a '>' that precedes content."""
    gaps = []
    i = len(line) - len(line.lstrip(' '))
    while i < len(line) and line[i] == '>':
        j = i + 1
        while j < len(line) and line[j] == ' ':
            j += 1
        if j < len(line) and line[j] == '>':
            i = j
            continue
        if j - (i + 1) > 1 and j < len(line):
            gaps.append((i + 1, j))
        break
    return gaps


def no_multiple_space_blockquote(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Multiple spaces after blockquote symbol."""
    doc = Document.from_lines(lines)
    violations = []
    for i in doc.prose_indices():
        if not is_blockquote(lines[i]):
            continue
        for start, end in _blockquote_gaps(lines[i]):
            violations.append(RuleViolation(i + 1, lines[i].strip()[:40], (start, end)))
    return violations


def fix_no_multiple_space_blockquote(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for violation in no_multiple_space_blockquote(lines, config):
        i = violation.line_number - 1
        start, end = violation.range
        fixed[i] = fixed[i][:start] + ' ' + fixed[i][end:]
    return fixed


# ---------------------------------------------------------------------------
# MD028 no-blanks-blockquote
# ---------------------------------------------------------------------------


def _blockquote_separators(lines: list[str]) -> list[int]:
    doc = Document.from_lines(lines)
    found = []
    i = 0
    while i < len(lines):
        if not (is_blank(lines[i]) and i > 0 and doc.is_prose(i - 1) and is_blockquote(lines[i - 1])):
            i += 1
            continue
        j = i
        while j < len(lines) and is_blank(lines[j]):
            j += 1
        if j < len(lines) and doc.is_prose(j) and is_blockquote(lines[j]):
            found.extend(range(i, j))
        i = j
    return found


def no_blanks_blockquote(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Blank line inside blockquote."""
    return [RuleViolation(i + 1, '', (0, len(lines[i]))) for i in _blockquote_separators(lines)]


def fix_no_blanks_blockquote(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for i in _blockquote_separators(lines):
        fixed[i] = '>'
    return fixed


# ---------------------------------------------------------------------------
# MD047 single-trailing-newline
# ---------------------------------------------------------------------------


def single_trailing_newline(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Files should end with a single newline character."""
    if not lines or is_blank(lines[-1]):
        return []
    last = lines[-1]
    return [RuleViolation(len(lines), '', (len(last), len(last)))]


def fix_single_trailing_newline(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    if single_trailing_newline(lines, config):
        return [*lines, '']
    return list(lines)

