"""Code block and code span rules."""
from typing import Optional

from ..blocks import Document, FencedBlock, code_spans, fence_char, indent_of, is_blank
from ..models import RuleConfig, RuleViolation, get_option
from .lists import list_blocks

FENCE_NAMES = {'`': 'backtick', '~': 'tilde'}
FENCE_CHARS = {v: k for k, v in FENCE_NAMES.items()}


def _fence_body(block: FencedBlock, total: int) -> range:
    stop = block.end if block.end is not None else total
    return range(block.start + 1, stop)


def _indented_runs(doc: Document) -> list[tuple[int, int]]:
    """Indented code blocks as (first, last) inclusive line indices."""
    runs = []
    i = 0
    total = len(doc.lines)
    while i < total:
        if not doc.indented[i]:
            i += 1
            continue
        start = last = i
        j = i + 1
        while j < total and (doc.indented[j] or (is_blank(doc.lines[j]) and not doc.fenced[j])):
            if doc.indented[j]:
                last = j
            j += 1
        runs.append((start, last))
        i = last + 1
    return runs


# ---------------------------------------------------------------------------
# MD014 commands-show-output
# ---------------------------------------------------------------------------


def _dollar_lines(lines: list[str]) -> list[int]:
    doc = Document.from_lines(lines)
    bodies = [list(_fence_body(block, len(lines))) for block in doc.fences]
    bodies.extend(list(range(start, last + 1)) for start, last in _indented_runs(doc))

    found = []
    for body in bodies:
        content = [i for i in body if not is_blank(lines[i])]
        if content and all(_dollar_prefix(lines[i]) for i in content):
            found.extend(content)
    return sorted(found)


def _dollar_prefix(line: str) -> Optional[tuple[int, int]]:
    """(start, end) of a leading ``$`` prompt and the whitespace after it."""
    start = len(line) - len(line.lstrip())
    if not line.startswith('$', start):
        return None
    end = start + 1
    if end < len(line) and line[end] not in ' \t':
        return None
    while end < len(line) and line[end] in ' \t':
        end += 1
    return start, end


def commands_show_output(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Dollar signs used before commands without showing output."""
    violations = []
    for i in _dollar_lines(lines):
        start, end = _dollar_prefix(lines[i])
        violations.append(RuleViolation(i + 1, lines[i].strip(), (start, end)))
    return violations


def fix_commands_show_output(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for i in _dollar_lines(lines):
        start, end = _dollar_prefix(lines[i])
        fixed[i] = lines[i][:start] + lines[i][end:]
    return fixed


# ---------------------------------------------------------------------------
# MD031 blanks-around-fences
# ---------------------------------------------------------------------------


def _fence_gaps(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[int, str]]:
    doc = Document.from_lines(lines)
    list_items = get_option(config, 'list_items', True)

    in_list: set[int] = set()
    if not list_items:
        for block in list_blocks(doc):
            in_list.update(range(block.start, block.end))

    gaps = []
    for block in doc.fences:
        if block.start in in_list:
            continue
        above = block.start - 1
        if above >= doc.front_matter and not is_blank(lines[above]):
            gaps.append((block.start, 'above'))
        if block.end is not None:
            below = block.end + 1
            if below < len(lines) and not is_blank(lines[below]):
                gaps.append((block.end, 'below'))
    return gaps


def blanks_around_fences(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Fenced code blocks should be surrounded by blank lines."""
    return [
        RuleViolation(i + 1, f"Missing blank line {side} fenced code block", (0, len(lines[i])))
        for i, side in _fence_gaps(lines, config)
    ]


def fix_blanks_around_fences(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    before = set()
    after = set()
    for i, side in _fence_gaps(lines, config):
        (before if side == 'above' else after).add(i)

    fixed = []
    for i, line in enumerate(lines):
        if i in before:
            fixed.append('')
        fixed.append(line)
        if i in after:
            fixed.append('')
    return fixed


# ---------------------------------------------------------------------------
# MD038 no-space-in-code
# ---------------------------------------------------------------------------


def _trimmed_span(content: str) -> Optional[str]:
    """Return the corrected span content, or None when the span is fine."""
    if not content.strip():
        return None
    if content[0] not in ' \t' and content[-1] not in ' \t':
        return None

    inner = content.strip(' \t')
    needs_padding = inner.startswith('`') or inner.endswith('`')
    if needs_padding and content == f" {inner} ":
        return None
    return f" {inner} " if needs_padding else inner


def _bad_code_spans(lines: list[str]) -> list[tuple[int, int, int, str]]:
    """(index, start, end, replacement) for code spans with padded content."""
    doc = Document.from_lines(lines)
    found = []
    for i in doc.prose_indices():
        line = lines[i]
        if '`' not in line:
            continue
        for start, end, ticks in code_spans(line):
            content = line[start + ticks:end - ticks]
            replacement = _trimmed_span(content)
            if replacement is not None:
                fence = '`' * ticks
                found.append((i, start, end, f"{fence}{replacement}{fence}"))
    return found


def no_space_in_code(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Spaces inside code span elements."""
    return [
        RuleViolation(i + 1, lines[i][start:end], (start, end))
        for i, start, end, _ in _bad_code_spans(lines)
    ]


def fix_no_space_in_code(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    # Right to left so earlier offsets stay valid.
    for i, start, end, replacement in reversed(_bad_code_spans(lines)):
        fixed[i] = fixed[i][:start] + replacement + fixed[i][end:]
    return fixed


# ---------------------------------------------------------------------------
# MD040 fenced-code-language
# ---------------------------------------------------------------------------


def fenced_code_language(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Fenced code blocks should have a language specified."""
    doc = Document.from_lines(lines)
    allowed = get_option(config, 'allowed_languages', [])
    language_only = get_option(config, 'language_only', False)

    violations = []
    for block in doc.fences:
        info = block.info.strip()
        line = lines[block.start]
        span = (0, len(line))
        if not info:
            violations.append(RuleViolation(block.start + 1, '', span))
            continue
        language = info.split()[0]
        if allowed and language not in allowed:
            violations.append(RuleViolation(block.start + 1, f'"{language}" is not allowed', span))
        elif language_only and info != language:
            violations.append(RuleViolation(block.start + 1, f"Info string contains more than language: {info}", span))
    return violations


# ---------------------------------------------------------------------------
# MD046 code-block-style
# ---------------------------------------------------------------------------


def _code_blocks(doc: Document) -> list[tuple[int, str]]:
    """(start_index, style) for each code block in document order."""
    found = [(block.start, 'fenced') for block in doc.fences]
    found.extend((start, 'indented') for start, _ in _indented_runs(doc))
    return sorted(found)


def _expected_block_style(doc: Document, config: Optional[RuleConfig]) -> Optional[str]:
    style = get_option(config, 'style', 'consistent')
    if style in ('fenced', 'indented'):
        return style
    blocks = _code_blocks(doc)
    return blocks[0][1] if blocks else None


def code_block_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Code block style."""
    doc = Document.from_lines(lines)
    expected = _expected_block_style(doc, config)
    return [
        RuleViolation(start + 1, f"Expected: {expected}; Actual: {style}", (0, len(lines[start])))
        for start, style in _code_blocks(doc)
        if style != expected
    ]


def fix_code_block_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    """Convert indented blocks to fenced ones; fenced blocks are left alone."""
    doc = Document.from_lines(lines)
    if _expected_block_style(doc, config) != 'fenced':
        return list(lines)

    runs = {start: last for start, last in _indented_runs(doc)}
    fixed = []
    i = 0
    while i < len(lines):
        if i not in runs:
            fixed.append(lines[i])
            i += 1
            continue
        last = runs[i]
        fixed.append('```')
        fixed.extend(line[4:] if indent_of(line) >= 4 else line.strip() for line in lines[i:last + 1])
        fixed.append('```')
        i = last + 1
    return fixed


# ---------------------------------------------------------------------------
# MD048 code-fence-style
# ---------------------------------------------------------------------------


def _fence_mismatches(lines: list[str], config: Optional[RuleConfig]) -> tuple[Optional[str], list[FencedBlock]]:
    doc = Document.from_lines(lines)
    style = get_option(config, 'style', 'consistent')
    expected = FENCE_CHARS.get(style)
    if expected is None:
        expected = doc.fences[0].char if doc.fences else None
    return expected, [block for block in doc.fences if block.char != expected]


def code_fence_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Code fence style."""
    expected, mismatched = _fence_mismatches(lines, config)
    violations = []
    for block in mismatched:
        detail = f"Expected: {FENCE_NAMES[expected]}; Actual: {FENCE_NAMES[block.char]}"
        for i in (block.start, block.end):
            if i is not None:
                violations.append(RuleViolation(i + 1, detail, (0, len(lines[i]))))
    return violations


def _swap_fence(line: str, char: str) -> str:
    indent = len(line) - len(line.lstrip())
    old = line[indent]
    end = indent
    while end < len(line) and line[end] == old:
        end += 1
    return line[:indent] + char * (end - indent) + line[end:]


def fix_code_fence_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    expected, mismatched = _fence_mismatches(lines, config)
    fixed = list(lines)
    for block in mismatched:
        if block.end is None:
            continue
        if expected == '`' and '`' in block.info:
            continue
        # A body line using the target char would close the converted fence early.
        if any(fence_char(lines[i]) == expected for i in range(block.start + 1, block.end)):
            continue
        fixed[block.start] = _swap_fence(lines[block.start], expected)
        fixed[block.end] = _swap_fence(lines[block.end], expected)
    return fixed
