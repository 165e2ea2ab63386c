"""Heading structure and style rules."""
from typing import Optional

from ..blocks import (
    Document,
    Heading,
    atx_prefix,
    front_matter_length,
    is_blank,
    is_blockquote,
    is_fence,
    is_thematic_break,
    parse_atx,
    parse_list_item,
)
from ..models import RuleConfig, RuleViolation, get_option
from ..safe_match import ends_with_punctuation, has_front_matter_title, strip_trailing_punctuation

HEADING_PUNCTUATION = '.,;:!。，；：！'
EMPHASIS_PUNCTUATION = '.,;:!?。，；：！？'


def _heading_line(doc: Document, heading: Heading) -> str:
    return doc.lines[heading.index]


def _set_atx_level(line: str, level: int) -> str:
    parsed = atx_prefix(line)
    if parsed is None:
        return line
    indent, _, rest = parsed
    return f"{indent}{'#' * level}{rest}"


def _atx_line(level: int, text: str, closed: bool = False) -> str:
    line = f"{'#' * level} {text}"
    if closed:
        line += f" {'#' * level}"
    return line


# ---------------------------------------------------------------------------
# MD001 heading-increment
# ---------------------------------------------------------------------------


def heading_increment(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Heading levels should only increment by one level at a time."""
    doc = Document.from_lines(lines)
    violations = []
    previous: Optional[int] = None

    for heading in doc.headings():
        if previous is not None and heading.level > previous + 1:
            violations.append(RuleViolation(
                heading.index + 1,
                f"Expected: h{previous + 1}; Actual: h{heading.level}",
                (0, len(_heading_line(doc, heading))),
            ))
        previous = heading.level

    return violations


def fix_heading_increment(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    doc = Document.from_lines(lines)
    fixed = list(lines)
    previous: Optional[int] = None

    for heading in doc.headings():
        level = heading.level
        if previous is not None and level > previous + 1:
            level = previous + 1
            if heading.style != 'setext':
                fixed[heading.index] = _set_atx_level(fixed[heading.index], level)
        previous = level

    return fixed


# ---------------------------------------------------------------------------
# MD003 heading-style
# ---------------------------------------------------------------------------


def _expected_heading_style(style: str, level: int) -> str:
    if style == 'setext_with_atx':
        return 'setext' if level < 3 else 'atx'
    if style == 'setext_with_atx_closed':
        return 'setext' if level < 3 else 'atx_closed'
    return style


def _configured_heading_style(headings: list[Heading], config: Optional[RuleConfig]) -> Optional[str]:
    style = get_option(config, 'style', 'consistent')
    if style == 'consistent':
        return headings[0].style if headings else None
    return style


def heading_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Heading style should be consistent."""
    doc = Document.from_lines(lines)
    headings = doc.headings()
    style = _configured_heading_style(headings, config)
    violations = []

    for heading in headings:
        expected = _expected_heading_style(style, heading.level)
        if heading.style != expected:
            violations.append(RuleViolation(
                heading.index + 1,
                f"Expected: {expected}; Actual: {heading.style}",
                (0, len(_heading_line(doc, heading))),
            ))

    return violations


def _setext_fits(lines: list[str], heading: Heading, ends: set[int]) -> bool:
    """Whether an ATX heading would still read as a heading in setext form."""
    text = heading.text
    if not text or not Document.from_lines([text, '===']).headings():
        return False
    if heading.index == 0 or heading.index - 1 in ends:
        return True
    previous = lines[heading.index - 1]
    return is_blank(previous) or is_fence(previous) or is_thematic_break(previous)


def fix_heading_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    doc = Document.from_lines(lines)
    headings = doc.headings()
    style = _configured_heading_style(headings, config)
    ends = {h.index if h.underline is None else h.underline for h in headings}
    replacements: dict[int, list[str]] = {}
    dropped: set[int] = set()

    for heading in headings:
        expected = _expected_heading_style(style, heading.level)
        if heading.style == expected:
            continue

        if expected in ('atx', 'atx_closed'):
            replacements[heading.index] = [
                _atx_line(heading.level, heading.text, closed=expected == 'atx_closed')
            ]
            if heading.underline is not None:
                dropped.add(heading.underline)
        elif expected == 'setext' and heading.level <= 2 and _setext_fits(lines, heading, ends):
            underline = ('=' if heading.level == 1 else '-') * max(len(heading.text), 3)
            replacements[heading.index] = [heading.text, underline]

    fixed = []
    for i, line in enumerate(lines):
        if i in dropped:
            continue
        fixed.extend(replacements.get(i, [line]))
    return fixed


# ---------------------------------------------------------------------------
# MD018 / MD019 / MD020 / MD021 heading spacing
# ---------------------------------------------------------------------------


def _looks_closed(rest: str) -> bool:
    return rest.rstrip().endswith('#')


def no_missing_space_atx(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """No space after hash on atx style heading."""
    doc = Document.from_lines(lines)
    violations = []

    for i in doc.prose_indices():
        parsed = atx_prefix(lines[i])
        if parsed is None:
            continue
        indent, hashes, rest = parsed
        if rest and rest[0] not in ' \t' and not _looks_closed(rest):
            violations.append(RuleViolation(
                i + 1,
                lines[i].strip()[:40],
                (0, len(indent) + len(hashes) + 1),
            ))

    return violations


def fix_no_missing_space_atx(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for violation in no_missing_space_atx(lines, config):
        i = violation.line_number - 1
        indent, hashes, rest = atx_prefix(lines[i])
        fixed[i] = f"{indent}{hashes} {rest}"
    return fixed


def no_multiple_space_atx(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Multiple spaces after hash on atx style heading."""
    doc = Document.from_lines(lines)
    violations = []

    for i in doc.prose_indices():
        parsed = parse_atx(lines[i])
        if parsed is None or parsed[2] or not parsed[1]:
            continue
        indent, hashes, rest = atx_prefix(lines[i])
        gap = len(rest) - len(rest.lstrip(' \t'))
        if gap > 1:
            start = len(indent) + len(hashes)
            violations.append(RuleViolation(i + 1, lines[i].strip()[:40], (start, start + gap)))

    return violations


def fix_no_multiple_space_atx(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for violation in no_multiple_space_atx(lines, config):
        i = violation.line_number - 1
        indent, hashes, rest = atx_prefix(lines[i])
        text = rest.lstrip(' \t')
        fixed[i] = f"{indent}{hashes} {text}"
    return fixed


def _closed_parts(line: str) -> Optional[tuple[str, str, str, str, str, str]]:
    """
    Split a closed-ATX-looking line into
    (indent, open_hashes, left_gap, text, right_gap, close_hashes).
    """
    parsed = atx_prefix(line)
    if parsed is None:
        return None
    indent, hashes, rest = parsed
    body = rest.rstrip()
    end = len(body)
    while end > 0 and body[end - 1] == '#':
        end -= 1
    if end == len(body) or end == 0:
        return None
    close = body[end:]
    inner = body[:end]
    if inner.endswith('\\'):
        return None
    text = inner.strip(' \t')
    if not text:
        return None
    left = inner[:len(inner) - len(inner.lstrip(' \t'))]
    right = inner[len(inner.rstrip(' \t')):]
    return indent, hashes, left, text, right, close


def no_missing_space_closed_atx(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """No space inside hashes on closed atx style heading."""
    doc = Document.from_lines(lines)
    violations = []

    for i in doc.prose_indices():
        parts = _closed_parts(lines[i])
        if parts is None:
            continue
        indent, hashes, left, text, right, close = parts
        # "# C#" keeps its hash: only a matching closing run counts as closed.
        missing_left = not left
        missing_right = not right and bool(left) and len(close) == len(hashes) and len(close) > 1
        if missing_left or missing_right:
            violations.append(RuleViolation(i + 1, lines[i].strip()[:40], (0, len(lines[i].rstrip()))))

    return violations


def fix_no_missing_space_closed_atx(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for violation in no_missing_space_closed_atx(lines, config):
        i = violation.line_number - 1
        indent, hashes, _, text, _, close = _closed_parts(lines[i])
        fixed[i] = f"{indent}{hashes} {text} {close}"
    return fixed


def no_multiple_space_closed_atx(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Multiple spaces inside hashes on closed atx style heading."""
    doc = Document.from_lines(lines)
    violations = []

    for i in doc.prose_indices():
        parsed = parse_atx(lines[i])
        if parsed is None or not parsed[2]:
            continue
        parts = _closed_parts(lines[i])
        if parts is None:
            continue
        _, _, left, _, right, _ = parts
        if len(left) > 1 or len(right) > 1:
            violations.append(RuleViolation(i + 1, lines[i].strip()[:40], (0, len(lines[i].rstrip()))))

    return violations


def fix_no_multiple_space_closed_atx(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for violation in no_multiple_space_closed_atx(lines, config):
        i = violation.line_number - 1
        indent, hashes, _, text, _, close = _closed_parts(lines[i])
        fixed[i] = f"{indent}{hashes} {text} {close}"
    return fixed


# ---------------------------------------------------------------------------
# MD022 blanks-around-headings
# ---------------------------------------------------------------------------


def _blank_run_before(lines: list[str], index: int, floor: int) -> int:
    count = 0
    i = index - 1
    while i >= floor and is_blank(lines[i]):
        count += 1
        i -= 1
    return count


def _blank_run_after(lines: list[str], index: int) -> int:
    count = 0
    i = index + 1
    while i < len(lines) and is_blank(lines[i]):
        count += 1
        i += 1
    return count


def _heading_blank_gaps(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[Heading, int, int]]:
    """(heading, missing_above, missing_below) for each heading short of blank lines."""
    doc = Document.from_lines(lines)
    above = get_option(config, 'lines_above', 1)
    below = get_option(config, 'lines_below', 1)
    gaps = []

    for heading in doc.headings():
        last = heading.underline if heading.underline is not None else heading.index
        missing_above = 0
        missing_below = 0

        if above >= 0 and heading.index > doc.front_matter:
            found = _blank_run_before(lines, heading.index, doc.front_matter)
            if heading.index - found > doc.front_matter:
                missing_above = max(above - found, 0)

        if below >= 0 and last + 1 < len(lines):
            found = _blank_run_after(lines, last)
            if last + found + 1 < len(lines):
                missing_below = max(below - found, 0)

        if missing_above or missing_below:
            gaps.append((heading, missing_above, missing_below))

    return gaps


def blanks_around_headings(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Headings should be surrounded by blank lines."""
    above = get_option(config, 'lines_above', 1)
    below = get_option(config, 'lines_below', 1)
    violations = []

    for heading, missing_above, missing_below in _heading_blank_gaps(lines, config):
        width = len(lines[heading.index])
        if missing_above:
            violations.append(RuleViolation(
                heading.index + 1,
                f"Expected: {above}; Actual: {above - missing_above}; Above",
                (0, width),
            ))
        if missing_below:
            violations.append(RuleViolation(
                heading.index + 1,
                f"Expected: {below}; Actual: {below - missing_below}; Below",
                (0, width),
            ))

    return violations


def fix_blanks_around_headings(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    before: dict[int, int] = {}
    after: dict[int, int] = {}

    for heading, missing_above, missing_below in _heading_blank_gaps(lines, config):
        last = heading.underline if heading.underline is not None else heading.index
        if missing_above:
            before[heading.index] = max(before.get(heading.index, 0), missing_above)
        if missing_below:
            after[last] = max(after.get(last, 0), missing_below)

    fixed = []
    for i, line in enumerate(lines):
        # A heading directly below another needs one gap, not two.
        pending = before.get(i, 0)
        if pending and fixed and i - 1 in after:
            pending = max(pending - after[i - 1], 0)
        fixed.extend([''] * pending)
        fixed.append(line)
        fixed.extend([''] * after.get(i, 0))
    return fixed


# ---------------------------------------------------------------------------
# MD023 heading-start-left
# ---------------------------------------------------------------------------


def heading_start_left(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Headings must start at the beginning of the line."""
    doc = Document.from_lines(lines)
    violations = []

    for i in doc.prose_indices():
        line = lines[i]
        if not line.startswith((' ', '\t')):
            continue
        if parse_atx(line.lstrip(' \t')) is None:
            continue
        if parse_list_item(lines[i - 1] if i else '') is not None:
            continue
        width = len(line) - len(line.lstrip(' \t'))
        violations.append(RuleViolation(i + 1, line.strip()[:40], (0, width)))

    return violations


def fix_heading_start_left(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for violation in heading_start_left(lines, config):
        i = violation.line_number - 1
        fixed[i] = lines[i].lstrip(' \t')
    return fixed


# ---------------------------------------------------------------------------
# MD024 no-duplicate-heading
# ---------------------------------------------------------------------------


def no_duplicate_heading(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Multiple headings with the same content."""
    doc = Document.from_lines(lines)
    siblings_only = get_option(config, 'siblings_only', False)
    violations = []

    seen_all: set[str] = set()
    # One "seen" set per open nesting level when siblings_only is on.
    seen_by_level: list[set[str]] = [set() for _ in range(7)]

    for heading in doc.headings():
        text = heading.text.strip()
        if siblings_only:
            for deeper in range(heading.level + 1, 7):
                seen_by_level[deeper].clear()
            bucket = seen_by_level[heading.level]
        else:
            bucket = seen_all

        if text in bucket:
            violations.append(RuleViolation(
                heading.index + 1,
                text,
                (0, len(_heading_line(doc, heading))),
            ))
        bucket.add(text)

    return violations


# ---------------------------------------------------------------------------
# MD025 single-title / single-h1
# ---------------------------------------------------------------------------


def _title_pattern(config: Optional[RuleConfig]) -> tuple[bool, Optional[str]]:
    """(enabled, pattern) for the front matter title check."""
    pattern = get_option(config, 'front_matter_title', None)
    if pattern is None:
        return True, None
    if not isinstance(pattern, str):
        return True, None
    if pattern == '':
        return False, None
    return True, pattern


def front_matter_has_title(lines: list[str], config: Optional[RuleConfig] = None) -> bool:
    """Whether the document's front matter supplies a title."""
    enabled, pattern = _title_pattern(config)
    if not enabled:
        return False
    length = front_matter_length(lines)
    if not length:
        return False
    return any(
        has_front_matter_title(line, pattern)
        for line in lines[1:length - 1]
    )


def single_title(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Multiple top-level headings in the same document."""
    doc = Document.from_lines(lines)
    level = get_option(config, 'level', 1)
    found = front_matter_has_title(lines, config)
    violations = []

    for heading in doc.headings():
        if heading.level != level:
            continue
        if found:
            violations.append(RuleViolation(
                heading.index + 1,
                heading.text,
                (0, len(_heading_line(doc, heading))),
            ))
        found = True

    return violations


def fix_single_title(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    level = get_option(config, 'level', 1)
    headings = {h.index: h for h in Document.from_lines(lines).headings()}
    # Front matter lines are never edited here.
    has_title = front_matter_has_title(lines, config)
    fixed: list[str] = []
    skip: set[int] = set()
    seen = False

    for i, line in enumerate(lines):
        if i in skip:
            continue
        heading = headings.get(i)
        if heading is None or heading.level != level:
            fixed.append(line)
            continue
        if not has_title and not seen:
            seen = True
            fixed.append(line)
            continue

        if heading.style == 'setext':
            skip.add(heading.underline)
            if level == 1:
                fixed.append(line)
                fixed.append('-' * len(lines[heading.underline].strip()))
            else:
                fixed.append(_atx_line(min(level + 1, 6), heading.text))
        else:
            fixed.append(_set_atx_level(line, min(level + 1, 6)))

    return fixed


# ---------------------------------------------------------------------------
# MD026 no-trailing-punctuation
# ---------------------------------------------------------------------------


def _ends_with_entity(text: str) -> bool:
    if not text.endswith(';'):
        return False
    amp = text.rfind('&')
    if amp == -1:
        return False
    name = text[amp + 1:-1]
    if name.startswith('#'):
        name = name[1:]
    return bool(name) and name.isascii() and name.isalnum()


def _heading_punctuation(config: Optional[RuleConfig]) -> str:
    return get_option(config, 'punctuation', HEADING_PUNCTUATION)


def no_trailing_punctuation(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Trailing punctuation in heading."""
    doc = Document.from_lines(lines)
    punctuation = _heading_punctuation(config)
    violations = []

    for heading in doc.headings():
        text = heading.text
        if not ends_with_punctuation(text, punctuation) or _ends_with_entity(text):
            continue
        line = _heading_line(doc, heading)
        end = line.rfind(text) + len(text)
        violations.append(RuleViolation(
            heading.index + 1,
            f"Punctuation: '{text[-1]}'",
            (end - 1, end),
        ))

    return violations


def fix_no_trailing_punctuation(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    doc = Document.from_lines(lines)
    punctuation = _heading_punctuation(config)
    fixed = list(lines)

    for heading in doc.headings():
        text = heading.text
        if not ends_with_punctuation(text, punctuation) or _ends_with_entity(text):
            continue
        stripped = strip_trailing_punctuation(text, punctuation)
        line = fixed[heading.index]
        end = line.rfind(text) + len(text)
        fixed[heading.index] = line[:end - (len(text) - len(stripped))] + line[end:]

    return fixed


# ---------------------------------------------------------------------------
# MD036 no-emphasis-as-heading
# ---------------------------------------------------------------------------


def _emphasis_text(line: str) -> Optional[str]:
    """Return the inner text when the line is a single emphasised phrase."""
    stripped = line.strip()
    for marker in ('**', '__', '*', '_'):
        size = len(marker)
        if (
            len(stripped) > 2 * size
            and stripped.startswith(marker)
            and stripped.endswith(marker)
        ):
            inner = stripped[size:-size]
            if '*' in inner or '_' in inner or not inner.strip():
                return None
            if inner != inner.strip():
                return None
            return inner
    return None


def _emphasis_headings(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[int, str]]:
    doc = Document.from_lines(lines)
    punctuation = get_option(config, 'punctuation', EMPHASIS_PUNCTUATION)
    found = []

    for i in doc.prose_indices():
        line = lines[i]
        if is_blockquote(line) or parse_list_item(line) is not None:
            continue
        text = _emphasis_text(line)
        if text is None:
            continue
        above_blank = i == doc.front_matter or is_blank(lines[i - 1])
        below_blank = i + 1 >= len(lines) or is_blank(lines[i + 1])
        if not (above_blank and below_blank):
            continue
        if ends_with_punctuation(text, punctuation):
            continue
        found.append((i, text))

    return found


def no_emphasis_as_heading(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Emphasis used instead of a heading."""
    return [
        RuleViolation(i + 1, text, (0, len(lines[i])))
        for i, text in _emphasis_headings(lines, config)
    ]


def fix_no_emphasis_as_heading(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    doc = Document.from_lines(lines)
    levels = {h.index: h.level for h in doc.headings()}
    targets = dict(_emphasis_headings(lines, config))
    fixed = list(lines)
    last_level = 1

    for i in range(len(lines)):
        if i in levels:
            last_level = levels[i]
        elif i in targets:
            fixed[i] = _atx_line(min(max(last_level + 1, 2), 6), targets[i])

    return fixed


# ---------------------------------------------------------------------------
# MD041 first-line-heading
# ---------------------------------------------------------------------------


def first_line_heading(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """First line in a file should be a top-level heading."""
    level = get_option(config, 'level', 1)
    if front_matter_has_title(lines, config):
        return []

    doc = Document.from_lines(lines)
    headings = {h.index: h for h in doc.headings()}

    for i in range(doc.front_matter, len(lines)):
        stripped = lines[i].strip()
        if not stripped or (stripped.startswith('<!--') and stripped.endswith('-->')):
            continue
        heading = headings.get(i)
        if heading is not None and heading.level == level:
            return []
        return [RuleViolation(i + 1, stripped[:40], (0, len(lines[i])))]

    return []


# ---------------------------------------------------------------------------
# MD043 required-headings
# ---------------------------------------------------------------------------


def required_headings(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Required heading structure."""
    required = get_option(config, 'headings', [])
    if not required:
        required = get_option(config, 'headers', [])
    if not required:
        return []

    match_case = get_option(config, 'match_case', False)

    def same(a: str, b: str) -> bool:
        return a == b if match_case else a.lower() == b.lower()

    doc = Document.from_lines(lines)
    violations = []
    i = 0
    match_any = False
    any_headings = False

    for heading in doc.headings():
        any_headings = True
        actual = f"{'#' * heading.level} {heading.text}"
        expected = required[i] if i < len(required) else 'unexpected'
        if expected == '*':
            following = required[i + 1] if i + 1 < len(required) else None
            if following is not None and same(actual, following):
                i += 2
                match_any = False
            else:
                match_any = True
        elif expected == '+':
            match_any = True
            i += 1
        elif same(expected, actual):
            i += 1
            match_any = False
        elif match_any:
            continue
        else:
            violations.append(RuleViolation(
                heading.index + 1,
                f"Expected: {expected}; Actual: {actual}",
                (0, len(_heading_line(doc, heading))),
            ))
            return violations

    extra = len(required) - i
    if (extra > 1 or (extra == 1 and required[i] != '*')) and (
        any_headings or not all(h == '*' for h in required)
    ):
        violations.append(RuleViolation(
            max(len(lines), 1),
            f"Missing heading: {required[i]}",
            (0, 0),
        ))

    return violations
