"""
Inline rules: links, images, emphasis, HTML and bare URLs.

Inline syntax is found with small hand-written scanners rather than
backtracking regexes, so a pathological line costs at most quadratic
time. Code spans are masked before scanning.
"""
from dataclasses import dataclass
import re
from typing import Iterator, Optional

from ..blocks import (
    Document,
    indent_of,
    is_thematic_break,
    mask_code_spans,
    table_blocks,
)
from ..models import RuleConfig, RuleViolation, get_option

_AUTOLINK_URI = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]{1,31}:[^\s<>]*$')
_AUTOLINK_EMAIL = re.compile(r'^[^\s@<>]+@[^\s@<>]+$')
_REFERENCE_DEFINITION = re.compile(r'^ {0,3}\[([^\]]+)\]:[ \t]*(\S*)')
_BARE_URL = re.compile(r'(?:https?|ftp)://[^\s<>\[\]()`"\']+')
_REVERSED_LINK = re.compile(r'\(([^()\[\]\n]+)\)\[([^\[\]\n^][^\[\]\n]*)\](?!\()')
_HTML_ID = re.compile(r'\b(?:id|name)[ \t]*=[ \t]*["\']([^"\']+)["\']')
_LINE_FRAGMENT = re.compile(r'^L\d+(?:C\d+)?(?:-L\d+(?:C\d+)?)?$')

URL_TRAILING_PUNCTUATION = '.,;:!?'
DEFAULT_PROHIBITED_TEXTS = ['click here', 'here', 'link', 'more']


# ---------------------------------------------------------------------------
# Link scanning
# ---------------------------------------------------------------------------


@dataclass
class InlineLink:
    """
    A link or image found on one line.

    ``kind`` is one of autolink, inline, full, collapsed, shortcut.
    ``start``/``end`` bound the whole construct, ``text_start`` is the
    offset of the bracketed text.
    """
    start: int
    end: int
    text: str
    image: bool
    kind: str
    destination: str = ''
    label: str = ''
    text_start: int = 0


def normalize_label(label: str) -> str:
    return ' '.join(label.split()).casefold()


def reference_definition(line: str) -> Optional[tuple[str, str]]:
    """Parse ``[label]: destination`` into (label, destination)."""
    match = _REFERENCE_DEFINITION.match(line)
    if not match or match.group(1).startswith('^'):
        return None
    return match.group(1), match.group(2)


def _closing_bracket(line: str, start: int, stop: int) -> int:
    depth = 0
    i = start
    while i < stop:
        char = line[i]
        if char == '\\':
            i += 2
            continue
        if char == '[':
            depth += 1
        elif char == ']':
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _closing_paren(line: str, start: int, stop: int) -> int:
    depth = 0
    i = start
    while i < stop:
        char = line[i]
        if char == '\\':
            i += 2
            continue
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _destination(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith('<'):
        end = raw.find('>')
        return raw[1:end] if end != -1 else raw
    parts = raw.split()
    return parts[0] if parts else ''


def _is_autolink(inner: str) -> bool:
    return bool(_AUTOLINK_URI.match(inner) or _AUTOLINK_EMAIL.match(inner))


def _scan(line: str, begin: int, stop: int, links: list[InlineLink]) -> None:
    i = begin
    while i < stop:
        char = line[i]
        if char == '\\':
            i += 2
            continue

        if char == '<':
            close = line.find('>', i + 1, stop)
            if close != -1 and _is_autolink(line[i + 1:close]):
                inner = line[i + 1:close]
                links.append(InlineLink(i, close + 1, inner, False, 'autolink', inner, '', i + 1))
                i = close + 1
                continue
            i += 1
            continue

        if char != '[':
            i += 1
            continue

        close = _closing_bracket(line, i, stop)
        if close == -1:
            i += 1
            continue

        text = line[i + 1:close]
        if text.startswith('^'):
            i = close + 1
            continue

        image = i > 0 and line[i - 1] == '!'
        start = i - 1 if image else i
        after = close + 1

        if after < stop and line[after] == '(':
            end = _closing_paren(line, after, stop)
            if end != -1:
                dest = _destination(line[after + 1:end])
                links.append(InlineLink(start, end + 1, text, image, 'inline', dest, '', i + 1))
                _scan(line, i + 1, close, links)
                i = end + 1
                continue

        if after < stop and line[after] == '[':
            end = line.find(']', after + 1, stop)
            if end != -1:
                label = line[after + 1:end]
                kind = 'full' if label.strip() else 'collapsed'
                links.append(InlineLink(
                    start, end + 1, text, image, kind, '', label if label.strip() else text, i + 1,
                ))
                _scan(line, i + 1, close, links)
                i = end + 1
                continue

        links.append(InlineLink(start, close + 1, text, image, 'shortcut', '', text, i + 1))
        _scan(line, i + 1, close, links)
        i = close + 1


def scan_links(line: str) -> list[InlineLink]:
    """All links and images on a line, outer links before nested ones."""
    links: list[InlineLink] = []
    _scan(line, 0, len(line), links)
    return links


def _link_lines(doc: Document) -> Iterator[tuple[int, str, list[InlineLink]]]:
    """(index, masked_line, links) for every prose line that is not a definition."""
    for i in doc.prose_indices():
        line = doc.lines[i]
        if reference_definition(line) is not None:
            continue
        masked = mask_code_spans(line)
        yield i, masked, scan_links(masked)


def _definitions(doc: Document) -> list[tuple[int, str, str]]:
    """(index, label, destination) for each reference definition."""
    found = []
    for i in doc.prose_indices():
        definition = reference_definition(doc.lines[i])
        if definition is not None:
            found.append((i, definition[0], definition[1]))
    return found


def _defined_labels(doc: Document) -> set[str]:
    return {normalize_label(label) for _, label, _ in _definitions(doc)}


def _is_real_link(link: InlineLink, defined: set[str]) -> bool:
    """Shortcut syntax only counts as a link when its label is defined."""
    if link.kind != 'shortcut':
        return True
    return normalize_label(link.label) in defined


# ---------------------------------------------------------------------------
# HTML scanning
# ---------------------------------------------------------------------------


def html_tags(line: str) -> list[tuple[int, int, str, bool]]:
    """(start, name_end, name, closing) for each HTML tag opening on a line."""
    tags = []
    i = line.find('<')
    while i != -1:
        j = i + 1
        closing = j < len(line) and line[j] == '/'
        if closing:
            j += 1
        k = j
        while k < len(line) and (line[k].isalnum() or line[k] == '-'):
            k += 1
        name = line[j:k]
        if name and name[0].isalpha() and (k == len(line) or line[k] in ' \t/>'):
            tags.append((i, k, name, closing))
        i = line.find('<', i + 1)
    return tags


# ---------------------------------------------------------------------------
# Emphasis scanning
# ---------------------------------------------------------------------------


@dataclass
class EmphasisPair:
    open_start: int
    open_end: int
    close_start: int
    close_end: int
    char: str

    @property
    def size(self) -> int:
        return self.open_end - self.open_start


def _marker_runs(line: str) -> list[tuple[int, int, str]]:
    runs = []
    i = 0
    while i < len(line):
        char = line[i]
        if char == '\\':
            i += 2
            continue
        if char in '*_':
            j = i
            while j < len(line) and line[j] == char:
                j += 1
            runs.append((i, j, char))
            i = j
        else:
            i += 1
    return runs


def emphasis_pairs(line: str) -> list[EmphasisPair]:
    """
    Pair up emphasis marker runs of the same character and length.

    A run that can only open (whitespace before, text after) never
    closes; it replaces the pending opener instead.
    """
    if is_thematic_break(line):
        return []

    pairs = []
    pending: Optional[tuple[int, int, str]] = None
    bullet = indent_of(line)

    for start, end, char in _marker_runs(line):
        if end - start > 3:
            continue
        before = line[start - 1] if start > 0 else ' '
        after = line[end] if end < len(line) else ' '
        if char == '_' and before.isalnum() and after.isalnum():
            continue
        if start == bullet and end - start == 1 and after in ' \t':
            continue

        left_only = before.isspace() and not after.isspace()
        if pending is not None and char == pending[2] and end - start == pending[1] - pending[0] and not left_only:
            pairs.append(EmphasisPair(pending[0], pending[1], start, end, char))
            pending = None
        elif pending is None or char == pending[2]:
            pending = (start, end, char)

    return pairs


def _emphasis_lines(lines: list[str]) -> Iterator[tuple[int, str, list[EmphasisPair]]]:
    doc = Document.from_lines(lines)
    for i in doc.prose_indices():
        line = lines[i]
        if '*' not in line and '_' not in line:
            continue
        masked = mask_code_spans(line)
        yield i, masked, emphasis_pairs(masked)


# ---------------------------------------------------------------------------
# MD011 no-reversed-links
# ---------------------------------------------------------------------------


def _reversed_links(lines: list[str]) -> list[tuple[int, int, int, str]]:
    doc = Document.from_lines(lines)
    found = []
    for i in doc.prose_indices():
        line = lines[i]
        if '(' not in line:
            continue
        masked = mask_code_spans(line)
        for match in _REVERSED_LINK.finditer(masked):
            start = match.start()
            if start > 0 and masked[start - 1] in '\\]':
                continue
            text, destination = match.group(1), match.group(2)
            found.append((i, start, match.end(), f"[{text}]({destination})"))
    return found


def no_reversed_links(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Reversed link syntax."""
    return [
        RuleViolation(i + 1, lines[i][start:end], (start, end))
        for i, start, end, _ in _reversed_links(lines)
    ]


def fix_no_reversed_links(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for i, start, end, replacement in reversed(_reversed_links(lines)):
        fixed[i] = fixed[i][:start] + replacement + fixed[i][end:]
    return fixed


# ---------------------------------------------------------------------------
# MD033 no-inline-html
# ---------------------------------------------------------------------------


def no_inline_html(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Inline HTML."""
    doc = Document.from_lines(lines)
    allowed = [name.lower() for name in get_option(config, 'allowed_elements', [])]
    table_allowed = [
        name.lower() for name in get_option(config, 'table_allowed_elements', allowed)
    ]
    table_lines: set[int] = set()
    for start, end in table_blocks(doc):
        table_lines.update(range(start, end))

    violations = []
    for i in doc.prose_indices():
        line = lines[i]
        if '<' not in line:
            continue
        permitted = table_allowed if i in table_lines else allowed
        for start, name_end, name, closing in html_tags(mask_code_spans(line)):
            if closing or name.lower() in permitted:
                continue
            violations.append(RuleViolation(i + 1, f"Element: {name}", (start, name_end)))
    return violations


# ---------------------------------------------------------------------------
# MD034 no-bare-urls
# ---------------------------------------------------------------------------


def _bare_urls(lines: list[str]) -> list[tuple[int, int, int]]:
    doc = Document.from_lines(lines)
    found = []
    for i, masked, links in _link_lines(doc):
        if '://' not in masked:
            continue
        covered = [(link.start, link.end) for link in links]
        for start, _, _, _ in html_tags(masked):
            close = masked.find('>', start)
            covered.append((start, close + 1 if close != -1 else len(masked)))

        for match in _BARE_URL.finditer(masked):
            start = match.start()
            url = match.group().rstrip(URL_TRAILING_PUNCTUATION)
            if any(a <= start < b for a, b in covered):
                continue
            if start > 0 and masked[start - 1] in '="\'':
                continue
            found.append((i, start, start + len(url)))
    return found


def no_bare_urls(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Bare URL used."""
    return [
        RuleViolation(i + 1, lines[i][start:end], (start, end))
        for i, start, end in _bare_urls(lines)
    ]


def fix_no_bare_urls(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for i, start, end in reversed(_bare_urls(lines)):
        line = fixed[i]
        fixed[i] = f"{line[:start]}<{line[start:end]}>{line[end:]}"
    return fixed


# ---------------------------------------------------------------------------
# MD035 hr-style
# ---------------------------------------------------------------------------


def _horizontal_rules(lines: list[str], config: Optional[RuleConfig]) -> tuple[Optional[str], list[int]]:
    doc = Document.from_lines(lines)
    underlines = {h.underline for h in doc.headings() if h.underline is not None}
    rules = [
        i for i in doc.prose_indices()
        if i not in underlines and is_thematic_break(lines[i])
    ]
    style = get_option(config, 'style', 'consistent')
    if style == 'consistent':
        expected = lines[rules[0]].strip() if rules else None
    else:
        expected = style
    return expected, rules


def hr_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Horizontal rule style."""
    expected, rules = _horizontal_rules(lines, config)
    return [
        RuleViolation(i + 1, f"Expected: {expected}; Actual: {lines[i].strip()}", (0, len(lines[i])))
        for i in rules
        if lines[i].strip() != expected
    ]


def fix_hr_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    expected, rules = _horizontal_rules(lines, config)
    fixed = list(lines)
    if expected is None or not is_thematic_break(expected):
        return fixed
    for i in rules:
        fixed[i] = expected
    return fixed


# ---------------------------------------------------------------------------
# MD037 no-space-in-emphasis
# ---------------------------------------------------------------------------


def _padded_emphasis(lines: list[str]) -> list[tuple[int, EmphasisPair]]:
    found = []
    for i, masked, pairs in _emphasis_lines(lines):
        for pair in pairs:
            content = masked[pair.open_end:pair.close_start]
            if not content.strip():
                continue
            if content[0].isspace() or content[-1].isspace():
                found.append((i, pair))
    return found


def no_space_in_emphasis(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Spaces inside emphasis markers."""
    return [
        RuleViolation(
            i + 1,
            lines[i][pair.open_start:pair.close_end],
            (pair.open_start, pair.close_end),
        )
        for i, pair in _padded_emphasis(lines)
    ]


def fix_no_space_in_emphasis(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    for i, pair in reversed(_padded_emphasis(lines)):
        line = fixed[i]
        inner = line[pair.open_end:pair.close_start].strip()
        fixed[i] = line[:pair.open_end] + inner + line[pair.close_start:]
    return fixed


# ---------------------------------------------------------------------------
# MD039 no-space-in-links
# ---------------------------------------------------------------------------


def _padded_links(lines: list[str]) -> list[tuple[int, InlineLink]]:
    doc = Document.from_lines(lines)
    defined = _defined_labels(doc)
    found = []
    for i, _, links in _link_lines(doc):
        for link in links:
            if link.image or link.kind == 'autolink' or '[' in link.text:
                continue
            if not link.text.strip() or not _is_real_link(link, defined):
                continue
            if link.text != link.text.strip():
                found.append((i, link))
    return found


def no_space_in_links(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Spaces inside link text."""
    return [
        RuleViolation(i + 1, lines[i][link.start:link.end], (link.start, link.end))
        for i, link in _padded_links(lines)
    ]


def fix_no_space_in_links(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    fixed = list(lines)
    found = sorted(_padded_links(lines), key=lambda entry: (entry[0], entry[1].text_start))
    for i, link in reversed(found):
        line = fixed[i]
        start = link.text_start
        end = start + len(link.text)
        fixed[i] = line[:start] + line[start:end].strip() + line[end:]
    return fixed


# ---------------------------------------------------------------------------
# MD042 no-empty-links
# ---------------------------------------------------------------------------


def no_empty_links(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """No empty links."""
    doc = Document.from_lines(lines)
    destinations = {normalize_label(label): dest for _, label, dest in _definitions(doc)}
    violations = []
    for i, _, links in _link_lines(doc):
        for link in links:
            if link.image or link.kind == 'autolink':
                continue
            if link.kind == 'inline':
                destination = link.destination
            else:
                destination = destinations.get(normalize_label(link.label))
                if destination is None:
                    continue
            if destination in ('', '#'):
                violations.append(RuleViolation(
                    i + 1, lines[i][link.start:link.end], (link.start, link.end),
                ))
    return violations


# ---------------------------------------------------------------------------
# MD045 no-alt-text
# ---------------------------------------------------------------------------


def no_alt_text(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Images should have alternate text (alt text)."""
    doc = Document.from_lines(lines)
    violations = []
    for i, masked, links in _link_lines(doc):
        for link in links:
            if link.image and not link.text.strip():
                violations.append(RuleViolation(
                    i + 1, lines[i][link.start:link.end], (link.start, link.end),
                ))
        for start, _, name, closing in html_tags(masked):
            if closing or name.lower() != 'img':
                continue
            close = masked.find('>', start)
            tag = masked[start:close + 1 if close != -1 else len(masked)]
            if 'alt=' not in tag.lower().replace(' =', '='):
                violations.append(RuleViolation(i + 1, tag, (start, start + len(tag))))
    return violations


# ---------------------------------------------------------------------------
# MD049 emphasis-style / MD050 strong-style
# ---------------------------------------------------------------------------


STYLE_CHARS = {'asterisk': '*', 'underscore': '_'}
STYLE_NAMES = {v: k for k, v in STYLE_CHARS.items()}


def _styled_pairs(lines: list[str], size: int, config: Optional[RuleConfig]) -> list[tuple[int, EmphasisPair, str]]:
    """(index, pair, expected_char) for tight emphasis pairs of ``size`` in the wrong style."""
    style = get_option(config, 'style', 'consistent')
    expected = STYLE_CHARS.get(style)
    found = []
    for i, masked, pairs in _emphasis_lines(lines):
        for pair in pairs:
            if pair.size != size:
                continue
            content = masked[pair.open_end:pair.close_start]
            if not content or content[0].isspace() or content[-1].isspace():
                continue
            if expected is None:
                expected = pair.char
            if pair.char == expected:
                continue
            before = masked[pair.open_start - 1] if pair.open_start > 0 else ' '
            after = masked[pair.close_end] if pair.close_end < len(masked) else ' '
            intraword = before.isalnum() or after.isalnum()
            if expected == '_' and intraword:
                continue
            found.append((i, pair, expected))
    return found


def _style_violations(lines: list[str], size: int, config: Optional[RuleConfig]) -> list[RuleViolation]:
    return [
        RuleViolation(
            i + 1,
            f"Expected: {STYLE_NAMES[expected]}; Actual: {STYLE_NAMES[pair.char]}",
            (pair.open_start, pair.close_end),
        )
        for i, pair, expected in _styled_pairs(lines, size, config)
    ]


def _fix_styles(lines: list[str], size: int, config: Optional[RuleConfig]) -> list[str]:
    fixed = list(lines)
    for i, pair, expected in reversed(_styled_pairs(lines, size, config)):
        line = fixed[i]
        marker = expected * size
        fixed[i] = (
            line[:pair.open_start] + marker
            + line[pair.open_end:pair.close_start] + marker
            + line[pair.close_end:]
        )
    return fixed


def emphasis_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Emphasis style."""
    return _style_violations(lines, 1, config)


def fix_emphasis_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    return _fix_styles(lines, 1, config)


def strong_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Strong style."""
    return _style_violations(lines, 2, config)


def fix_strong_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    return _fix_styles(lines, 2, config)


# ---------------------------------------------------------------------------
# MD051 link-fragments
# ---------------------------------------------------------------------------


def _plain_text(text: str) -> str:
    """Drop link and image markup from heading text, keeping the visible text."""
    links = [link for link in scan_links(text) if link.kind != 'shortcut']
    result = text
    for link in sorted(links, key=lambda link: link.start, reverse=True):
        result = result[:link.start] + link.text + result[link.end:]
    return result.replace('`', '')


def heading_slug(text: str) -> str:
    """GitHub-style anchor for a heading's text."""
    plain = _plain_text(text).strip().lower()
    kept = ''.join(char for char in plain if char.isalnum() or char in ' -_')
    return kept.replace(' ', '-')


def document_anchors(doc: Document) -> set[str]:
    """Heading slugs (with duplicate suffixes) plus HTML id/name anchors."""
    anchors = set()
    seen: dict[str, int] = {}
    for heading in doc.headings():
        slug = heading_slug(heading.text)
        count = seen.get(slug, 0)
        seen[slug] = count + 1
        anchors.add(slug if count == 0 else f"{slug}-{count}")

    for i in doc.prose_indices():
        line = doc.lines[i]
        if '=' in line:
            anchors.update(match.group(1) for match in _HTML_ID.finditer(line))
    return anchors


def link_fragments(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Link fragments should be valid."""
    doc = Document.from_lines(lines)
    ignore_case = get_option(config, 'ignore_case', False)
    anchors = document_anchors(doc)
    if ignore_case:
        anchors = {anchor.lower() for anchor in anchors}

    violations = []
    for i, _, links in _link_lines(doc):
        for link in links:
            if link.kind != 'inline' or not link.destination.startswith('#'):
                continue
            fragment = link.destination[1:]
            if not fragment or fragment == 'top' or _LINE_FRAGMENT.match(fragment):
                continue
            if (fragment.lower() if ignore_case else fragment) in anchors:
                continue
            violations.append(RuleViolation(
                i + 1, lines[i][link.start:link.end], (link.start, link.end),
            ))
    return violations


# ---------------------------------------------------------------------------
# MD052 reference-links-images / MD053 link-image-reference-definitions
# ---------------------------------------------------------------------------


def reference_links_images(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Reference links and images should use a label that is defined."""
    doc = Document.from_lines(lines)
    shortcut_syntax = get_option(config, 'shortcut_syntax', False)
    ignored = {normalize_label(label) for label in get_option(config, 'ignored_labels', ['x'])}
    defined = _defined_labels(doc)

    violations = []
    for i, _, links in _link_lines(doc):
        for link in links:
            if link.kind in ('inline', 'autolink'):
                continue
            if link.kind == 'shortcut' and not shortcut_syntax:
                continue
            label = normalize_label(link.label)
            if not label or label in defined or label in ignored:
                continue
            violations.append(RuleViolation(
                i + 1,
                f'Missing link or image reference definition: "{link.label}"',
                (link.start, link.end),
            ))
    return violations


def _stale_definitions(lines: list[str], config: Optional[RuleConfig]) -> list[tuple[int, str]]:
    doc = Document.from_lines(lines)
    ignored = {normalize_label(label) for label in get_option(config, 'ignored_definitions', ['//'])}

    used = set()
    for _, _, links in _link_lines(doc):
        for link in links:
            if link.kind not in ('inline', 'autolink'):
                used.add(normalize_label(link.label))

    stale = []
    seen = set()
    for i, label, _ in _definitions(doc):
        key = normalize_label(label)
        if key in ignored:
            continue
        if key in seen:
            stale.append((i, f'Duplicate link or image reference definition: "{label}"'))
        elif key not in used:
            stale.append((i, f'Unused link or image reference definition: "{label}"'))
        seen.add(key)
    return stale


def link_image_reference_definitions(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Link and image reference definitions should be needed."""
    return [
        RuleViolation(i + 1, details, (0, len(lines[i])))
        for i, details in _stale_definitions(lines, config)
    ]


def fix_link_image_reference_definitions(lines: list[str], config: Optional[RuleConfig] = None) -> list[str]:
    dropped = {i for i, _ in _stale_definitions(lines, config)}
    return [line for i, line in enumerate(lines) if i not in dropped]


# ---------------------------------------------------------------------------
# MD054 link-image-style
# ---------------------------------------------------------------------------


def link_image_style(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Link and image style."""
    doc = Document.from_lines(lines)
    defined = _defined_labels(doc)
    allowed = {
        kind: get_option(config, kind, True)
        for kind in ('autolink', 'inline', 'full', 'collapsed', 'shortcut', 'url_inline')
    }

    violations = []
    for i, _, links in _link_lines(doc):
        for link in links:
            if not _is_real_link(link, defined):
                continue
            style = link.kind
            if style == 'inline' and not link.image and link.text == link.destination:
                if not allowed['url_inline']:
                    style = 'url_inline'
            if not allowed[style]:
                violations.append(RuleViolation(
                    i + 1, f"Disallowed style: {style}", (link.start, link.end),
                ))
    return violations


# ---------------------------------------------------------------------------
# MD059 descriptive-link-text
# ---------------------------------------------------------------------------


def _normalize_link_text(text: str) -> str:
    words = ''.join(char if char.isalnum() else ' ' for char in text.lower())
    return ' '.join(words.split())


def descriptive_link_text(lines: list[str], config: Optional[RuleConfig] = None) -> list[RuleViolation]:
    """Link text should be descriptive."""
    doc = Document.from_lines(lines)
    defined = _defined_labels(doc)
    prohibited = {
        _normalize_link_text(text)
        for text in get_option(config, 'prohibited_texts', DEFAULT_PROHIBITED_TEXTS)
    }

    violations = []
    for i, _, links in _link_lines(doc):
        for link in links:
            if link.image or link.kind == 'autolink' or not _is_real_link(link, defined):
                continue
            if _normalize_link_text(link.text) in prohibited:
                violations.append(RuleViolation(
                    i + 1, lines[i][link.start:link.end], (link.start, link.end),
                ))
    return violations
