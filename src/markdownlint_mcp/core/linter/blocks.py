"""Line classification shared by the rules.

Rules see a document as raw lines. This module answers the questions
that need document-wide state: is a line inside a code block, inside
front matter, a heading, a list item, part of a table.
"""
from dataclasses import dataclass, field
import re
from typing import Optional

_FENCE = re.compile(r'^(`{3,}|~{3,})(.*)$')
_ATX_OPEN = re.compile(r'^( {0,3})(#{1,6})(?=[ \t]|$)')
_ATX_LOOSE = re.compile(r'^( {0,3})(#{1,6})(?!#)')
_SETEXT_UNDERLINE = re.compile(r'^ {0,3}(=+|-+)[ \t]*$')
_LIST_ITEM = re.compile(r'^( *)([*+-]|\d{1,9}[.)])(?=[ \t]|$)([ \t]*)')
_BLOCKQUOTE = re.compile(r'^ {0,3}>')

FRONT_MATTER_DELIMITERS = {'---': ('---', '...'), '+++': ('+++',)}


# ---------------------------------------------------------------------------
# Code blocks
# ---------------------------------------------------------------------------


def fence_char(line: str) -> Optional[str]:
    """Return '`' or '~' if the trimmed line opens or closes a fence."""
    trimmed = line.strip()
    if trimmed.startswith('```'):
        return '`'
    if trimmed.startswith('~~~'):
        return '~'
    return None


def is_fence(line: str) -> bool:
    return fence_char(line) is not None


def is_indented_code(line: str) -> bool:
    return line.startswith('    ')


def is_code_block(lines: list[str], index: int) -> bool:
    """
    Check whether ``lines[index]`` is inside a fenced or indented code block.

    Fence state is computed from the lines before ``index`` only, so the
    answer does not depend on which lines were queried earlier. Fence
    delimiters themselves count as code.
    """
    current = lines[index]
    if is_indented_code(current):
        return True

    open_char: Optional[str] = None
    for line in lines[:index]:
        char = fence_char(line)
        if char is None:
            continue
        if open_char is None:
            open_char = char
        elif open_char == char:
            open_char = None

    if is_fence(current):
        return True

    return open_char is not None


def code_block_mask(lines: list[str]) -> list[bool]:
    """Single-pass equivalent of calling :func:`is_code_block` on every line."""
    mask: list[bool] = []
    open_char: Optional[str] = None

    for line in lines:
        char = fence_char(line)
        mask.append(open_char is not None or char is not None or is_indented_code(line))

        if char is None:
            continue
        if open_char is None:
            open_char = char
        elif open_char == char:
            open_char = None

    return mask


@dataclass
class FencedBlock:
    """A fenced code block; ``end`` is None when the fence never closes."""
    start: int
    end: Optional[int]
    char: str
    info: str
    indent: int

    @property
    def last(self) -> int:
        return self.end if self.end is not None else self.start

    def contains(self, index: int) -> bool:
        return self.start <= index and (self.end is None or index <= self.end)


def fenced_blocks(lines: list[str]) -> list[FencedBlock]:
    """Collect fenced code blocks using the same open/close rules as the classifier."""
    blocks: list[FencedBlock] = []
    current: Optional[FencedBlock] = None

    for i, line in enumerate(lines):
        char = fence_char(line)
        if char is None:
            continue
        if current is None:
            match = _FENCE.match(line.strip())
            info = match.group(2).strip() if match else ''
            indent = len(line) - len(line.lstrip(' '))
            current = FencedBlock(start=i, end=None, char=char, info=info, indent=indent)
            blocks.append(current)
        elif current.char == char:
            current.end = i
            current = None

    return blocks


# ---------------------------------------------------------------------------
# Front matter
# ---------------------------------------------------------------------------


def front_matter_length(lines: list[str]) -> int:
    """
    Number of lines taken by a leading front matter block (0 if none).

    Front matter opens with ``---`` or ``+++`` on the first line and runs
    through the matching closing delimiter.
    """
    if not lines:
        return 0

    closers = FRONT_MATTER_DELIMITERS.get(lines[0].rstrip())
    if closers is None:
        return 0

    for i in range(1, len(lines)):
        if lines[i].rstrip() in closers:
            return i + 1

    return 0


# ---------------------------------------------------------------------------
# Block structure
# ---------------------------------------------------------------------------


def is_blank(line: str) -> bool:
    return not line.strip()


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(' '))


def is_blockquote(line: str) -> bool:
    return _BLOCKQUOTE.match(line) is not None


def is_thematic_break(line: str) -> bool:
    if indent_of(line) > 3:
        return False
    compact = line.replace(' ', '').replace('\t', '')
    return len(compact) >= 3 and compact[0] in '-*_' and compact == compact[0] * len(compact)


@dataclass
class ListItem:
    """A list item line: ``indent`` spaces, ``marker``, ``gap`` after the marker."""
    index: int
    indent: int
    marker: str
    gap: str
    content: str

    @property
    def ordered(self) -> bool:
        return self.marker[0].isdigit()

    @property
    def number(self) -> Optional[int]:
        return int(self.marker[:-1]) if self.ordered else None

    @property
    def content_offset(self) -> int:
        return self.indent + len(self.marker) + len(self.gap)


def parse_list_item(line: str, index: int = 0) -> Optional[ListItem]:
    if is_thematic_break(line):
        return None
    match = _LIST_ITEM.match(line)
    if not match:
        return None
    indent, marker, gap = match.groups()
    return ListItem(
        index=index,
        indent=len(indent),
        marker=marker,
        gap=gap,
        content=line[match.end():],
    )


@dataclass
class Heading:
    """A heading line. Setext headings also record their underline index."""
    index: int
    level: int
    text: str
    style: str  # "atx" | "atx_closed" | "setext"
    underline: Optional[int] = None


def split_closing_hashes(rest: str) -> tuple[str, str]:
    """
    Split ATX heading content from an optional closing ``#`` sequence.

    Returns (text, closing) where closing includes the whitespace before
    the hashes. Scans from the right without a regex.
    """
    trimmed = rest.rstrip()
    end = len(trimmed)
    while end > 0 and trimmed[end - 1] == '#':
        end -= 1
    if end == len(trimmed):
        return trimmed, ''
    if end == 0:
        return '', trimmed
    if trimmed[end - 1] not in ' \t':
        # "C#" and friends: the hashes belong to the text.
        return trimmed, ''
    text = trimmed[:end].rstrip()
    return text, trimmed[len(text):]


def parse_atx(line: str) -> Optional[tuple[int, str, bool]]:
    """Parse a well-formed ATX heading into (level, text, closed)."""
    match = _ATX_OPEN.match(line)
    if not match:
        return None
    level = len(match.group(2))
    text, closing = split_closing_hashes(line[match.end():].strip())
    return level, text, bool(closing)


def atx_prefix(line: str) -> Optional[tuple[str, str, str]]:
    """
    Loose ATX parse used by the spacing rules: (indent, hashes, rest).

    Also accepts ``#Heading`` (no space), which is not a heading in
    CommonMark but is what the spacing rules look for.
    """
    match = _ATX_LOOSE.match(line)
    if not match:
        return None
    return match.group(1), match.group(2), line[match.end():]


@dataclass
class Document:
    """
    Per-call classification of every line of a document.

    ``code`` follows :func:`code_block_mask` (fenced or 4-space indented).
    ``fenced`` covers fenced blocks including delimiters. ``indented``
    marks indented code blocks that are not list continuations.
    """
    lines: list[str]
    code: list[bool] = field(default_factory=list)
    fenced: list[bool] = field(default_factory=list)
    indented: list[bool] = field(default_factory=list)
    front_matter: int = 0
    fences: list[FencedBlock] = field(default_factory=list)

    @classmethod
    def from_lines(cls, lines: list[str]) -> "Document":
        doc = cls(lines=lines)
        doc.code = code_block_mask(lines)
        doc.front_matter = front_matter_length(lines)
        doc.fences = fenced_blocks(lines)
        doc.fenced = [False] * len(lines)
        for block in doc.fences:
            end = block.end if block.end is not None else len(lines) - 1
            for i in range(block.start, end + 1):
                doc.fenced[i] = True
        doc.indented = _indented_code_mask(lines, doc.fenced, doc.front_matter)
        return doc

    def in_front_matter(self, index: int) -> bool:
        return index < self.front_matter

    def is_prose(self, index: int) -> bool:
        """True for lines that are neither code nor front matter."""
        return not (
            index < self.front_matter
            or self.fenced[index]
            or self.indented[index]
        )

    def prose_indices(self) -> list[int]:
        return [i for i in range(len(self.lines)) if self.is_prose(i)]

    def headings(self) -> list[Heading]:
        return find_headings(self)

    def list_items(self) -> list[ListItem]:
        items = []
        for i in self.prose_indices():
            item = parse_list_item(self.lines[i], i)
            if item is not None:
                items.append(item)
        return items


def _indented_code_mask(lines: list[str], fenced: list[bool], front_matter: int) -> list[bool]:
    mask = [False] * len(lines)
    in_list = False
    in_code = False
    previous_blank = True

    for i, line in enumerate(lines):
        if i < front_matter or fenced[i]:
            in_code = False
            previous_blank = False
            continue

        blank = is_blank(line)
        if in_code:
            if blank or indent_of(line) >= 4:
                mask[i] = not blank
                previous_blank = blank
                continue
            in_code = False

        if blank:
            previous_blank = True
            continue

        if indent_of(line) >= 4 and previous_blank and not in_list:
            in_code = True
            mask[i] = True
        elif parse_list_item(line) is not None:
            in_list = True
        elif indent_of(line) == 0 and previous_blank:
            in_list = False

        previous_blank = False

    return mask


def find_headings(doc: Document) -> list[Heading]:
    """ATX and setext headings in document order, skipping code and front matter."""
    headings: list[Heading] = []
    lines = doc.lines
    previous_is_paragraph = False
    last_underline: Optional[int] = None

    for i, line in enumerate(lines):
        if not doc.is_prose(i):
            previous_is_paragraph = False
            continue

        atx = parse_atx(line)
        if atx is not None:
            level, text, closed = atx
            headings.append(Heading(i, level, text, 'atx_closed' if closed else 'atx'))
            previous_is_paragraph = False
            continue

        underline = _SETEXT_UNDERLINE.match(line)
        if underline and previous_is_paragraph and _single_line_paragraph(lines, i, last_underline):
            level = 1 if underline.group(1)[0] == '=' else 2
            headings.append(Heading(i - 1, level, lines[i - 1].strip(), 'setext', underline=i))
            previous_is_paragraph = False
            last_underline = i
            continue

        previous_is_paragraph = (
            not is_blank(line)
            and not is_blockquote(line)
            and not is_thematic_break(line)
            and parse_list_item(line) is None
            and not line.lstrip().startswith('|')
        )

    return headings


def _single_line_paragraph(lines: list[str], underline_index: int,
                           last_underline: Optional[int] = None) -> bool:
    # A setext underline only follows a single-line paragraph here. The line
    # before that paragraph may close another heading.
    if underline_index < 1:
        return False
    if underline_index >= 2 and not is_blank(lines[underline_index - 2]):
        if underline_index - 2 == last_underline:
            return True
        previous = lines[underline_index - 2]
        return (
            parse_atx(previous) is not None
            or is_fence(previous)
            or is_thematic_break(previous)
        )
    return True


# ---------------------------------------------------------------------------
# Inline helpers
# ---------------------------------------------------------------------------


def code_spans(line: str) -> list[tuple[int, int, int]]:
    """
    Find inline code spans as (start, end, tick_count).

    ``start``/``end`` bound the whole span including backticks. An opening
    run with no matching closing run of the same length is literal text.
    """
    spans = []
    i = 0
    size = len(line)
    while i < size:
        if line[i] != '`':
            i += 1
            continue
        run_end = i
        while run_end < size and line[run_end] == '`':
            run_end += 1
        ticks = run_end - i
        j = run_end
        close = -1
        while j < size:
            if line[j] != '`':
                j += 1
                continue
            k = j
            while k < size and line[k] == '`':
                k += 1
            if k - j == ticks:
                close = j
                break
            j = k
        if close == -1:
            i = run_end
            continue
        spans.append((i, close + ticks, ticks))
        i = close + ticks
    return spans


def mask_code_spans(line: str, fill: str = 'x') -> str:
    """Replace code span contents with ``fill``, keeping offsets stable."""
    spans = code_spans(line)
    if not spans:
        return line
    chars = list(line)
    for start, end, ticks in spans:
        for k in range(start + ticks, end - ticks):
            chars[k] = fill
    return ''.join(chars)


def is_table_delimiter(line: str) -> bool:
    cells = split_table_cells(line)
    if not cells:
        return False
    for cell in cells:
        cell = cell.strip()
        core = cell.strip(':')
        if not core or core != '-' * len(core) or len(cell) - len(core) > 2:
            return False
    return '|' in line or len(cells) > 1


def split_table_cells(line: str) -> list[str]:
    """Split a table row on unescaped pipes, dropping edge pipes."""
    row = line.strip()
    if row.startswith('|'):
        row = row[1:]
    if row.endswith('|') and not row.endswith('\\|'):
        row = row[:-1]

    cells = []
    current = []
    escaped = False
    for char in row:
        if escaped:
            current.append(char)
            escaped = False
        elif char == '\\':
            current.append(char)
            escaped = True
        elif char == '|':
            cells.append(''.join(current))
            current = []
        else:
            current.append(char)
    cells.append(''.join(current))
    return cells


def table_blocks(doc: Document) -> list[tuple[int, int]]:
    """
    Find GFM tables as (start, end) half-open line ranges.

    A table is a header row containing a pipe followed by a delimiter row.
    """
    lines = doc.lines
    tables = []
    i = 0
    while i < len(lines) - 1:
        if (
            doc.is_prose(i) and doc.is_prose(i + 1)
            and '|' in lines[i]
            and is_table_delimiter(lines[i + 1])
            and not is_blank(lines[i])
        ):
            end = i + 2
            while end < len(lines) and doc.is_prose(end) and '|' in lines[end] and not is_blank(lines[end]):
                end += 1
            tables.append((i, end))
            i = end
        else:
            i += 1
    return tables
