"""
LLM Output Parsers for Contract Advisor.

The model answers in loosely structured prose: numbered or markdown
headings, bullets, bold labels. These helpers pull named sections, list
items and per-issue blocks out of that text. A miss is never an error:
`extract_section` returns "" and `extract_list_items` returns [].
`find_section` is the fallible form for callers that need to tell
"absent" apart from "present but empty".
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


# =============================================================================
# Known headings
# =============================================================================

SECTION_LABELS = [
    "Detailed Analysis",
    "Legal Context",
    "Relevant Contract Clauses",
    "Clause Explanations",
    "Recommendations",
    "Potential Outcomes",
    "Timeline Suggestions",
    "Risk Assessment",
]

# Longest first, so a label that prefixes another never shadows it
_LABELS_BY_LENGTH = sorted(SECTION_LABELS, key=len, reverse=True)

# Markdown/number decoration allowed in front of a heading: "## 2. **Label**"
_HEADING_PREFIX = re.compile(r"^\s*(?:#{1,6}\s*)?(?:\*\*|__)?\s*(?:\d+[.)]\s+)?(?:\*\*|__)?\s*")

# Decoration allowed between a label and its content: "Label:", "**Label**:", "Label**:"
_LABEL_SUFFIX = re.compile(r"[ \t]*(?:\*\*|__)?[ \t]*:?[ \t]*(?:\*\*|__)?[ \t]*")

_ISSUE_MARKER = re.compile(
    r"(?:analysis\s+for\s+|regarding\s+)?issue\s*\d+\s*:",
    re.IGNORECASE,
)

_SMALL_WORDS = r"(?:and|or|of|for|the|to|in|on|a|an|&|with|under)"
_TITLE_WORD = r"(?:[A-Z][\w'/()&-]*)"
# "Payment Notices:" / "1. Background" / "Next Steps"
_NUMBERED_TITLE = re.compile(
    rf"^\s*\d+[.)]\s+{_TITLE_WORD}(?:\s+(?:{_TITLE_WORD}|{_SMALL_WORDS})){{0,6}}\s*:?\s*$"
)
_CAPITALISED_TITLE = re.compile(
    rf"^\s*{_TITLE_WORD}(?:\s+(?:{_TITLE_WORD}|{_SMALL_WORDS})){{1,6}}\s*:\s*$"
    rf"|^\s*{_TITLE_WORD}(?:\s+{_TITLE_WORD}){{1,4}}\s*$"
)
_MARKDOWN_HEADING = re.compile(r"^\s*#{1,6}\s+\S")

_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")
_BARE_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*$")


def _label_pattern(label: str) -> re.Pattern:
    words = [re.escape(w) for w in label.split()]
    return re.compile(r"\s+".join(words) + r"(?!\w)", re.IGNORECASE)


_KNOWN_LABEL_PATTERNS = [(label, _label_pattern(label)) for label in _LABELS_BY_LENGTH]


def _leading_label(line: str) -> tuple[str, int] | None:
    """Known label a line starts with (after decoration), and where it ends."""
    prefix = _HEADING_PREFIX.match(line)
    offset = prefix.end() if prefix else 0
    for label, pattern in _KNOWN_LABEL_PATTERNS:
        m = pattern.match(line, offset)
        if m:
            return label, m.end()
    return None


def is_heading_line(line: str) -> bool:
    """True when a line opens a new section of model output."""
    if not line.strip():
        return False
    if _leading_label(line) is not None:
        return True
    prefix = _HEADING_PREFIX.match(line)
    if _ISSUE_MARKER.match(line, prefix.end() if prefix else 0):
        return True
    return bool(
        _MARKDOWN_HEADING.match(line)
        or _NUMBERED_TITLE.match(line)
        or _CAPITALISED_TITLE.match(line)
    )


# =============================================================================
# Section Extraction
# =============================================================================

@dataclass(frozen=True)
class SectionMatch:
    """A located section: label span plus captured body."""
    name: str
    start: int
    end: int
    content: str


def _iter_lines(text: str):
    """Yield (offset, line) pairs, line without its newline."""
    offset = 0
    for line in text.splitlines(keepends=True):
        yield offset, line.rstrip("\r\n")
        offset += len(line)


def _locate_label(text: str, section_name: str) -> tuple[int, int] | None:
    """Span of the label occurrence to capture from, line-start occurrences first."""
    wanted = _label_pattern(section_name)
    wanted_len = len(section_name.split())

    for offset, line in _iter_lines(text):
        prefix = _HEADING_PREFIX.match(line)
        start = prefix.end() if prefix else 0
        m = wanted.match(line, start)
        if not m:
            continue
        # A longer known label on this line wins ("Clause" vs "Clause Explanations")
        known = _leading_label(line)
        if known and len(known[0].split()) > wanted_len and known[0].lower() != section_name.lower():
            continue
        return offset + m.start(), offset + m.end()

    m = wanted.search(text)
    if m:
        return m.start(), m.end()
    return None


def find_section(text: str, section_name: str) -> SectionMatch | None:
    """
    Locate a named section in free text.

    Captures from just after the label (and an optional colon) to the next
    heading line or the end of text. Returns None when the label is absent.
    """
    if not text or not section_name.strip():
        return None

    span = _locate_label(text, section_name)
    if span is None:
        return None
    label_start, label_end = span

    suffix = _LABEL_SUFFIX.match(text, label_end)
    body_start = suffix.end() if suffix else label_end

    # Rest of the label line is content; later lines run until a heading
    line_end = text.find("\n", body_start)
    if line_end == -1:
        body_end = len(text)
    else:
        body_end = len(text)
        for offset, line in _iter_lines(text[line_end + 1:]):
            if is_heading_line(line):
                body_end = line_end + 1 + offset
                break

    content = text[body_start:body_end].strip()
    return SectionMatch(name=section_name, start=label_start, end=body_end, content=content)


def extract_section(text: str, section_name: str, multi_paragraph: bool = True) -> str:
    """Return the body of a named section, or "" when it is not there."""
    match = find_section(text, section_name)
    if match is None:
        logger.debug("Section %r not found", section_name)
        return ""
    if multi_paragraph:
        return match.content
    return re.split(r"\n\s*\n", match.content, maxsplit=1)[0].strip()


# =============================================================================
# List Extraction
# =============================================================================

def _strip_inline_markdown(item: str) -> str:
    return re.sub(r"(\*\*|__)(.+?)\1", r"\2", item).strip()


def parse_list_items(body: str) -> list[str]:
    """Split a section body into items: bullets first, else one item per line."""
    items: list[str] = []
    saw_bullet = False
    for raw in body.splitlines():
        line = raw.strip()
        if not line or _BARE_BULLET.match(line):
            continue
        bullet = _BULLET.match(line)
        if bullet:
            saw_bullet = True
            items.append(_strip_inline_markdown(line[bullet.end():]))
        elif saw_bullet and items:
            # Wrapped bullet text continues the current item
            items[-1] = f"{items[-1]} {_strip_inline_markdown(line)}"

    if saw_bullet:
        return [item for item in items if item]

    return [
        _strip_inline_markdown(raw)
        for raw in body.splitlines()
        if raw.strip() and not _BARE_BULLET.match(raw) and not is_heading_line(raw)
    ]


def extract_list_items(text: str, section_name: str) -> list[str]:
    """
    Items of a named list section, in document order, duplicates kept.

    Recognises "-", "*", "•", "N." and "N)" bullets. With no bullets,
    every non-heading line is an item. Absent section gives [].
    """
    body = extract_section(text, section_name)
    if not body:
        return []
    return parse_list_items(body)


# =============================================================================
# Multi-Issue Splitting
# =============================================================================

_ISSUE_BOUNDARY = re.compile(
    r"(?:^|(?<=\n))[ \t]*(?:#{1,6}[ \t]*)?(?:\*\*|__)?[ \t]*"
    r"(?:analysis\s+for\s+|regarding\s+)?issue\s*\d+\s*(?:\*\*|__)?\s*:",
    re.IGNORECASE,
)
# Markers that appear mid-line ("... Regarding Issue 2: ...") still count
_ISSUE_BOUNDARY_INLINE = re.compile(
    r"(?:analysis\s+for\s+|regarding\s+)?issue\s*\d+\s*:",
    re.IGNORECASE,
)

# How far (as a share of the slice length) a fallback cut may move
_SNAP_WINDOW = 0.25


def _issue_boundaries(text: str, issue_count: int) -> list[int]:
    """Marker offsets, preferring markers that start a line."""
    line_starts = [m.start() for m in _ISSUE_BOUNDARY.finditer(text)]
    if len(line_starts) >= issue_count:
        return line_starts
    inline = [m.start() for m in _ISSUE_BOUNDARY_INLINE.finditer(text)]
    return inline if len(inline) > len(line_starts) else line_starts


def _snap_cut(text: str, ideal: int, low: int, high: int) -> int:
    """Move a cut to the nearest paragraph break, else whitespace, within [low, high]."""
    low = max(low, 0)
    high = min(high, len(text))
    if low >= high:
        return ideal

    best = None
    for m in re.finditer(r"\n\s*\n", text[low:high]):
        pos = low + m.end()
        if best is None or abs(pos - ideal) < abs(best - ideal):
            best = pos
    if best is not None:
        return best

    for m in re.finditer(r"\s+", text[low:high]):
        pos = low + m.end()
        if best is None or abs(pos - ideal) < abs(best - ideal):
            best = pos
    return best if best is not None else ideal


def _even_slices(text: str, issue_count: int) -> list[str]:
    size = len(text) / issue_count
    window = max(int(size * _SNAP_WINDOW), 1)
    cuts = [0]
    for i in range(1, issue_count):
        ideal = int(round(size * i))
        cut = _snap_cut(text, ideal, max(ideal - window, cuts[-1] + 1), ideal + window)
        cuts.append(max(cut, cuts[-1]))
    cuts.append(len(text))
    return [text[cuts[i]:cuts[i + 1]].strip() for i in range(issue_count)]


def split_by_issues(text: str, issue_count: int) -> list[str]:
    """
    Split a combined multi-issue answer into exactly `issue_count` blocks.

    Uses "Issue N:" style markers when there are enough of them. Otherwise
    falls back to contiguous slices of roughly equal length, with cuts
    moved to paragraph or word boundaries. The fallback is best-effort and
    does not guarantee that a slice covers exactly one issue.
    """
    if issue_count <= 0:
        return []
    text = text or ""
    if issue_count == 1:
        return [text]

    boundaries = _issue_boundaries(text, issue_count)
    if len(boundaries) >= issue_count:
        starts = boundaries[:issue_count]
        ends = starts[1:] + [len(text)]
        return [text[s:e].strip() for s, e in zip(starts, ends)]

    logger.warning(
        "Found %d issue markers for %d issues, using even-length split",
        len(boundaries), issue_count,
    )
    slices = _even_slices(text, issue_count)
    # Short text can produce fewer real slices; pad to the required length
    return (slices + [""] * issue_count)[:issue_count]
