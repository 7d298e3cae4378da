"""
Markdown Line Renderer

Turns analysis text returned by the model into typed display blocks.

Each line is classified on its own content only: there is no state carried
between lines, so consecutive list items stay independent blocks and are
never grouped into a list container.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Union

from markupsafe import Markup, escape

# Non-greedy so "**a** and **b**" yields two bold runs, not one
BOLD_PATTERN = re.compile(r"(\*\*.*?\*\*)")

# Checked in order, first match wins
HEADING_PREFIXES: Tuple[Tuple[str, int], ...] = (
    ("### ", 3),
    ("## ", 2),
    ("# ", 1),
)
LIST_ITEM_PREFIXES: Tuple[str, ...] = ("* ", "- ")


@dataclass(frozen=True)
class Span:
    text: str
    bold: bool = False


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class ListItem:
    text: str


@dataclass(frozen=True)
class Spacer:
    pass


@dataclass(frozen=True)
class Paragraph:
    spans: Tuple[Span, ...]


DisplayBlock = Union[Heading, ListItem, Spacer, Paragraph]


def split_spans(line: str) -> Tuple[Span, ...]:
    """
    Split a line into plain and bold spans.

    Bold runs are delimited by a matching pair of ``**`` on the same line.
    An unterminated ``**`` stays in the surrounding plain text. Zero-length
    plain runs (e.g. before a line-leading bold run) are dropped.
    """
    spans = []
    # re.split with a capturing group alternates plain, bold, plain, ...
    for index, part in enumerate(BOLD_PATTERN.split(line)):
        if index % 2 == 1:
            spans.append(Span(text=part[2:-2], bold=True))
        elif part:
            spans.append(Span(text=part))
    return tuple(spans)


def classify_line(line: str) -> DisplayBlock:
    """Classify a single line into a display block."""
    for prefix, level in HEADING_PREFIXES:
        if line.startswith(prefix):
            return Heading(level=level, text=line[len(prefix):])

    if line.startswith(LIST_ITEM_PREFIXES):
        return ListItem(text=line[2:])

    if line.strip() == "":
        return Spacer()

    return Paragraph(spans=split_spans(line))


def render_blocks(text: str) -> List[DisplayBlock]:
    """
    Render analysis text into an ordered list of display blocks.

    Exactly one block is produced per ``\\n``-separated line, so an empty
    string renders as a single Spacer. Never raises for any string input.
    """
    return [classify_line(line) for line in text.split("\n")]


def block_to_dict(block: DisplayBlock) -> Dict[str, Any]:
    """Serialize a block into the JSON shape used by the API."""
    if isinstance(block, Heading):
        return {"type": "heading", "level": block.level, "text": block.text}
    if isinstance(block, ListItem):
        return {"type": "list_item", "text": block.text}
    if isinstance(block, Spacer):
        return {"type": "spacer"}
    return {
        "type": "paragraph",
        "spans": [{"text": span.text, "bold": span.bold} for span in block.spans],
    }


def _render_spans(spans: Tuple[Span, ...]) -> Markup:
    parts = []
    for span in spans:
        if span.bold:
            parts.append(Markup("<strong>{}</strong>").format(span.text))
        else:
            parts.append(escape(span.text))
    return Markup("").join(parts)


def render_html(blocks: List[DisplayBlock]) -> Markup:
    """Paint display blocks as HTML, one element per block, all text escaped."""
    elements = []
    for block in blocks:
        if isinstance(block, Heading):
            tag = f"h{block.level}"
            elements.append(Markup(f"<{tag}>{{}}</{tag}>").format(block.text))
        elif isinstance(block, ListItem):
            elements.append(Markup("<li>{}</li>").format(block.text))
        elif isinstance(block, Spacer):
            elements.append(Markup('<div class="spacer"></div>'))
        else:
            elements.append(Markup("<p>{}</p>").format(_render_spans(block.spans)))
    return Markup("\n").join(elements)
