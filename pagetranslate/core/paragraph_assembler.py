import logging
import re
from typing import List, Optional

from ..models import LayoutThresholds, Line

logger = logging.getLogger(__name__)

# Bullet glyphs or "12." style enumerations at the start of a line
LIST_MARKER_PATTERN = re.compile(r"^(?:[•◦▪‣·\-\*]|\d+\.)")


class ParagraphAssembler:
    """Merges lines into paragraphs so downstream translation sees whole sentences.

    Raw extraction yields one fragment per visual line, which cuts sentences
    apart. Lines separated by a small vertical gap are reflowed into one
    paragraph (rejoining words hyphenated across the break); a large gap
    starts a new paragraph; list items always keep their own line.
    """

    def __init__(self, thresholds: Optional[LayoutThresholds] = None):
        self.thresholds = thresholds or LayoutThresholds()

    def assemble(self, lines: List[Line]) -> str:
        """Builds the page text from ordered lines.

        Returns:
            Paragraphs separated by a blank line, list items one per line.
            An empty string when there are no lines.
        """
        if not lines:
            return ""

        content = lines[0].text
        paragraphs = 1

        for prev, curr in zip(lines, lines[1:]):
            gap = self.vertical_gap(prev, curr)

            if gap > self.thresholds.paragraph_gap:
                content += "\n\n" + curr.text
                paragraphs += 1
            elif self.is_list_item(curr.text):
                content += "\n" + curr.text
            elif content.endswith("-"):
                # Word split across the line break, e.g. "commu-" / "nication"
                content = content[:-1] + curr.text
            else:
                content += " " + curr.text

        logger.debug("Assembled %d lines into %d paragraphs.", len(lines), paragraphs)
        return content

    def vertical_gap(self, prev: Line, curr: Line) -> float:
        """Distance going down the page from prev to curr."""
        elevation = self.thresholds.elevation
        return elevation(prev.y_anchor) - elevation(curr.y_anchor)

    @staticmethod
    def is_list_item(text: str) -> bool:
        return bool(LIST_MARKER_PATTERN.match(text))
