import logging
from typing import List, Optional, Sequence

from ..models import LayoutThresholds, Line, TextFragment

logger = logging.getLogger(__name__)


class LineGrouper:
    """Clusters sorted fragments into visual lines."""

    def __init__(self, thresholds: Optional[LayoutThresholds] = None):
        self.thresholds = thresholds or LayoutThresholds()

    def group(self, fragments: Sequence[TextFragment]) -> List[Line]:
        """Partitions fragments (already in reading order) into lines.

        A fragment joins the current line while its distance from the line's
        anchor (the y of the line's first fragment) stays below the line
        tolerance. Anything farther closes the line and opens a new one.

        Args:
            fragments: Fragments as returned by FragmentSorter.sort.

        Returns:
            Lines in reading order, each with its fragments left to right.
        """
        lines: List[Line] = []
        if not fragments:
            return lines

        anchor = fragments[0].y
        current: List[TextFragment] = []

        for fragment in fragments:
            if abs(fragment.y - anchor) < self.thresholds.line_tolerance:
                current.append(fragment)
            else:
                lines.append(self._close_line(anchor, current))
                current = [fragment]
                anchor = fragment.y

        if current:
            lines.append(self._close_line(anchor, current))

        logger.debug("Grouped %d fragments into %d lines.", len(fragments), len(lines))
        return lines

    @staticmethod
    def _close_line(anchor: float, fragments: List[TextFragment]) -> Line:
        return Line(y_anchor=anchor, fragments=sorted(fragments, key=lambda f: f.x))
