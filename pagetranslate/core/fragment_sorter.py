import logging
from functools import cmp_to_key
from typing import Iterable, List, Optional

from ..models import LayoutThresholds, TextFragment

logger = logging.getLogger(__name__)


class FragmentSorter:
    """Orders a page's text fragments into reading order (top to bottom, left to right)."""

    def __init__(self, thresholds: Optional[LayoutThresholds] = None):
        self.thresholds = thresholds or LayoutThresholds()

    def sort(self, fragments: Iterable[TextFragment]) -> List[TextFragment]:
        """Drops blank fragments and sorts the rest.

        Fragments whose vertical distance is below the sort tolerance are
        treated as sitting on the same baseline and ordered by x instead.
        """
        fragments = list(fragments)
        visible = [fragment for fragment in fragments if fragment.text.strip()]
        ordered = sorted(visible, key=cmp_to_key(self._compare))
        logger.debug("Sorted %d fragments (%d blank dropped).", len(ordered), len(fragments) - len(visible))
        return ordered

    def _compare(self, a: TextFragment, b: TextFragment) -> int:
        elevation = self.thresholds.elevation
        dy = elevation(b.y) - elevation(a.y)
        if abs(dy) < self.thresholds.sort_tolerance:
            return (a.x > b.x) - (a.x < b.x)
        # b higher on the page -> b comes first
        return 1 if dy > 0 else -1
