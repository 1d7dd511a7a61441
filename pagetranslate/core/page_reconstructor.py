from typing import Iterable, List, Optional, Sequence

from ..models import LayoutThresholds, TextFragment
from .fragment_sorter import FragmentSorter
from .line_grouper import LineGrouper
from .paragraph_assembler import ParagraphAssembler


class PageReconstructor:
    """Turns one page's unordered fragments into reflowed paragraph text.

    Stateless between calls, so pages can be reconstructed independently and
    in any order.
    """

    def __init__(self, thresholds: Optional[LayoutThresholds] = None):
        self.thresholds = thresholds or LayoutThresholds()
        self.sorter = FragmentSorter(self.thresholds)
        self.grouper = LineGrouper(self.thresholds)
        self.assembler = ParagraphAssembler(self.thresholds)

    def reconstruct(self, fragments: Iterable[TextFragment]) -> str:
        ordered = self.sorter.sort(fragments)
        lines = self.grouper.group(ordered)
        return self.assembler.assemble(lines)

    def reconstruct_document(self, pages: Sequence[Sequence[TextFragment]]) -> List[str]:
        """Reconstructs every page, keeping document order."""
        return [self.reconstruct(fragments) for fragments in pages]


def reconstruct(fragments: Iterable[TextFragment], thresholds: Optional[LayoutThresholds] = None) -> str:
    """Convenience wrapper for a single page."""
    return PageReconstructor(thresholds).reconstruct(fragments)
