import fitz # PyMuPDF
import logging
import os
from typing import List

from ..config import MAX_FILE_SIZE
from ..errors import ExtractionError
from ..models import CoordinateOrigin, TextFragment

logger = logging.getLogger(__name__)

DEFAULT_FRAGMENT_HEIGHT = 10.0 # used when a span reports a zero-height box


class PDFLoader:
    """Extracts positioned text fragments from every page of a PDF.

    Fragments are emitted in PyMuPDF's page coordinates: origin at the top-left
    corner, y growing downwards, y being the span's baseline.
    """

    origin = CoordinateOrigin.TOP_LEFT

    def __init__(self, max_file_size: int = MAX_FILE_SIZE):
        self.max_file_size = max_file_size

    def load_fragments(self, pdf_path: str) -> List[List[TextFragment]]:
        """Reads the PDF and returns one fragment list per page, in page order.

        Raises:
            ExtractionError: The file is missing, too large, or not a readable
                PDF. Nothing is returned for a partially readable document.
        """
        self._check_file(pdf_path)
        try:
            with fitz.open(pdf_path) as doc:
                if not doc.is_pdf:
                    raise ExtractionError(f"'{os.path.basename(pdf_path)}' is not a PDF file.", path=pdf_path)
                pages = [self._page_fragments(page) for page in doc]
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"Failed to parse the PDF file. Details: {e}", path=pdf_path) from e

        logger.info("Loaded '%s': %d pages, %d fragments.", pdf_path, len(pages), sum(len(p) for p in pages))
        return pages

    def _check_file(self, pdf_path: str):
        if not os.path.isfile(pdf_path):
            raise ExtractionError(f"File not found: {pdf_path}", path=pdf_path)
        size = os.path.getsize(pdf_path)
        if size > self.max_file_size:
            raise ExtractionError(
                f"File is too large ({size / (1024 * 1024):.1f}MB). Maximum size is {self.max_file_size / (1024 * 1024):.0f}MB.",
                path=pdf_path, size=size
            )

    def _page_fragments(self, page: fitz.Page) -> List[TextFragment]:
        """One fragment per text span on the page."""
        fragments: List[TextFragment] = []
        page_dict = page.get_text("dict")
        for block in page_dict.get("blocks", []):
            if block.get("type") != 0: # 0 = text, 1 = image
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if not text.strip():
                        continue
                    x0, y0, x1, y1 = span["bbox"]
                    baseline = span.get("origin", (x0, y1))[1]
                    fragments.append(TextFragment(
                        text=text,
                        x=x0,
                        y=baseline,
                        width=x1 - x0,
                        height=(y1 - y0) or DEFAULT_FRAGMENT_HEIGHT
                    ))
        logger.debug("Page %d: %d fragments.", page.number + 1, len(fragments))
        return fragments
