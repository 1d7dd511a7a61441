import logging
from typing import List, Optional

from .config import load_layout_thresholds
from .core.orchestrator import PipelineOrchestrator, ProgressCallback
from .core.page_reconstructor import PageReconstructor
from .core.pdf_loader import PDFLoader
from .core.retry_scheduler import RetryScheduler
from .core.translator import Translator
from .errors import ExtractionError, UnitStateError
from .models import LayoutThresholds, TranslationUnit

logger = logging.getLogger(__name__)


class TranslationSession:
    """Ties extraction, layout reconstruction and translation together for one document at a time."""

    def __init__(self,
                 translator: Optional[Translator] = None,
                 loader: Optional[PDFLoader] = None,
                 scheduler: Optional[RetryScheduler] = None,
                 on_progress: Optional[ProgressCallback] = None,
                 thresholds: Optional[LayoutThresholds] = None):
        # Building the translator validates credentials before any page is attempted
        self.translator = translator or Translator()
        self.loader = loader or PDFLoader()
        self.reconstructor = PageReconstructor(thresholds or load_layout_thresholds(self.loader.origin))
        self.orchestrator = PipelineOrchestrator(
            translate_fn=self.translator.translate,
            scheduler=scheduler,
            on_progress=on_progress
        )
        self.error: Optional[str] = None

    @property
    def units(self) -> List[TranslationUnit]:
        return self.orchestrator.units

    @property
    def progress(self) -> int:
        return self.orchestrator.progress

    def extract(self, pdf_path: str) -> List[str]:
        """Returns the reconstructed text of every page, in page order."""
        pages = self.loader.load_fragments(pdf_path)
        return self.reconstructor.reconstruct_document(pages)

    async def translate_document(self, pdf_path: str) -> List[TranslationUnit]:
        """Extracts and translates a whole document.

        Raises:
            ExtractionError: The document could not be read. Any state from a
                previous document has been cleared and self.error holds the message.
        """
        self.reset()
        try:
            texts = self.extract(pdf_path)
        except ExtractionError as e:
            logger.error("Extraction failed for '%s': %s", pdf_path, e)
            self.reset()
            self.error = e.message
            raise

        self.orchestrator.load(texts)
        return await self.orchestrator.run()

    async def retry_failed(self) -> List[TranslationUnit]:
        """Retries every page currently in 'error', one after another."""
        for unit_id in self.orchestrator.failed_units:
            try:
                await self.orchestrator.retry(unit_id)
            except UnitStateError as e:
                # Reset or a concurrent retry got there first
                logger.debug("Skipping retry of page %d: %s", unit_id, e)
        return self.units

    def reset(self):
        self.orchestrator.reset()
        self.error = None
