import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..errors import UnitStateError
from ..models import RetryOutcome, TranslationUnit, UnitStatus
from .retry_scheduler import RetryScheduler, TranslateFn

logger = logging.getLogger(__name__)

# Receives a snapshot of all units and the overall percentage (0-100)
ProgressCallback = Callable[[List[TranslationUnit], int], None]


def _percent(processed: int, total: int) -> int:
    # Half-up rounding so 1/8 reports 13, not banker's 12
    return int(100 * processed / total + 0.5)


class PipelineOrchestrator:
    """Drives a document's pages through translation, one page at a time.

    The automatic sweep (run) translates pages strictly in page order, so at
    most one request is outstanding and progress only ever grows. A page that
    fails ends in 'error' and the sweep moves on. Failed pages can be
    re-attempted individually with retry, even while a sweep is still working
    through other pages.

    reset() throws everything away. Sweeps and retries started before the
    reset notice it through the generation counter and drop their results.
    """

    def __init__(self,
                 translate_fn: TranslateFn,
                 scheduler: Optional[RetryScheduler] = None,
                 on_progress: Optional[ProgressCallback] = None):
        self.translate_fn = translate_fn
        self.scheduler = scheduler or RetryScheduler()
        self.on_progress = on_progress
        self._units: Dict[int, TranslationUnit] = {}
        self._generation = 0
        self.progress = 0

    # --- State ---

    @property
    def units(self) -> List[TranslationUnit]:
        """Copies of all units in page order."""
        return [self._units[unit_id].model_copy() for unit_id in sorted(self._units)]

    def get_unit(self, unit_id: int) -> Optional[TranslationUnit]:
        unit = self._units.get(unit_id)
        return unit.model_copy() if unit else None

    @property
    def failed_units(self) -> List[int]:
        return [unit_id for unit_id in sorted(self._units) if self._units[unit_id].status == UnitStatus.ERROR]

    def load(self, texts: Sequence[str]) -> List[TranslationUnit]:
        """Starts a new document: one pending unit per page text."""
        self.reset()
        self._units = {
            page_number: TranslationUnit(id=page_number, original_text=text)
            for page_number, text in enumerate(texts, start=1)
        }
        logger.info("Loaded %d pages for translation.", len(self._units))
        return self.units

    def reset(self):
        """Discards all units and progress, whatever is still in flight."""
        self._generation += 1
        self._units = {}
        self.progress = 0

    # --- Automatic path ---

    async def run(self) -> List[TranslationUnit]:
        """Translates every pending unit in page order.

        Returns:
            The units after the sweep. Empty if the pipeline was reset while
            the sweep was running.
        """
        generation = self._generation
        unit_ids = sorted(self._units)
        total = len(unit_ids)
        logger.info("Starting translation sweep over %d pages.", total)

        for processed, unit_id in enumerate(unit_ids, start=1):
            if self._is_stale(generation):
                logger.info("Pipeline was reset; abandoning sweep.")
                return self.units

            unit = self._units.get(unit_id)
            if unit is not None and unit.status == UnitStatus.PENDING:
                await self._translate_unit(generation, unit)
            else:
                logger.debug("Page %d is not pending; leaving it as is.", unit_id)

            if self._is_stale(generation):
                logger.info("Pipeline was reset; abandoning sweep.")
                return self.units

            self.progress = _percent(processed, total)
            self._notify()

        logger.info("Sweep finished: %d pages, %d failed.", total, len(self.failed_units))
        return self.units

    async def _translate_unit(self, generation: int, unit: TranslationUnit):
        if unit.is_blank:
            logger.info("Page %d has no text; skipping translation.", unit.id)
            unit.skip()
            return

        unit.start()
        logger.info("Translating page %d...", unit.id)
        outcome = await self._attempt(generation, unit)
        self._settle(generation, unit, outcome)

    # --- Manual path ---

    async def retry(self, unit_id: int) -> TranslationUnit:
        """Re-attempts one failed unit.

        Raises:
            UnitStateError: The unit does not exist or is not in 'error'
                (a completed page is never downgraded, and a page that is
                already processing is never attempted twice at once).
        """
        unit = self._units.get(unit_id)
        if unit is None:
            raise UnitStateError(f"Page {unit_id} does not exist.", unit_id=unit_id)
        if unit.status != UnitStatus.ERROR:
            raise UnitStateError(
                f"Page {unit_id} cannot be retried while '{unit.status.value}'.",
                unit_id=unit_id, status=unit.status.value
            )

        generation = self._generation
        unit.rearm()
        logger.info("Retrying page %d (manual retry #%d)...", unit.id, unit.retry_count)
        outcome = await self._attempt(generation, unit)
        if self._settle(generation, unit, outcome):
            self._notify()
        return unit.model_copy()

    # --- Helpers ---

    async def _attempt(self, generation: int, unit: TranslationUnit) -> RetryOutcome:
        """Runs the scheduler for a processing unit.

        If the scheduler raises (ConfigurationError, cancellation) the unit is
        moved to 'error' before the exception propagates, so it can be
        retried later.
        """
        try:
            return await self.scheduler.attempt(unit, self.translate_fn)
        except asyncio.CancelledError:
            self._settle(generation, unit, RetryOutcome(error="Translation was cancelled."))
            raise
        except Exception as e:
            self._settle(generation, unit, RetryOutcome(error=str(e) or type(e).__name__))
            raise

    def _settle(self, generation: int, unit: TranslationUnit, outcome: RetryOutcome) -> bool:
        """Records an outcome on the unit, unless the unit was discarded meanwhile."""
        if self._is_stale(generation) or self._units.get(unit.id) is not unit:
            logger.debug("Page %d no longer exists; discarding its result.", unit.id)
            return False
        if outcome.succeeded:
            unit.complete(outcome.text)
            logger.info("Page %d translated.", unit.id)
        else:
            unit.fail(outcome.error)
            logger.error("Page %d failed after %d attempts: %s", unit.id, outcome.failed_attempts, outcome.error)
        return True

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _notify(self):
        if self.on_progress:
            self.on_progress(self.units, self.progress)
