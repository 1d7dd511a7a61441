import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..config import MAX_RETRY_ATTEMPTS, RETRY_BASE_DELAY
from ..errors import ConfigurationError, TranslationError
from ..models import RetryOutcome, TranslationUnit

logger = logging.getLogger(__name__)

TranslateFn = Callable[[str], Awaitable[str]]


class RetryScheduler:
    """Runs one unit's translation with bounded retries and exponential backoff.

    With base_delay=1 the waits before attempts 2, 3, 4... are 1, 2, 4... seconds.
    """

    def __init__(self,
                 max_attempts: int = MAX_RETRY_ATTEMPTS,
                 base_delay: float = RETRY_BASE_DELAY,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self._validate(max_attempts, base_delay)
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    def delay_for(self, attempt: int, base_delay: Optional[float] = None) -> float:
        """Backoff before the attempt after the given 0-based failed attempt."""
        base = self.base_delay if base_delay is None else base_delay
        return base * (2 ** attempt)

    async def attempt(self, unit: TranslationUnit, translate_fn: TranslateFn,
                      max_attempts: Optional[int] = None,
                      base_delay: Optional[float] = None) -> RetryOutcome:
        """Translates unit.original_text, retrying on any failure of translate_fn.

        ConfigurationError and cancellation are not unit failures: they
        propagate at once, without further attempts.

        Returns:
            RetryOutcome with the translated text on success (failed_attempts
            counting the failures before it), or the last failure's message
            once every attempt has been used.
        """
        max_attempts = self.max_attempts if max_attempts is None else max_attempts
        base_delay = self.base_delay if base_delay is None else base_delay
        self._validate(max_attempts, base_delay)

        last_error: Optional[str] = None
        for attempt in range(max_attempts):
            try:
                logger.debug("Page %d: attempt %d/%d.", unit.id, attempt + 1, max_attempts)
                text = await translate_fn(unit.original_text)
                if attempt:
                    logger.info("Page %d translated after %d failed attempt(s).", unit.id, attempt)
                return RetryOutcome(text=text, failed_attempts=attempt)
            except (ConfigurationError, asyncio.CancelledError):
                raise
            except Exception as e:
                last_error = self._describe(e)
                if attempt < max_attempts - 1:
                    delay = self.delay_for(attempt, base_delay)
                    logger.warning("Page %d: attempt %d/%d failed: %s. Retrying in %.1fs...",
                                   unit.id, attempt + 1, max_attempts, last_error, delay)
                    await self._sleep(delay)
                else:
                    logger.warning("Page %d: attempt %d/%d failed: %s.", unit.id, attempt + 1, max_attempts, last_error)

        return RetryOutcome(error=last_error, failed_attempts=max_attempts)

    @staticmethod
    def _describe(error: Exception) -> str:
        if isinstance(error, TranslationError):
            return str(error)
        # Anything else is a bug or transport fault inside translate_fn
        return f"{type(error).__name__}: {error}" if str(error) else type(error).__name__

    @staticmethod
    def _validate(max_attempts: int, base_delay: float):
        if max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {max_attempts}.")
        if base_delay < 0:
            raise ConfigurationError(f"base_delay must not be negative, got {base_delay}.")
