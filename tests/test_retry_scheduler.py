"""
Tests for RetryScheduler: bounded attempts and exponential backoff.

Backoff sleeps are recorded instead of awaited.
"""

import asyncio

import pytest

from pagetranslate.core.retry_scheduler import RetryScheduler
from pagetranslate.errors import ConfigurationError, TranslationError
from pagetranslate.models import TranslationUnit


@pytest.fixture
def unit():
    return TranslationUnit(id=1, original_text="Hello world")


class TestRetryScheduler:

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self, unit, fake_translate, recording_sleep):
        translate = fake_translate()
        scheduler = RetryScheduler(max_attempts=3, base_delay=1.0, sleep=recording_sleep)

        outcome = await scheduler.attempt(unit, translate)

        assert outcome.succeeded
        assert outcome.text == "ZH:Hello world"
        assert outcome.failed_attempts == 0
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failures", [1, 2])
    async def test_recovers_after_failures(self, unit, fake_translate, recording_sleep, failures):
        """Failing k < max_attempts times then succeeding surfaces no error."""
        translate = fake_translate(failures=failures)
        scheduler = RetryScheduler(max_attempts=3, base_delay=1.0, sleep=recording_sleep)

        outcome = await scheduler.attempt(unit, translate)

        assert outcome.succeeded
        assert outcome.error is None
        assert outcome.failed_attempts == failures
        assert len(translate.calls) == failures + 1
        assert recording_sleep.delays == [1.0, 2.0][:failures]

    @pytest.mark.asyncio
    async def test_exhausts_attempts(self, unit, fake_translate, recording_sleep):
        translate = fake_translate(always_fail_on=("Hello",))
        scheduler = RetryScheduler(max_attempts=3, base_delay=1.0, sleep=recording_sleep)

        outcome = await scheduler.attempt(unit, translate)

        assert not outcome.succeeded
        assert outcome.text is None
        assert outcome.failed_attempts == 3
        assert len(translate.calls) == 3
        assert outcome.error == "service unavailable (call 3)"
        # No wait after the final attempt
        assert recording_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_backoff_doubles(self, unit, fake_translate, recording_sleep):
        scheduler = RetryScheduler(max_attempts=5, base_delay=0.5, sleep=recording_sleep)

        await scheduler.attempt(unit, fake_translate(always_fail_on=("Hello",)))

        assert recording_sleep.delays == [0.5, 1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_per_call_overrides(self, unit, fake_translate, recording_sleep):
        scheduler = RetryScheduler(max_attempts=3, base_delay=1.0, sleep=recording_sleep)
        translate = fake_translate(always_fail_on=("Hello",))

        outcome = await scheduler.attempt(unit, translate, max_attempts=2, base_delay=0.25)

        assert outcome.failed_attempts == 2
        assert len(translate.calls) == 2
        assert recording_sleep.delays == [0.25]

    @pytest.mark.asyncio
    async def test_single_attempt_never_sleeps(self, unit, fake_translate, recording_sleep):
        scheduler = RetryScheduler(max_attempts=1, base_delay=1.0, sleep=recording_sleep)

        outcome = await scheduler.attempt(unit, fake_translate(always_fail_on=("Hello",)))

        assert not outcome.succeeded
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_configuration_errors_propagate(self, unit, recording_sleep):
        async def rejected(text):
            raise ConfigurationError("bad key")

        scheduler = RetryScheduler(sleep=recording_sleep)

        with pytest.raises(ConfigurationError):
            await scheduler.attempt(unit, rejected)
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_translates_the_unit_text(self, recording_sleep):
        seen = []

        async def translate(text):
            seen.append(text)
            return "ok"

        unit = TranslationUnit(id=4, original_text="Page four")
        await RetryScheduler(sleep=recording_sleep).attempt(unit, translate)

        assert seen == ["Page four"]

    def test_delay_for(self):
        scheduler = RetryScheduler(base_delay=1.0)
        assert [scheduler.delay_for(k) for k in range(4)] == [1.0, 2.0, 4.0, 8.0]

    @pytest.mark.parametrize("max_attempts,base_delay", [(0, 1.0), (3, -1.0)])
    def test_rejects_invalid_settings(self, max_attempts, base_delay):
        with pytest.raises(ConfigurationError):
            RetryScheduler(max_attempts=max_attempts, base_delay=base_delay)

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, unit, recording_sleep):
        calls = []

        async def flaky(text):
            calls.append(text)
            if len(calls) == 1:
                raise TranslationError("transient")
            return "fine"

        outcome = await RetryScheduler(sleep=recording_sleep).attempt(unit, flaky)

        assert outcome.text == "fine"
        assert outcome.failed_attempts == 1

    @pytest.mark.asyncio
    async def test_unexpected_errors_count_as_failures(self, unit, recording_sleep):
        calls = []

        async def broken(text):
            calls.append(text)
            raise RuntimeError("socket closed")

        outcome = await RetryScheduler(max_attempts=2, base_delay=1.0, sleep=recording_sleep).attempt(unit, broken)

        assert not outcome.succeeded
        assert outcome.error == "RuntimeError: socket closed"
        assert outcome.failed_attempts == 2
        assert len(calls) == 2
        assert recording_sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, unit, recording_sleep):
        async def cancelled(text):
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await RetryScheduler(sleep=recording_sleep).attempt(unit, cancelled)
        assert recording_sleep.delays == []
