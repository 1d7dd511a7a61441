from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the project root importable when pytest is run without installing the package
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from pagetranslate.errors import TranslationError  # noqa: E402
from pagetranslate.models import TextFragment  # noqa: E402


def frag(text: str, x: float, y: float, width: float = 40.0, height: float = 10.0) -> TextFragment:
    return TextFragment(text=text, x=x, y=y, width=width, height=height)


@pytest.fixture
def make_fragment():
    return frag


class FakeTranslate:
    """Scripted translate function: fails the first `failures` calls per text, then echoes."""

    def __init__(self, failures: int = 0, always_fail_on: tuple = (), prefix: str = "ZH:"):
        self.failures = failures
        self.always_fail_on = always_fail_on
        self.prefix = prefix
        self.calls: list[str] = []
        self._failed: dict[str, int] = {}

    async def __call__(self, text: str) -> str:
        self.calls.append(text)
        if any(marker in text for marker in self.always_fail_on):
            raise TranslationError(f"service unavailable (call {len(self.calls)})")
        failed = self._failed.get(text, 0)
        if failed < self.failures:
            self._failed[text] = failed + 1
            raise TranslationError(f"rate limited ({failed + 1})")
        return f"{self.prefix}{text}"


@pytest.fixture
def fake_translate():
    return FakeTranslate


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
