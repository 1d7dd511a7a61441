"""
Tests for plain-text export of translated documents.
"""

from pagetranslate.core.exporter import Exporter
from pagetranslate.models import TranslationUnit, UnitStatus


def units():
    done = TranslationUnit(id=1, original_text="Hello", translated_text="你好", status=UnitStatus.COMPLETED)
    blank = TranslationUnit(id=2, original_text="", status=UnitStatus.COMPLETED)
    failed = TranslationUnit(id=3, original_text="Bye", status=UnitStatus.ERROR,
                             error_message="Rate limit exceeded", retry_count=2)
    return [done, blank, failed]


class TestExporter:

    def test_render(self):
        text = Exporter().render(units())

        assert text == (
            "Page 1\n======\n\n你好\n"
            "\n"
            "Page 2\n======\n"
            "\n"
            "Page 3\n======\n\n[Translation failed: Rate limit exceeded]\n[Retry attempts: 2]\n"
        )

    def test_render_pending(self):
        text = Exporter().render([TranslationUnit(id=1, original_text="Hi")])
        assert "[Not translated: pending]" in text

    def test_render_original(self):
        text = Exporter().render_original(units())
        assert text.startswith("Page 1\n======\n\nHello\n")
        assert "Page 3\n======\n\nBye\n" in text

    def test_save_text_creates_directories(self, tmp_path):
        output_path = tmp_path / "out" / "nested" / "book_translated.txt"

        Exporter().save_text(units(), str(output_path))

        assert output_path.read_text(encoding="utf-8") == Exporter().render(units())

    def test_save_original_text(self, tmp_path):
        output_path = tmp_path / "book_original.txt"

        Exporter().save_original_text(units(), str(output_path))

        assert "Hello" in output_path.read_text(encoding="utf-8")
