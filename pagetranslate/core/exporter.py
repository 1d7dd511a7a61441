import logging
import os
from typing import List

from ..models import TranslationUnit, UnitStatus

logger = logging.getLogger(__name__)


class Exporter:
    """Writes a translated document as plain text, one section per page."""

    def render(self, units: List[TranslationUnit]) -> str:
        sections = []
        for unit in units:
            heading = f"Page {unit.id}"
            if unit.status == UnitStatus.COMPLETED:
                body = unit.translated_text
            elif unit.status == UnitStatus.ERROR:
                body = f"[Translation failed: {unit.error_message or 'unknown error'}]"
                if unit.retry_count:
                    body += f"\n[Retry attempts: {unit.retry_count}]"
            else:
                body = f"[Not translated: {unit.status.value}]"
            sections.append(f"{heading}\n{'=' * len(heading)}\n\n{body}".rstrip() + "\n")
        return "\n".join(sections)

    def render_original(self, units: List[TranslationUnit]) -> str:
        sections = []
        for unit in units:
            heading = f"Page {unit.id}"
            sections.append(f"{heading}\n{'=' * len(heading)}\n\n{unit.original_text}".rstrip() + "\n")
        return "\n".join(sections)

    def save_text(self, units: List[TranslationUnit], output_path: str):
        """Saves the translated pages to output_path."""
        self._write(self.render(units), output_path)
        completed = sum(1 for u in units if u.status == UnitStatus.COMPLETED)
        logger.info("Saved translated text (%d/%d pages) to: %s", completed, len(units), output_path)

    def save_original_text(self, units: List[TranslationUnit], output_path: str):
        """Saves the reflowed source text to output_path."""
        self._write(self.render_original(units), output_path)
        logger.info("Saved reconstructed text (%d pages) to: %s", len(units), output_path)

    @staticmethod
    def _write(content: str, output_path: str):
        # Ensure output directory exists
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
