from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import UnitStateError


class CoordinateOrigin(str, Enum):
    """Where the page coordinate system puts y = 0."""
    BOTTOM_LEFT = "bottom-left" # PDF user space: y grows upwards
    TOP_LEFT = "top-left" # PyMuPDF, images: y grows downwards


class TextFragment(BaseModel):
    """An atomic positioned run of text as emitted by the document parser."""
    model_config = ConfigDict(frozen=True)

    text: str
    x: float
    y: float
    width: float
    height: float


class Line(BaseModel):
    """Fragments sharing a visual baseline, ordered left to right."""
    y_anchor: float
    fragments: List[TextFragment] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(fragment.text.strip() for fragment in self.fragments)


class LayoutThresholds(BaseModel):
    """Tolerances (in page units) used by the layout reconstruction heuristics."""
    sort_tolerance: float = 5.0 # same-line band when ordering fragments
    line_tolerance: float = 8.0 # max distance from the line anchor
    paragraph_gap: float = 20.0 # vertical gap that starts a new paragraph
    origin: CoordinateOrigin = CoordinateOrigin.BOTTOM_LEFT

    @field_validator("sort_tolerance", "line_tolerance", "paragraph_gap")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("layout tolerances must be positive")
        return value

    def elevation(self, y: float) -> float:
        """Maps a y coordinate to a value that grows towards the top of the page."""
        return y if self.origin == CoordinateOrigin.BOTTOM_LEFT else -y


class UnitStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class TranslationUnit(BaseModel):
    """One page's translation work item.

    Status changes go through the transition methods below, which reject
    moves the lifecycle does not allow:

        pending -> processing -> completed | error
        pending -> completed                  (blank page, nothing to translate)
        error -> processing                   (manual retry)
    """
    id: int = Field(..., ge=1, description="1-based page number")
    original_text: str
    translated_text: str = ""
    status: UnitStatus = UnitStatus.PENDING
    error_message: Optional[str] = None
    retry_count: int = Field(0, ge=0, description="Manual retries only")

    @property
    def is_blank(self) -> bool:
        return not self.original_text.strip()

    @property
    def can_start(self) -> bool:
        return self.status in (UnitStatus.PENDING, UnitStatus.ERROR)

    def start(self):
        self._require(UnitStatus.PENDING, "start")
        self.status = UnitStatus.PROCESSING

    def skip(self):
        self._require(UnitStatus.PENDING, "skip")
        if not self.is_blank:
            raise UnitStateError(f"Page {self.id} has text to translate and cannot be skipped.", unit_id=self.id)
        self.translated_text = ""
        self.error_message = None
        self.status = UnitStatus.COMPLETED

    def complete(self, translated_text: str):
        self._require(UnitStatus.PROCESSING, "complete")
        self.translated_text = translated_text
        self.error_message = None
        self.status = UnitStatus.COMPLETED

    def fail(self, message: str):
        self._require(UnitStatus.PROCESSING, "fail")
        self.translated_text = ""
        self.error_message = message
        self.status = UnitStatus.ERROR

    def rearm(self):
        self._require(UnitStatus.ERROR, "retry")
        self.retry_count += 1
        self.status = UnitStatus.PROCESSING

    def _require(self, expected: UnitStatus, action: str):
        if self.status != expected:
            raise UnitStateError(
                f"Cannot {action} page {self.id}: status is '{self.status.value}', expected '{expected.value}'.",
                unit_id=self.id, status=self.status.value
            )


class RetryOutcome(BaseModel):
    """Result of running one unit through the retry scheduler."""
    text: Optional[str] = None
    error: Optional[str] = None
    failed_attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.error is None
