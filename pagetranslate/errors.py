"""
Exception classes for pagetranslate.

Document-level failures (extraction, configuration) propagate to the caller.
Per-page translation failures are caught at the unit boundary and recorded
on the unit instead.
"""


class PageTranslateError(Exception):
    """Base class for all pagetranslate errors."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.message = message
        self.context = kwargs

    def __str__(self):
        return self.message

    def to_dict(self):
        """Convert the exception to a dictionary for logging or reporting."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context
        }


class ExtractionError(PageTranslateError):
    """The source document could not be read; aborts the whole document."""


class ConfigurationError(PageTranslateError):
    """Missing credentials or invalid settings, raised before any page is attempted."""


class TranslationError(PageTranslateError):
    """A single translation call failed. Isolated to one page."""


class UnitStateError(PageTranslateError):
    """A translation unit was asked to make a transition its status does not allow."""
