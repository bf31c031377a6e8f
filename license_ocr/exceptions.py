"""Error types raised by the license OCR pipeline."""


class LicenseOCRError(Exception):
    """Base class for all license OCR errors."""


class PreprocessError(LicenseOCRError):
    """Raised when an image cannot be decoded or transformed.

    Never leaves the preprocessing stage; the caller receives the
    original image instead.
    """


class RecognitionError(LicenseOCRError):
    """Raised when the recognition engine fails on an image."""


class RecognitionInitError(RecognitionError):
    """Raised when the recognition engine cannot be initialized."""


class ExtractionError(LicenseOCRError, TypeError):
    """Raised when field extraction receives non-text input."""


class CompareError(LicenseOCRError):
    """Raised on an internal inconsistency while comparing fields."""
