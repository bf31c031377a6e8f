"""End-to-end business license verification.

Combines preprocessing, recognition, field extraction and comparison
with the system record into a single interface.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from license_ocr.comparison.engine import ComparisonEngine
from license_ocr.comparison.models import ComparisonResult
from license_ocr.extraction.rule_extractor import FieldExtractor
from license_ocr.ocr.recognizer import RecognitionAdapter, RecognitionEngine
from license_ocr.ocr.tesseract_engine import RecognitionResult
from license_ocr.preprocessing.pipeline import ImagePreprocessor
from license_ocr.schemas import ScanResultRecord
from license_ocr.utils.config import AppConfig
from license_ocr.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ScanResult:
    """Recognition, extraction and (optional) comparison of one scan."""

    text: str
    confidence: float
    extracted_data: dict[str, str]
    comparison: ComparisonResult | None = None
    recommendations: list[str] = field(default_factory=list)

    def to_record(self) -> dict[str, Any]:
        """Serialize to a plain dict for the persistence layer."""
        return ScanResultRecord(
            text=self.text,
            confidence=self.confidence,
            extracted_data=self.extracted_data,
            comparison_result=(
                self.comparison.to_record() if self.comparison is not None else None
            ),
            recommendations=self.recommendations,
        ).model_dump()


class LicenseVerifier:
    """Reads a business license photo and checks it against a system record.

    One verifier owns one recognition engine; reuse it across requests
    and call :meth:`close` on shutdown.

    Args:
        config: Application configuration object.
        engine_factory: Optional recognition engine factory, mainly for tests.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        engine_factory: Callable[[], RecognitionEngine] | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.recognizer = RecognitionAdapter(
            self.config.ocr,
            preprocessor=ImagePreprocessor(self.config.preprocessing),
            engine_factory=engine_factory,
        )
        self.extractor = FieldExtractor()
        self.comparison = ComparisonEngine(self.config.comparison)

    def recognize_business_license(
        self, image: bytes, timeout: float | None = None
    ) -> tuple[dict[str, str], RecognitionResult]:
        """Recognize a license image and extract its fields.

        Raises:
            RecognitionError: If the document could not be recognized.
        """
        recognition = self.recognizer.process_image(image, timeout=timeout)
        return self.extractor.extract(recognition.text), recognition

    def verify(
        self,
        image: bytes,
        system_record: Mapping[str, str | None] | None = None,
        timeout: float | None = None,
    ) -> ScanResult:
        """Recognize a license and compare it with the system record.

        Args:
            image: Raw image bytes.
            system_record: Authoritative field values. Without it only
                recognition and extraction run.
            timeout: Seconds allowed for recognition.

        Returns:
            Scan result; ``comparison`` is ``None`` without a record.

        Raises:
            RecognitionError: If the document could not be recognized.
        """
        extracted, recognition = self.recognize_business_license(image, timeout)

        comparison = None
        recommendations: list[str] = []
        if system_record is not None:
            comparison = self.comparison.compare(extracted, system_record)
            recommendations = list(comparison.recommendations)

        logger.info(
            "Verified license scan: %d fields extracted, accuracy %s",
            len(extracted),
            f"{comparison.overall_accuracy:.2f}" if comparison else "n/a",
        )
        return ScanResult(
            text=recognition.text,
            confidence=recognition.confidence,
            extracted_data=extracted,
            comparison=comparison,
            recommendations=recommendations,
        )

    def close(self) -> None:
        """Release the shared recognition engine."""
        self.recognizer.terminate()
