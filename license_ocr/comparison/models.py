"""Result types produced by field comparison."""

from dataclasses import asdict, dataclass
from typing import Any

from license_ocr.schemas import ComparisonResultRecord


@dataclass(frozen=True)
class ComparisonField:
    """OCR and system values of one field with their similarity."""

    key: str
    field_name: str
    ocr_value: str
    system_value: str
    similarity: float
    match: bool


@dataclass(frozen=True)
class ComparisonResult:
    """Field-by-field comparison of a scan against the system record."""

    overall_accuracy: float
    fields: tuple[ComparisonField, ...]
    recommendations: tuple[str, ...] = ()
    total_fields: int = 0
    matched_fields: int = 0

    @property
    def unmatched_fields(self) -> list[ComparisonField]:
        return [f for f in self.fields if not f.match]

    def to_record(self) -> dict[str, Any]:
        """Serialize to a plain dict for the persistence layer."""
        return ComparisonResultRecord(**asdict(self)).model_dump()
