"""Pydantic record schemas for storing scan and comparison results."""

from pydantic import BaseModel, Field


class ComparisonFieldRecord(BaseModel):
    """Stored form of a single field comparison."""

    key: str
    field_name: str
    ocr_value: str
    system_value: str
    similarity: float = Field(ge=0.0, le=1.0)
    match: bool


class ComparisonResultRecord(BaseModel):
    """Stored form of a full record comparison."""

    overall_accuracy: float = Field(ge=0.0, le=1.0)
    total_fields: int = Field(ge=0)
    matched_fields: int = Field(ge=0)
    fields: list[ComparisonFieldRecord]
    recommendations: list[str]


class ScanResultRecord(BaseModel):
    """Stored form of one processed license scan."""

    text: str
    confidence: float
    extracted_data: dict[str, str]
    comparison_result: ComparisonResultRecord | None = None
    recommendations: list[str] = Field(default_factory=list)
