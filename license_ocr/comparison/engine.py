"""Field-by-field comparison of extracted license data with a system record.

A field counts only when at least one side has a value. Each counted
field is scored, matched against a fixed threshold, and the share of
matches becomes the overall accuracy.
"""

import dataclasses
import math
from collections.abc import Mapping

from license_ocr.exceptions import CompareError
from license_ocr.utils.config import ComparisonConfig
from license_ocr.utils.logger import get_logger

from .models import ComparisonField, ComparisonResult
from .recommendations import recommend
from .similarity import Scorer, get_scorer

logger = get_logger(__name__)

# (field key, display label) in report order.
COMPARISON_FIELDS: tuple[tuple[str, str], ...] = (
    ("company_name", "企业名称"),
    ("credit_code", "统一社会信用代码"),
    ("legal_person", "法定代表人"),
    ("address", "注册地址"),
    ("registered_capital", "注册资本"),
    ("business_term", "营业期限"),
    ("establishment_date", "成立日期"),
)


class ComparisonEngine:
    """Compares extracted fields with the authoritative record.

    Args:
        config: Scorer choice and thresholds.
        fields: Ordered ``(key, label)`` table of fields to compare.
    """

    def __init__(
        self,
        config: ComparisonConfig | None = None,
        fields: tuple[tuple[str, str], ...] = COMPARISON_FIELDS,
    ) -> None:
        self.config = config or ComparisonConfig()
        self.fields = fields
        self.scorer: Scorer = get_scorer(self.config.similarity_method)

    def compare(
        self,
        extracted: Mapping[str, str | None],
        system: Mapping[str, str | None],
    ) -> ComparisonResult:
        """Compare two field mappings and attach recommendations.

        Args:
            extracted: Values read from the document.
            system: Values held by the system of record.

        Returns:
            Comparison result with per-field scores and overall accuracy.

        Raises:
            CompareError: If the scorer returns a value outside ``[0, 1]``.
        """
        compared: list[ComparisonField] = []
        matched = 0

        for key, label in self.fields:
            ocr_value = extracted.get(key) or ""
            system_value = system.get(key) or ""
            if not ocr_value and not system_value:
                continue

            score = self.scorer(ocr_value, system_value)
            if math.isnan(score) or not 0.0 <= score <= 1.0:
                raise CompareError(f"Similarity {score!r} out of range for {key}")

            is_match = score > self.config.match_threshold
            matched += is_match
            compared.append(
                ComparisonField(
                    key=key,
                    field_name=label,
                    ocr_value=ocr_value,
                    system_value=system_value,
                    similarity=score,
                    match=is_match,
                )
            )

        total = len(compared)
        result = ComparisonResult(
            overall_accuracy=matched / total if total else 0.0,
            fields=tuple(compared),
            total_fields=total,
            matched_fields=matched,
        )
        result = dataclasses.replace(
            result,
            recommendations=tuple(
                recommend(
                    result,
                    review_threshold=self.config.review_threshold,
                    confirm_threshold=self.config.confirm_threshold,
                )
            ),
        )

        logger.info(
            "Compared %d fields: %d matched, accuracy %.2f",
            total,
            matched,
            result.overall_accuracy,
        )
        return result


def compare(
    extracted: Mapping[str, str | None],
    system: Mapping[str, str | None],
    config: ComparisonConfig | None = None,
) -> ComparisonResult:
    """Compare with a default-configured :class:`ComparisonEngine`."""
    return ComparisonEngine(config).compare(extracted, system)
