"""Rule-based field extraction for business license text.

Each field has an ordered list of synonymous labels and a value pattern.
Labels are tried in order and the first match wins; a field without a
match is simply left out of the result.
"""

import re
from dataclasses import dataclass

from license_ocr.exceptions import ExtractionError
from license_ocr.utils.logger import get_logger

logger = get_logger(__name__)

_SEPARATOR = r"[：:\s]*"
_TO_END_OF_LINE = r"([^\n\r]+)"
_CREDIT_CODE = r"([A-Z0-9]{18})(?![A-Z0-9])"


@dataclass(frozen=True)
class FieldRule:
    """Labels that introduce a field and the pattern capturing its value."""

    key: str
    labels: tuple[str, ...]
    value_pattern: str = _TO_END_OF_LINE

    def compile(self) -> list[tuple[str, re.Pattern[str]]]:
        """Compile one pattern per label, in priority order.

        OCR often splits CJK labels with spaces, so any whitespace is
        allowed between label characters.
        """
        return [
            (
                label,
                re.compile(
                    r"\s*".join(re.escape(ch) for ch in label)
                    + _SEPARATOR
                    + self.value_pattern
                ),
            )
            for label in self.labels
        ]


BUSINESS_LICENSE_RULES: tuple[FieldRule, ...] = (
    FieldRule("company_name", ("企业名称", "名称")),
    FieldRule("credit_code", ("统一社会信用代码", "信用代码"), _CREDIT_CODE),
    FieldRule("legal_person", ("法定代表人", "代表人", "负责人")),
    FieldRule("address", ("注册地址", "住所", "地址")),
    FieldRule("registered_capital", ("注册资本", "资本")),
    FieldRule("business_term", ("营业期限", "经营期限")),
    FieldRule("establishment_date", ("成立日期", "注册日期")),
)


@dataclass
class ExtractedField:
    """A field value captured by a label rule."""

    field_name: str
    value: str
    label: str
    start_pos: int
    end_pos: int


class FieldExtractor:
    """Extracts license fields from recognized text.

    Args:
        rules: Ordered rule table. Defaults to the business license rules.
    """

    def __init__(self, rules: tuple[FieldRule, ...] = BUSINESS_LICENSE_RULES) -> None:
        self.rules = rules
        self._compiled = {rule.key: rule.compile() for rule in rules}

    def extract_detailed(self, text: str) -> list[ExtractedField]:
        """Extract fields with the label and span that produced each value.

        Args:
            text: Recognized document text.

        Returns:
            One entry per matched field, in rule-table order.

        Raises:
            ExtractionError: If ``text`` is not a string.
        """
        if not isinstance(text, str):
            raise ExtractionError(
                f"Expected recognized text as str, got {type(text).__name__}"
            )

        results: list[ExtractedField] = []
        for rule in self.rules:
            for label, pattern in self._compiled[rule.key]:
                match = pattern.search(text)
                if not match:
                    continue
                value = match.group(1).strip()
                if not value:
                    continue
                results.append(
                    ExtractedField(
                        field_name=rule.key,
                        value=value,
                        label=label,
                        start_pos=match.start(),
                        end_pos=match.end(),
                    )
                )
                break

        logger.info(
            "Extracted %d of %d license fields", len(results), len(self.rules)
        )
        return results

    def extract(self, text: str) -> dict[str, str]:
        """Extract fields as a ``{field_key: value}`` mapping."""
        return {f.field_name: f.value for f in self.extract_detailed(text)}
