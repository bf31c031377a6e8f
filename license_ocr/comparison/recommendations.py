"""Reviewer recommendations derived from a comparison result."""

from license_ocr.utils.logger import get_logger

from .models import ComparisonResult

logger = get_logger(__name__)

MANUAL_REVIEW_MESSAGE = "数据差异较大，建议人工复核"
CONFIRM_MESSAGE = "数据高度匹配，可以直接确认"
UNMATCHED_PREFIX = "以下字段需要确认："
UNMATCHED_DELIMITER = "、"
ADDRESS_CHANGE_MESSAGE = "地址不匹配可能是由于搬迁或格式差异，请确认是否有地址变更"


def recommend(
    result: ComparisonResult,
    review_threshold: float = 0.6,
    confirm_threshold: float = 0.9,
) -> list[str]:
    """Build advisory messages for a human reviewer.

    Args:
        result: Comparison to advise on. Not modified.
        review_threshold: Accuracy below which manual review is advised.
        confirm_threshold: Accuracy above which direct confirmation is advised.

    Returns:
        Messages in a fixed order: manual review, unmatched fields,
        address change hint, direct confirmation.
    """
    recommendations: list[str] = []

    if result.overall_accuracy < review_threshold:
        recommendations.append(MANUAL_REVIEW_MESSAGE)

    unmatched = result.unmatched_fields
    if unmatched:
        names = UNMATCHED_DELIMITER.join(f.field_name for f in unmatched)
        recommendations.append(f"{UNMATCHED_PREFIX}{names}")
        if any(f.key == "address" for f in unmatched):
            recommendations.append(ADDRESS_CHANGE_MESSAGE)

    if result.overall_accuracy > confirm_threshold:
        recommendations.append(CONFIRM_MESSAGE)

    logger.debug("Generated %d recommendations", len(recommendations))
    return recommendations
