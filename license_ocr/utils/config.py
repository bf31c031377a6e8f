"""Configuration management for the license OCR engine.

Loads and validates YAML configuration with defaults tuned for
Chinese business-license scans: preprocessing, Tesseract recognition,
and field comparison thresholds.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Digits, Latin letters, CJK numerals and the punctuation seen on licenses.
DEFAULT_CHAR_WHITELIST = (
    "0123456789"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
    "一二三四五六七八九十百千万亿"
    "壹贰叁肆伍陆柒捌玖拾佰仟萬億"
    "（）()，。：；\"'“”‘’【】[]{}、|\\/-_+=*&^%$#@!?<>~`"
)


class PreprocessingConfig(BaseModel):
    """Configuration for the image preprocessing stage."""

    max_width: int = 2000
    max_height: int = 2000
    allow_enlarge: bool = True
    grayscale_enabled: bool = True
    normalize_enabled: bool = True
    sharpen_enabled: bool = True
    sharpen_sigma: float = 1.0
    sharpen_amount: float = 0.5


class OCRConfig(BaseModel):
    """Configuration for the Tesseract recognition engine."""

    tesseract_cmd: str | None = None
    languages: str = "chi_sim+eng"
    psm: int = 6
    char_whitelist: str = DEFAULT_CHAR_WHITELIST
    min_token_confidence: float = 30.0
    timeout_s: float | None = None


class ComparisonConfig(BaseModel):
    """Configuration for field comparison and reviewer recommendations."""

    similarity_method: str = "levenshtein"
    match_threshold: float = 0.8
    review_threshold: float = 0.6
    confirm_threshold: float = 0.9


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
