"""Tesseract recognition engine with word-level extraction.

Wraps pytesseract behind an explicit initialize/terminate lifecycle and
returns recognized text, page confidence and per-word bounding boxes.
"""

import io
import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import pytesseract
from PIL import Image

from license_ocr.exceptions import RecognitionError, RecognitionInitError
from license_ocr.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box given by its top-left and bottom-right corners."""

    x0: int
    y0: int
    x1: int
    y1: int


@dataclass(frozen=True)
class Token:
    """A single recognized word with position and confidence (0-100)."""

    text: str
    confidence: float
    bbox: BoundingBox


@dataclass(frozen=True)
class RecognitionResult:
    """Recognized text of a page, its confidence (0-100) and its words."""

    text: str
    confidence: float
    tokens: tuple[Token, ...] = ()


class TesseractEngine:
    """Recognition engine backed by the Tesseract command-line tool.

    Every call runs its own tesseract process, so concurrent calls are
    safe and a killed call leaves no shared state behind.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
    """

    thread_safe = True

    def __init__(self, tesseract_cmd: str | None = None) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.languages: str | None = None
        self.psm = 3
        self.char_whitelist: str | None = None
        self.variables: dict[str, str] = {}

    @property
    def initialized(self) -> bool:
        return self.languages is not None

    def initialize(self, languages: str) -> None:
        """Check the Tesseract install and select the recognition languages.

        Args:
            languages: ``+``-joined Tesseract language codes, e.g. ``chi_sim+eng``.

        Raises:
            RecognitionInitError: If Tesseract is missing or a language pack
                is not installed.
        """
        try:
            version = pytesseract.get_tesseract_version()
            available = set(pytesseract.get_languages(config=""))
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as exc:
            raise RecognitionInitError(f"Tesseract is not available: {exc}") from exc

        missing = [lang for lang in languages.split("+") if lang not in available]
        if missing:
            raise RecognitionInitError(
                f"Missing Tesseract language data: {', '.join(missing)}"
            )

        self.languages = languages
        logger.info("Tesseract %s initialized for %s", version, languages)

    def set_parameters(self, params: Mapping[str, Any]) -> None:
        """Set page segmentation, whitelist and raw Tesseract variables.

        ``psm`` and ``char_whitelist`` are recognized by name; any other key
        is passed to Tesseract as a ``-c name=value`` variable.
        """
        for name, value in params.items():
            if name == "psm":
                self.psm = int(value)
            elif name == "char_whitelist":
                self.char_whitelist = value or None
            else:
                self.variables[name] = str(value)

    def build_config(self) -> str:
        """Render the Tesseract command-line options for the current parameters."""
        parts = [f"--psm {self.psm}"]
        variables = dict(self.variables)
        if self.char_whitelist:
            variables["tessedit_char_whitelist"] = self.char_whitelist
        for name, value in variables.items():
            parts.append("-c " + shlex.quote(f"{name}={value}"))
        return " ".join(parts)

    def recognize(
        self, image: bytes, timeout: float | None = None
    ) -> RecognitionResult:
        """Recognize text in an encoded image.

        Args:
            image: Encoded image bytes.
            timeout: Seconds before the tesseract process is killed.

        Returns:
            RecognitionResult with every word Tesseract reported.
        """
        languages = self.languages
        if languages is None:
            raise RecognitionError("Tesseract engine is not initialized")

        config = self.build_config()
        with Image.open(io.BytesIO(image)) as pil_image:
            text = pytesseract.image_to_string(
                pil_image, lang=languages, config=config, timeout=timeout or 0
            )
            data = pytesseract.image_to_data(
                pil_image,
                lang=languages,
                config=config,
                output_type=pytesseract.Output.DICT,
                timeout=timeout or 0,
            )

        tokens: list[Token] = []
        confidences: list[float] = []

        for i in range(len(data["text"])):
            conf = float(data["conf"][i])
            word_text = data["text"][i].strip()
            if conf < 0 or not word_text:
                continue

            left, top = data["left"][i], data["top"][i]
            tokens.append(
                Token(
                    text=word_text,
                    confidence=conf,
                    bbox=BoundingBox(
                        x0=left,
                        y0=top,
                        x1=left + data["width"][i],
                        y1=top + data["height"][i],
                    ),
                )
            )
            confidences.append(conf)

        avg_conf = sum(confidences) / len(confidences) if confidences else 0.0
        logger.debug("Tesseract returned %d words", len(tokens))
        return RecognitionResult(text=text, confidence=avg_conf, tokens=tuple(tokens))

    def terminate(self) -> None:
        """Forget the selected languages; the next use must initialize again."""
        self.languages = None
        logger.info("Tesseract engine terminated")
