"""Shared recognition adapter around a lazily initialized engine.

The engine is expensive to start, so one adapter is meant to live for the
whole process. Initialization is guarded by a lock and happens once;
``terminate`` releases the engine and a later call starts it again.
"""

import threading
from collections.abc import Callable, Mapping
from contextlib import nullcontext
from typing import Any, Protocol

from license_ocr.exceptions import RecognitionError, RecognitionInitError
from license_ocr.preprocessing.pipeline import ImagePreprocessor
from license_ocr.utils.config import OCRConfig
from license_ocr.utils.logger import get_logger

from .tesseract_engine import RecognitionResult, TesseractEngine

logger = get_logger(__name__)


class RecognitionEngine(Protocol):
    """Interface of an external text-recognition engine."""

    thread_safe: bool

    def initialize(self, languages: str) -> None: ...

    def set_parameters(self, params: Mapping[str, Any]) -> None: ...

    def recognize(
        self, image: bytes, timeout: float | None = None
    ) -> RecognitionResult: ...

    def terminate(self) -> None: ...


class RecognitionAdapter:
    """Runs recognition on a shared engine and filters weak tokens.

    Args:
        config: OCR configuration (languages, parameters, token floor).
        preprocessor: Preprocessor used by :meth:`process_image`.
        engine_factory: Builds a fresh engine. Defaults to Tesseract.
    """

    def __init__(
        self,
        config: OCRConfig | None = None,
        preprocessor: ImagePreprocessor | None = None,
        engine_factory: Callable[[], RecognitionEngine] | None = None,
    ) -> None:
        self.config = config or OCRConfig()
        self.preprocessor = preprocessor or ImagePreprocessor()
        self._engine_factory = engine_factory or (
            lambda: TesseractEngine(tesseract_cmd=self.config.tesseract_cmd)
        )
        self._engine: RecognitionEngine | None = None
        self._init_lock = threading.Lock()
        self._recognize_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    def __enter__(self) -> "RecognitionAdapter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.terminate()

    def _ensure_engine(self) -> RecognitionEngine:
        """Return the shared engine, initializing it on first use."""
        engine = self._engine
        if engine is not None:
            return engine

        with self._init_lock:
            if self._engine is not None:
                return self._engine

            engine = self._engine_factory()
            try:
                engine.initialize(self.config.languages)
                engine.set_parameters(
                    {
                        "psm": self.config.psm,
                        "char_whitelist": self.config.char_whitelist,
                    }
                )
            except RecognitionInitError as exc:
                logger.error("Recognition engine initialization failed: %s", exc)
                raise
            except Exception as exc:
                logger.error("Recognition engine initialization failed: %s", exc)
                raise RecognitionInitError(
                    f"Recognition engine initialization failed: {exc}"
                ) from exc

            self._engine = engine
            logger.info("Recognition engine ready (%s)", self.config.languages)
            return engine

    def recognize(
        self, image: bytes, timeout: float | None = None
    ) -> RecognitionResult:
        """Recognize text in an image with the shared engine.

        Args:
            image: Encoded image bytes.
            timeout: Seconds allowed for the engine call. Defaults to
                ``config.timeout_s``.

        Returns:
            RecognitionResult with trimmed text and only the tokens above
            the confidence floor. The page confidence is the engine's.

        Raises:
            RecognitionInitError: If the engine cannot be started.
            RecognitionError: If the engine fails or times out.
        """
        engine = self._ensure_engine()
        if timeout is None:
            timeout = self.config.timeout_s

        lock = nullcontext() if engine.thread_safe else self._recognize_lock
        try:
            with lock:
                raw = engine.recognize(image, timeout=timeout)
        except RecognitionError as exc:
            logger.error("Recognition failed: %s", exc)
            raise
        except Exception as exc:
            logger.error("Recognition failed: %s", exc)
            raise RecognitionError(f"Recognition failed: {exc}") from exc

        floor = self.config.min_token_confidence
        tokens = tuple(t for t in raw.tokens if t.confidence > floor)
        result = RecognitionResult(
            text=raw.text.strip(),
            confidence=raw.confidence,
            tokens=tokens,
        )
        logger.info(
            "Recognized %d tokens (%d below confidence %.0f dropped), confidence %.1f",
            len(tokens),
            len(raw.tokens) - len(tokens),
            floor,
            result.confidence,
        )
        return result

    def process_image(
        self, image: bytes, timeout: float | None = None
    ) -> RecognitionResult:
        """Preprocess an image, then recognize it."""
        return self.recognize(self.preprocessor.preprocess(image), timeout=timeout)

    def terminate(self) -> None:
        """Release the engine. The next recognition re-initializes it."""
        with self._init_lock:
            engine, self._engine = self._engine, None
        if engine is None:
            return

        lock = nullcontext() if engine.thread_safe else self._recognize_lock
        with lock:
            engine.terminate()
        logger.info("Recognition engine released")
