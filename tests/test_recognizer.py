"""Tests for the shared recognition adapter."""

import threading
from collections.abc import Callable

import pytest

from license_ocr.exceptions import RecognitionError, RecognitionInitError
from license_ocr.ocr.recognizer import RecognitionAdapter
from license_ocr.ocr.tesseract_engine import BoundingBox, RecognitionResult, Token
from license_ocr.utils.config import OCRConfig


def _token(text: str, confidence: float) -> Token:
    return Token(text=text, confidence=confidence, bbox=BoundingBox(0, 0, 10, 10))


def _result() -> RecognitionResult:
    return RecognitionResult(
        text="\n  名称：深圳市科技创新有限公司  \n",
        confidence=72.5,
        tokens=(_token("名称", 91.0), _token("噪", 30.0), _token("深圳", 64.0)),
    )


class TestLifecycle:
    """Tests for lazy initialization and teardown."""

    def test_lazy_initialization(self, engine_factory: Callable) -> None:
        factory = engine_factory(result=_result())
        adapter = RecognitionAdapter(engine_factory=factory)
        assert not adapter.initialized
        assert factory.created == []

        adapter.recognize(b"img")
        assert adapter.initialized
        engine = factory.created[0]
        assert engine.languages == "chi_sim+eng"
        assert engine.params["psm"] == 6
        assert "壹" in engine.params["char_whitelist"]

    def test_engine_reused_across_calls(self, engine_factory: Callable) -> None:
        factory = engine_factory(result=_result())
        adapter = RecognitionAdapter(engine_factory=factory)
        adapter.recognize(b"a")
        adapter.recognize(b"b")
        assert len(factory.created) == 1
        assert factory.created[0].init_calls == 1

    def test_terminate_and_reinitialize(self, engine_factory: Callable) -> None:
        factory = engine_factory(result=_result())
        adapter = RecognitionAdapter(engine_factory=factory)
        adapter.recognize(b"a")
        adapter.terminate()

        assert not adapter.initialized
        assert factory.created[0].terminated

        adapter.recognize(b"b")
        assert adapter.initialized
        assert len(factory.created) == 2

    def test_terminate_without_engine_is_noop(self) -> None:
        adapter = RecognitionAdapter()
        adapter.terminate()
        assert not adapter.initialized

    def test_context_manager_terminates(self, engine_factory: Callable) -> None:
        factory = engine_factory(result=_result())
        with RecognitionAdapter(engine_factory=factory) as adapter:
            adapter.recognize(b"a")
        assert factory.created[0].terminated
        assert not adapter.initialized

    def test_concurrent_first_use_initializes_once(
        self, engine_factory: Callable
    ) -> None:
        factory = engine_factory(result=_result(), delay=0.05)
        adapter = RecognitionAdapter(engine_factory=factory)

        threads = [
            threading.Thread(target=adapter.recognize, args=(b"img",))
            for _ in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(factory.created) == 1
        assert factory.created[0].init_calls == 1
        assert len(factory.created[0].images) == 8


class TestRecognize:
    """Tests for result post-processing."""

    def test_filters_low_confidence_tokens(self, engine_factory: Callable) -> None:
        adapter = RecognitionAdapter(engine_factory=engine_factory(result=_result()))
        result = adapter.recognize(b"img")
        assert [t.text for t in result.tokens] == ["名称", "深圳"]

    def test_page_confidence_unaffected_by_filter(
        self, engine_factory: Callable
    ) -> None:
        adapter = RecognitionAdapter(engine_factory=engine_factory(result=_result()))
        assert adapter.recognize(b"img").confidence == 72.5

    def test_text_is_trimmed(self, engine_factory: Callable) -> None:
        adapter = RecognitionAdapter(engine_factory=engine_factory(result=_result()))
        assert adapter.recognize(b"img").text == "名称：深圳市科技创新有限公司"

    def test_custom_confidence_floor(self, engine_factory: Callable) -> None:
        adapter = RecognitionAdapter(
            OCRConfig(min_token_confidence=70.0),
            engine_factory=engine_factory(result=_result()),
        )
        assert [t.text for t in adapter.recognize(b"img").tokens] == ["名称"]

    def test_timeout_defaults_to_config(self, engine_factory: Callable) -> None:
        factory = engine_factory(result=_result())
        adapter = RecognitionAdapter(OCRConfig(timeout_s=12.0), engine_factory=factory)
        adapter.recognize(b"a")
        adapter.recognize(b"b", timeout=3.0)
        assert factory.created[0].timeouts == [12.0, 3.0]

    def test_process_image_preprocesses_first(
        self, engine_factory: Callable, png_bytes: bytes
    ) -> None:
        factory = engine_factory(result=_result())
        adapter = RecognitionAdapter(engine_factory=factory)
        adapter.process_image(png_bytes)
        sent = factory.created[0].images[0]
        assert sent.startswith(b"\x89PNG")
        assert sent != png_bytes

    def test_serializes_non_thread_safe_engine(
        self, engine_factory: Callable
    ) -> None:
        factory = engine_factory(result=_result(), thread_safe=False, delay=0.02)
        adapter = RecognitionAdapter(engine_factory=factory)
        adapter.recognize(b"warmup")

        threads = [
            threading.Thread(target=adapter.recognize, args=(b"img",))
            for _ in range(5)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert factory.created[0].max_active == 1


class TestErrors:
    """Tests for error reporting and engine reuse after failures."""

    def test_init_failure_wrapped(self, engine_factory: Callable) -> None:
        factory = engine_factory(init_error=RuntimeError("no chi_sim data"))
        adapter = RecognitionAdapter(engine_factory=factory)

        with pytest.raises(RecognitionInitError, match="no chi_sim data"):
            adapter.recognize(b"img")
        assert not adapter.initialized

    def test_init_error_passes_through(self, engine_factory: Callable) -> None:
        error = RecognitionInitError("Missing Tesseract language data: chi_sim")
        adapter = RecognitionAdapter(engine_factory=engine_factory(init_error=error))
        with pytest.raises(RecognitionInitError) as exc_info:
            adapter.recognize(b"img")
        assert exc_info.value is error

    def test_init_retried_after_failure(self, engine_factory: Callable) -> None:
        factory = engine_factory(init_error=RuntimeError("down"))
        adapter = RecognitionAdapter(engine_factory=factory)
        for _ in range(2):
            with pytest.raises(RecognitionInitError):
                adapter.recognize(b"img")
        assert len(factory.created) == 2

    def test_recognition_failure_wrapped(self, engine_factory: Callable) -> None:
        factory = engine_factory(
            recognize_error=RuntimeError("Tesseract process timeout")
        )
        adapter = RecognitionAdapter(engine_factory=factory)

        with pytest.raises(RecognitionError, match="timeout") as exc_info:
            adapter.recognize(b"img")
        assert not isinstance(exc_info.value, RecognitionInitError)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_engine_usable_after_failure(self, engine_factory: Callable) -> None:
        factory = engine_factory(recognize_error=RuntimeError("bad image"))
        adapter = RecognitionAdapter(engine_factory=factory)

        with pytest.raises(RecognitionError):
            adapter.recognize(b"img")

        engine = factory.created[0]
        engine.recognize_error = None
        engine.result = _result()
        assert adapter.recognize(b"img").text.startswith("名称")
        assert adapter.initialized
        assert len(factory.created) == 1
