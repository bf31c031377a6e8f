"""Shared test fixtures for the license OCR test suite."""

import io
import threading
import time
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from license_ocr.ocr.tesseract_engine import RecognitionResult

LICENSE_TEXT = """
营业执照

名称：深圳市科技创新有限公司
类型：有限责任公司
住所：深圳市南山区科技园A座2201室
法定代表人：张总
注册资本：壹千万元整
成立日期：2020年01月15日
营业期限：2020年01月15日至2050年01月14日
统一社会信用代码：91440300MA5XXXXX01

经营范围：技术开发、技术咨询、技术服务；软件开发；信息系统集成服务。
"""

SYSTEM_RECORD = {
    "company_name": "深圳市科技创新有限公司",
    "credit_code": "91440300MA5XXXXX01",
    "legal_person": "张总",
    "address": "深圳市南山区科技园A座2201室",
    "registered_capital": "壹千万元整",
}


class FakeEngine:
    """In-memory recognition engine recording how it is driven."""

    def __init__(
        self,
        result: RecognitionResult | None = None,
        init_error: Exception | None = None,
        recognize_error: Exception | None = None,
        thread_safe: bool = True,
        delay: float = 0.0,
    ) -> None:
        self.result = result or RecognitionResult(text="", confidence=0.0)
        self.init_error = init_error
        self.recognize_error = recognize_error
        self.thread_safe = thread_safe
        self.delay = delay
        self.init_calls = 0
        self.languages: str | None = None
        self.params: dict[str, object] = {}
        self.timeouts: list[float | None] = []
        self.images: list[bytes] = []
        self.terminated = False
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def initialize(self, languages: str) -> None:
        self.init_calls += 1
        time.sleep(self.delay)
        if self.init_error is not None:
            raise self.init_error
        self.languages = languages

    def set_parameters(self, params: dict[str, object]) -> None:
        self.params.update(params)

    def recognize(
        self, image: bytes, timeout: float | None = None
    ) -> RecognitionResult:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            time.sleep(self.delay)
            self.images.append(image)
            self.timeouts.append(timeout)
            if self.recognize_error is not None:
                raise self.recognize_error
            return self.result
        finally:
            with self._lock:
                self.active -= 1

    def terminate(self) -> None:
        self.terminated = True


@pytest.fixture
def engine_factory() -> Callable[..., Callable[[], FakeEngine]]:
    """Return a builder producing engine factories that record created engines."""

    def build(**kwargs: object) -> Callable[[], FakeEngine]:
        created: list[FakeEngine] = []

        def factory() -> FakeEngine:
            engine = FakeEngine(**kwargs)  # type: ignore[arg-type]
            created.append(engine)
            return engine

        factory.created = created  # type: ignore[attr-defined]
        return factory

    return build


@pytest.fixture
def license_text() -> str:
    return LICENSE_TEXT


@pytest.fixture
def system_record() -> dict[str, str]:
    return dict(SYSTEM_RECORD)


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.full((200, 300), 100, dtype=np.uint8)
    image[50:150, 50:250] = 180
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (220, 200, 180)
    return image


@pytest.fixture
def png_bytes(sample_color_image: np.ndarray) -> bytes:
    """Encode the color test image as PNG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(sample_color_image).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
