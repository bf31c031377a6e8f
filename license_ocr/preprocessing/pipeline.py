"""Best-effort image preprocessing for license scans.

Decodes the uploaded image, normalizes size and contrast for
recognition, and re-encodes it as PNG. Any failure falls back to the
original bytes so recognition always receives an image.
"""

import io
from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image

from license_ocr.exceptions import PreprocessError
from license_ocr.utils.config import PreprocessingConfig
from license_ocr.utils.logger import get_logger

from .transforms import TransformOps, to_grayscale, transform

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input image (RGB or grayscale).

    Returns:
        Sharpness score (higher means sharper).
    """
    return float(cv2.Laplacian(to_grayscale(image), cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate image contrast as the standard deviation of pixel intensities."""
    return float(to_grayscale(image).std())


_HIGH_DEPTH_MODES = ("I", "F")


def _scale_to_uint8(array: np.ndarray) -> np.ndarray:
    """Min-max scale a 16-bit, 32-bit or float grayscale array to ``uint8``."""
    array = array.astype(np.float32)
    if array.min() == array.max():
        return np.clip(array, 0, 255).astype(np.uint8)
    return cv2.normalize(array, None, 0, 255, cv2.NORM_MINMAX, dtype=cv2.CV_8U)


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes into an RGB or grayscale numpy array.

    High bit-depth grayscale images (``I;16``, ``I``, ``F``) are scaled to
    8 bits by their own intensity range rather than clipped.

    Raises:
        PreprocessError: If the bytes are not a readable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode.split(";")[0] in _HIGH_DEPTH_MODES:
                return _scale_to_uint8(np.array(img))
            if img.mode not in ("L", "RGB"):
                img = img.convert("RGB")
            return np.array(img)
    except (OSError, ValueError, cv2.error, Image.DecompressionBombError) as exc:
        raise PreprocessError(f"Cannot decode image: {exc}") from exc


def encode_png(image: np.ndarray) -> bytes:
    """Encode a grayscale or RGB array as PNG bytes.

    Raises:
        PreprocessError: If OpenCV fails to encode the array.
    """
    if image.ndim == 3:
        image = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
    ok, buffer = cv2.imencode(".png", image)
    if not ok:
        raise PreprocessError("PNG encoding failed")
    return buffer.tobytes()


class ImagePreprocessor:
    """Normalizes license photos into a form favorable to recognition.

    Args:
        config: Preprocessing configuration controlling which steps to apply.
    """

    def __init__(self, config: PreprocessingConfig | None = None) -> None:
        self.config = config or PreprocessingConfig()
        self.ops = TransformOps(
            resize=(self.config.max_width, self.config.max_height),
            allow_enlarge=self.config.allow_enlarge,
            grayscale=self.config.grayscale_enabled,
            normalize=self.config.normalize_enabled,
            sharpen=self.config.sharpen_enabled,
            sharpen_sigma=self.config.sharpen_sigma,
            sharpen_amount=self.config.sharpen_amount,
        )

    def process(self, image: np.ndarray) -> tuple[np.ndarray, QualityMetrics]:
        """Run the transform chain on a decoded image.

        Args:
            image: Input image array.

        Returns:
            Tuple of (processed_image, quality_metrics).

        Raises:
            PreprocessError: If any transform fails.
        """
        try:
            metrics = QualityMetrics(
                sharpness_before=calculate_sharpness(image),
                contrast_before=calculate_contrast(image),
                sharpness_after=0.0,
                contrast_after=0.0,
            )
            result = transform(image, self.ops)
            metrics.sharpness_after = calculate_sharpness(result)
            metrics.contrast_after = calculate_contrast(result)
        except (cv2.error, ValueError) as exc:
            raise PreprocessError(f"Image transform failed: {exc}") from exc

        logger.info(
            "Preprocessing complete: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics

    def preprocess(self, image: bytes) -> bytes:
        """Preprocess raw image bytes, falling back to the input on failure.

        Args:
            image: Raw image bytes (PNG, JPEG, ...).

        Returns:
            PNG bytes of the processed image, or ``image`` unchanged if
            decoding, transforming or encoding failed.
        """
        try:
            processed, _ = self.process(decode_image(image))
            return encode_png(processed)
        except PreprocessError as exc:
            logger.warning("Preprocessing failed, using original image: %s", exc)
            return image
