"""Image transform primitives used before recognition.

Provides fit-inside resizing, grayscale conversion, min-max contrast
normalization and unsharp-mask sharpening on numpy image arrays.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from license_ocr.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransformOps:
    """Which transforms to apply, in the fixed order resize → grayscale →
    normalize → sharpen.

    ``resize`` holds the ``(max_width, max_height)`` box, or ``None`` to
    keep the source size.
    """

    resize: tuple[int, int] | None = (2000, 2000)
    allow_enlarge: bool = True
    grayscale: bool = True
    normalize: bool = True
    sharpen: bool = True
    sharpen_sigma: float = 1.0
    sharpen_amount: float = 0.5


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert an RGB or RGBA image to a single channel.

    Args:
        image: Input image (RGB, RGBA or grayscale).

    Returns:
        Grayscale image.
    """
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)


def resize_to_fit(
    image: np.ndarray,
    max_width: int,
    max_height: int,
    allow_enlarge: bool = True,
) -> np.ndarray:
    """Scale an image to fit inside a box, preserving aspect ratio.

    Small images are enlarged up to the box when ``allow_enlarge`` is set,
    so text reaches a size Tesseract reads well. Nothing is cropped.

    Args:
        image: Input image.
        max_width: Width of the bounding box in pixels.
        max_height: Height of the bounding box in pixels.
        allow_enlarge: Whether images smaller than the box are scaled up.

    Returns:
        Resized image, or the input itself when no scaling is needed.
    """
    height, width = image.shape[:2]
    if width == 0 or height == 0:
        raise ValueError("Cannot resize an empty image")

    scale = min(max_width / width, max_height / height)
    if not allow_enlarge:
        scale = min(scale, 1.0)
    if scale == 1.0:
        return image

    new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
    interpolation = cv2.INTER_CUBIC if scale > 1.0 else cv2.INTER_AREA
    result = cv2.resize(image, new_size, interpolation=interpolation)
    logger.debug("Resized %dx%d -> %dx%d", width, height, *new_size)
    return result


def normalize_contrast(image: np.ndarray) -> np.ndarray:
    """Stretch pixel intensities to the full 0-255 range.

    Args:
        image: Grayscale image.

    Returns:
        Normalized image. Flat images are returned unchanged.
    """
    if image.min() == image.max():
        return image
    return cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX)


def sharpen(image: np.ndarray, sigma: float = 1.0, amount: float = 0.5) -> np.ndarray:
    """Sharpen an image with an unsharp mask.

    Args:
        image: Input image.
        sigma: Standard deviation of the Gaussian blur.
        amount: Weight of the high-frequency detail added back.

    Returns:
        Sharpened image with the same shape and dtype.
    """
    blurred = cv2.GaussianBlur(image, (0, 0), sigma)
    return cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)


def transform(image: np.ndarray, ops: TransformOps) -> np.ndarray:
    """Apply the requested transforms to an image.

    Args:
        image: Input image as a numpy array.
        ops: Transform selection and parameters.

    Returns:
        Transformed image.
    """
    result = image
    if ops.resize is not None:
        result = resize_to_fit(result, *ops.resize, allow_enlarge=ops.allow_enlarge)
    if ops.grayscale:
        result = to_grayscale(result)
    if ops.normalize:
        result = normalize_contrast(result)
    if ops.sharpen:
        result = sharpen(result, sigma=ops.sharpen_sigma, amount=ops.sharpen_amount)
    return result
