"""
Stage 1 - Image Preprocessing

Loads the image handed over by the capture collaborator and produces a
NormalizedImage:
    - decode (file path, encoded bytes or numpy array)
    - downscale so the longest side is at most max_side
    - Gaussian blur (5x5) on a grayscale copy to reduce noise

The input is never modified and preprocessing an already normalized image
returns it unchanged.
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from backgammon_engine.errors import ImageReadError
from backgammon_engine.vision.types import NormalizedImage

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, bytearray, np.ndarray, NormalizedImage]

DEFAULT_MAX_SIDE = 1024
BLUR_KERNEL = (5, 5)


def _load(image: ImageSource) -> np.ndarray:
    """Decode the image source into a BGR array (always a fresh copy)."""
    if isinstance(image, (str, Path)):
        path = Path(image)
        if not path.exists():
            raise ImageReadError(f"Image not found: {path}")
        # imdecode handles non-ASCII paths that imread does not
        try:
            data = np.fromfile(str(path), dtype=np.uint8)
        except OSError as e:
            raise ImageReadError(f"Could not read image file {path}: {e}") from e
        decoded = cv2.imdecode(data, cv2.IMREAD_COLOR) if data.size else None
        if decoded is None:
            raise ImageReadError(f"Could not decode image file: {path}")
        return decoded

    if isinstance(image, (bytes, bytearray)):
        data = np.frombuffer(bytes(image), dtype=np.uint8)
        decoded = cv2.imdecode(data, cv2.IMREAD_COLOR) if data.size else None
        if decoded is None:
            raise ImageReadError("Could not decode image bytes")
        return decoded

    if isinstance(image, np.ndarray):
        if image.size == 0:
            raise ImageReadError("Image array is empty")
        if image.ndim == 2:
            return cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_GRAY2BGR)
        if image.ndim == 3 and image.shape[2] == 3:
            return image.astype(np.uint8, copy=True)
        if image.ndim == 3 and image.shape[2] == 4:
            return cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_BGRA2BGR)
        raise ImageReadError(f"Unsupported image array shape: {image.shape}")

    raise ImageReadError(f"Unsupported image source type: {type(image).__name__}")


def preprocess_image(image: ImageSource, max_side: int = DEFAULT_MAX_SIDE) -> NormalizedImage:
    """
    Normalize an image for the detection stages.

    Args:
        image: File path, encoded bytes, BGR/gray/BGRA array or NormalizedImage
        max_side: Longest side of the working image in pixels

    Returns:
        NormalizedImage

    Raises:
        ImageReadError: If the source cannot be read or decoded
    """
    if isinstance(image, NormalizedImage):
        return image

    source = str(image) if isinstance(image, (str, Path)) else f"<{type(image).__name__}>"
    bgr = _load(image)

    h, w = bgr.shape[:2]
    scale = 1.0
    if max(h, w) > max_side:
        scale = max_side / float(max(h, w))
        bgr = cv2.resize(bgr, (int(round(w * scale)), int(round(h * scale))), interpolation=cv2.INTER_AREA)

    gray = cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)
    gray = cv2.GaussianBlur(gray, BLUR_KERNEL, 0)

    logger.debug(f"Preprocessed {source}: {w}x{h} -> {bgr.shape[1]}x{bgr.shape[0]} (scale {scale:.3f})")

    return NormalizedImage(bgr=bgr, gray=gray, scale=scale, source=source)
