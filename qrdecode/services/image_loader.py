"""
Image Loader

Turns the base64 text handed to the decoder into an RGB(A) PixelBuffer:
1. Strips an optional data URI prefix and validates the base64 alphabet
2. Decodes the container (PNG, JPG, ...) with OpenCV
3. Normalises channel order and bit depth
"""

import base64
import binascii
import logging
import re
from typing import Optional

import cv2
import numpy as np

from qrdecode.config import settings
from qrdecode.exceptions import InputError
from qrdecode.models import PixelBuffer

logger = logging.getLogger(__name__)

_DATA_URI_PREFIX = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def decode_base64(text: str) -> bytes:
    """
    Decodes base64 text into raw bytes.

    Args:
        text: Base64 string, optionally prefixed with "data:image/png;base64,".
            Whitespace anywhere in the string is ignored.

    Returns:
        Raw container bytes

    Raises:
        InputError: if the text is not valid base64 or decodes to nothing
    """
    if not isinstance(text, str):
        raise InputError(f"Expected base64 text, got {type(text).__name__}")

    payload = _DATA_URI_PREFIX.sub("", text.strip(), count=1)
    # Line-wrapped base64 (76 columns, CRLF) is common
    payload = _WHITESPACE.sub("", payload)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputError(f"Invalid base64 image data: {str(e)}") from e

    if not data:
        raise InputError("Image data is empty")
    return data


def _to_rgb(img: np.ndarray) -> np.ndarray:
    # 16-bit PNGs come back as uint16
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise InputError(f"Unsupported sample type: {img.dtype}")

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2RGB)
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise InputError(f"Unsupported channel count: {channels}")


def load_image(image_bytes: bytes, max_pixels: Optional[int] = None) -> PixelBuffer:
    """
    Decodes container bytes into a PixelBuffer.

    Raises:
        InputError: if the bytes are not a readable image, or it has no pixels
    """
    if not image_bytes:
        raise InputError("Image data is empty")
    if max_pixels is None:
        max_pixels = settings.qr_max_image_pixels

    # Convert bytes → numpy array → CV2 image
    nparr = np.frombuffer(image_bytes, np.uint8)
    try:
        img = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise InputError(f"Failed to decode image: {str(e)}") from e

    if img is None:
        raise InputError("Failed to decode image: unsupported or corrupt container")

    height, width = img.shape[:2]
    if width == 0 or height == 0:
        raise InputError(f"Image has no pixels: {width}x{height}")
    if width * height > max_pixels:
        raise InputError(f"Image too large: {width}x{height} exceeds {max_pixels} pixels")

    logger.info(f"Image size: {width}x{height}")
    return PixelBuffer(width=width, height=height, pixels=_to_rgb(img))
