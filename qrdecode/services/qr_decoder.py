"""
QR Decoder

Single entry point for decoding a QR code out of an image:
1. Decodes base64 text (or takes raw bytes) into a PixelBuffer
2. Converts pixels to a luminance plane
3. Hands the plane to the orchestrator, which tries each binarizer in turn

Always returns a DecodeOutcome: found, not_found or input_error.
"""

import logging
from typing import Optional

from qrdecode.config import settings
from qrdecode.exceptions import InputError
from qrdecode.schemas import DecodeHints, DecodeOutcome
from qrdecode.services.decode_orchestrator import DecodeObserver, DecodeOrchestrator
from qrdecode.services.image_loader import decode_base64, load_image
from qrdecode.services.luminance import to_luminance
from qrdecode.services.symbol_engine import SymbolEngine, build_engine

logger = logging.getLogger(__name__)

# Resolved once so a bad engine setting or a missing zbar library fails at startup
_default_engine = build_engine(settings.qr_engine)


def _default_hints() -> DecodeHints:
    return DecodeHints(try_harder=settings.qr_try_harder)


def decode_qr_image(
    image_bytes: bytes,
    *,
    engine: Optional[SymbolEngine] = None,
    observer: Optional[DecodeObserver] = None,
    hints: Optional[DecodeHints] = None,
) -> DecodeOutcome:
    """
    Decodes a QR code from raw image bytes (PNG, JPG, etc.).

    Args:
        image_bytes: Encoded image container
        engine: Symbol engine, defaults to the configured one
        observer: Receives strategy/outcome events, defaults to logging
        hints: Decode hints, defaults to QR only with try_harder from settings

    Returns:
        DecodeOutcome
    """
    try:
        buffer = load_image(image_bytes)
    except InputError as e:
        logger.warning(f"Error loading QR image: {str(e)}")
        return DecodeOutcome.input_error(str(e))

    plane = to_luminance(buffer)
    orchestrator = DecodeOrchestrator(
        engine=engine or _default_engine,
        observer=observer,
    )
    return orchestrator.decode(plane, hints or _default_hints())


def decode_qr_from_base64(
    qr_base64: str,
    *,
    engine: Optional[SymbolEngine] = None,
    observer: Optional[DecodeObserver] = None,
    hints: Optional[DecodeHints] = None,
) -> DecodeOutcome:
    """
    Decodes a QR code from a base64 encoded image string.

    Args:
        qr_base64: Base64 image, a "data:image/png;base64," prefix is accepted

    Returns:
        DecodeOutcome; malformed base64 is an input_error, never not_found
    """
    try:
        image_bytes = decode_base64(qr_base64)
    except InputError as e:
        logger.warning(f"Error decoding QR image data: {str(e)}")
        return DecodeOutcome.input_error(str(e))

    return decode_qr_image(image_bytes, engine=engine, observer=observer, hints=hints)
