"""
Symbol engine adapters

Each adapter hands an already binarized matrix to a barcode library and
reports an EngineResult. Library exceptions are turned into fault results
here, so callers only ever branch on a value.
"""

import logging
import operator
from functools import reduce
from typing import Protocol

import zxingcpp

from qrdecode.models import BinaryMatrix
from qrdecode.schemas import BarcodeFormat, DecodeHints, EngineResult

logger = logging.getLogger(__name__)


class SymbolEngine(Protocol):
    name: str

    def decode_symbol(self, matrix: BinaryMatrix, hints: DecodeHints) -> EngineResult:
        ...


class ZxingEngine:
    name = "zxing"

    _FORMATS = {
        BarcodeFormat.QR_CODE: zxingcpp.BarcodeFormat.QRCode,
    }

    def _formats(self, hints: DecodeHints):
        return reduce(operator.or_, (self._FORMATS[fmt] for fmt in sorted(hints.allowed_formats)))

    def decode_symbol(self, matrix: BinaryMatrix, hints: DecodeHints) -> EngineResult:
        try:
            results = zxingcpp.read_barcodes(
                matrix.to_image(),
                formats=self._formats(hints),
                try_rotate=hints.try_harder,
                try_downscale=hints.try_harder,
                # Matrix is already black (0) / white (255)
                binarizer=zxingcpp.Binarizer.BoolCast,
            )
        except Exception as e:
            return EngineResult.fault(f"{type(e).__name__}: {str(e)}")

        if not results:
            return EngineResult.not_found()
        return EngineResult.found(results[0].text)


class ZbarEngine:
    """
    zbar has no exhaustive-search switch, so `try_harder` is ignored.
    pyzbar needs the system zbar library, so it is only imported when this
    engine is selected.
    """
    name = "zbar"

    def __init__(self):
        from pyzbar.pyzbar import ZBarSymbol
        from pyzbar.pyzbar import decode as pyzbar_decode

        self._decode = pyzbar_decode
        self._symbols = {
            BarcodeFormat.QR_CODE: ZBarSymbol.QRCODE,
        }

    def decode_symbol(self, matrix: BinaryMatrix, hints: DecodeHints) -> EngineResult:
        symbols = [self._symbols[fmt] for fmt in hints.allowed_formats]
        try:
            decoded_objects = self._decode(matrix.to_image(), symbols=symbols)
        except Exception as e:
            return EngineResult.fault(f"{type(e).__name__}: {str(e)}")

        if not decoded_objects:
            return EngineResult.not_found()

        # Return first QR code found
        return EngineResult.found(decoded_objects[0].data.decode("utf-8", errors="replace"))


ENGINES = {
    ZxingEngine.name: ZxingEngine,
    ZbarEngine.name: ZbarEngine,
}


def build_engine(name: str) -> SymbolEngine:
    try:
        engine_cls = ENGINES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown QR engine '{name}', expected one of: {', '.join(sorted(ENGINES))}")
    logger.debug(f"Using {engine_cls.name} symbol engine")
    return engine_cls()
