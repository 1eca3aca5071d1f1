from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel


class BarcodeFormat(str, Enum):
    QR_CODE = "QR_CODE"


class DecodeHints(BaseModel):
    """Options handed unchanged to the symbol engine on every attempt."""
    try_harder: bool = True
    allowed_formats: FrozenSet[BarcodeFormat] = frozenset({BarcodeFormat.QR_CODE})

    class Config:
        frozen = True


class EngineStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAULT = "fault"


class EngineResult(BaseModel):
    status: EngineStatus
    text: Optional[str] = None
    reason: Optional[str] = None

    class Config:
        frozen = True

    @classmethod
    def found(cls, text: str) -> "EngineResult":
        return cls(status=EngineStatus.FOUND, text=text)

    @classmethod
    def not_found(cls, reason: Optional[str] = None) -> "EngineResult":
        return cls(status=EngineStatus.NOT_FOUND, reason=reason)

    @classmethod
    def fault(cls, reason: str) -> "EngineResult":
        return cls(status=EngineStatus.FAULT, reason=reason)


class DecodeStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    INPUT_ERROR = "input_error"


class DecodeOutcome(BaseModel):
    """
    Result of one decode call. Exactly one of three shapes:
    - found: `text` holds the payload, `strategy` names the binarizer that produced it
    - not_found: every strategy was tried without a symbol
    - input_error: the image never made it past loading, `reason` says why
    """
    status: DecodeStatus
    text: Optional[str] = None
    reason: Optional[str] = None
    strategy: Optional[str] = None

    class Config:
        frozen = True

    @classmethod
    def found(cls, text: str, strategy: str) -> "DecodeOutcome":
        return cls(status=DecodeStatus.FOUND, text=text, strategy=strategy)

    @classmethod
    def not_found(cls) -> "DecodeOutcome":
        return cls(status=DecodeStatus.NOT_FOUND, reason="No QR code found in image.")

    @classmethod
    def input_error(cls, reason: str) -> "DecodeOutcome":
        return cls(status=DecodeStatus.INPUT_ERROR, reason=reason)

    @property
    def is_found(self) -> bool:
        return self.status == DecodeStatus.FOUND


class QRDecodeRequest(BaseModel):
    image: str


class QRDecodeResponse(BaseModel):
    status: DecodeStatus
    text: Optional[str] = None
    reason: Optional[str] = None
    strategy: Optional[str] = None
