from fastapi import APIRouter, HTTPException

from qrdecode.schemas import DecodeStatus, QRDecodeRequest, QRDecodeResponse
from qrdecode.services.qr_decoder import decode_qr_from_base64

router = APIRouter(
    prefix="/api/qr",
    tags=["qr"]
)


@router.post("/decode", response_model=QRDecodeResponse)
def decode_qr(payload: QRDecodeRequest):
    """
    Decode a QR code from a base64 encoded image (PNG, JPG, ...).
    Returns 400 if the image itself cannot be read.
    """
    outcome = decode_qr_from_base64(payload.image)
    if outcome.status == DecodeStatus.INPUT_ERROR:
        raise HTTPException(status_code=400, detail=outcome.reason)
    return outcome
