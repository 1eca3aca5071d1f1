from .schemas import DecodeHints, DecodeOutcome, DecodeStatus
from .services.qr_decoder import decode_qr_from_base64, decode_qr_image
