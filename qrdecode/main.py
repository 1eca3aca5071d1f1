import logging

from fastapi import FastAPI

from qrdecode.config import settings
from qrdecode.routers.qr_decoder import router as qr_decoder_router

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(
    title="QR Decode API",
    version="0.1.0",
    description="Decode QR codes from base64 encoded images",
)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


# Include the routers
app.include_router(qr_decoder_router)
