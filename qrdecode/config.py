import logging
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Load .env file from the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Also try loading from current directory
load_dotenv()

QR_ENGINES = ("zxing", "zbar")


class Settings(BaseSettings):
    qr_engine: str = "zxing"
    qr_try_harder: bool = True
    qr_max_image_pixels: int = 40_000_000
    log_level: str = "INFO"

    @field_validator("qr_engine")
    @classmethod
    def _known_engine(cls, value: str) -> str:
        value = value.lower()
        if value not in QR_ENGINES:
            raise ValueError(f"Unknown QR engine '{value}', expected one of: {', '.join(QR_ENGINES)}")
        return value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()

logger.debug(f"QR engine configured: {settings.qr_engine} (try_harder={settings.qr_try_harder})")
