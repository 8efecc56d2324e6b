import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="STREAMPIX_", extra="ignore")

    pix_key: str = ""
    pix_key_type: str = ""
    pix_merchant_name: str = "Streams Control"
    pix_merchant_city: str = "Recife"

    qrcode_box_size: int = 10
    qrcode_border: int = 2

    log_level: str = "INFO"
    log_json: bool = False

    def get_pix_key(self) -> str:
        if not self.pix_key:
            logger.warning(
                "STREAMPIX_PIX_KEY is not set, charges need an explicit PIX key. "
                "Set STREAMPIX_PIX_KEY in your environment or .env file."
            )
        return self.pix_key


settings = Settings()
