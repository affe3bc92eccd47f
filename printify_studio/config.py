from pydantic import field_validator
from pydantic_settings import BaseSettings

IMGBB_PLACEHOLDER = "your-imgbb-api-key"


class Settings(BaseSettings):
    printify_api_key: str
    printify_shop_id: str | None = None
    replicate_api_token: str | None = None
    imgbb_api_key: str | None = None  # Ultra モデルでは必須（ImgBB経由でアップロード）
    port: int = 8080
    transport: str = "streamable-http"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("imgbb_api_key", "replicate_api_token", "printify_shop_id")
    @classmethod
    def _blank_as_unset(cls, value: str | None) -> str | None:
        if value is None or not value.strip() or value == IMGBB_PLACEHOLDER:
            return None
        return value
