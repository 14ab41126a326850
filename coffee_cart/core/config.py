from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # Backend (Spring 서버, 프록시 없이 직접 호출)
    API_BASE_URL: str = "http://localhost:8080"
    API_TIMEOUT_S: float = 10.0

    # 파일명만 내려오는 이미지를 정적 경로로 바꿀 때 쓰는 prefix
    IMAGE_PATH_PREFIX: str = "/images/"

    # localStorage 대용 JSON 파일 (cartId, adminToken)
    STORAGE_PATH: str = "~/.coffee_cart/storage.json"

    # lazy: 첫 담기에서 카트 생성 / eager: 시작 시 바로 생성
    CART_CREATION_MODE: Literal["lazy", "eager"] = "lazy"

    LOG_LEVEL: str = "INFO"

settings = Settings()
