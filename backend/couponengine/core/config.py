from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/coupons.db"

    # Coupon codes are stored uppercase and matched case-insensitively
    COUPON_CODE_MAX_LENGTH: int = 50


settings = Settings()
