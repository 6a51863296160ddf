from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PKG_DIR = Path(__file__).resolve().parent
ENV_PATH = PKG_DIR / ".env"


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"], validation_alias="CORS_ORIGINS"
    )

    # Ranking
    default_limit: int = Field(3, validation_alias="RANK_DEFAULT_LIMIT")
    max_limit: int = Field(50, validation_alias="RANK_MAX_LIMIT")
    max_catalog_size: int = Field(
        5000, validation_alias="RANK_MAX_CATALOG_SIZE"
    )

    # Catalog
    strict_catalog: bool = Field(
        False, validation_alias="RANK_STRICT_CATALOG"
    )

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
