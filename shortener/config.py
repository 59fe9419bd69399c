from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shortener.codes import MAX_CODE_LENGTH


class Settings(BaseSettings):
    """Service settings, read from SHORTENER_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="SHORTENER_", env_file=".env", extra="ignore")

    database_url: str = Field(default="sqlite:///./data/links.db", description="SQLAlchemy database URL")
    base_url: str = Field(default="http://localhost:5000", description="Prefix for generated short URLs")
    host: str = "0.0.0.0"
    port: int = 5000

    code_length: int = Field(default=7, ge=1, le=MAX_CODE_LENGTH)
    max_create_attempts: int = Field(default=5, ge=1)

    pool_size: int = Field(default=10, ge=1)
    max_overflow: int = Field(default=0, ge=0)
    pool_timeout: float = Field(default=5.0, gt=0, description="Seconds to wait for a free connection")

    log_level: str = "INFO"
