"""Project configuration loaded from environment variables."""

from typing import Annotated, Any, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_CACHE_TTL_SECONDS = 3600


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(case_sensitive=False)

    veriphone_api_key: Optional[str] = None
    veriphone_base_url: str = "https://api.veriphone.io/v2/verify"
    veriphone_timeout_seconds: float = 10.0
    default_region: str = "US"
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    realtime_cache_path: str = "cache/lookups"
    use_redis: bool = False
    redis_url: str = "redis://127.0.0.1:6379/0"
    database_url: str = "sqlite:///lookups.sqlite"
    pg_host: str = ""
    pg_port: str = "5432"
    pg_db: str = "phonelookup"
    pg_user: str = "postgres"
    pg_password: str = "postgres"
    posts_dir: str = "sample-posts"
    cors_origins: Annotated[List[str], NoDecode] = ["*"]
    metrics_port: int = 0
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    log_file: str | None = None
    log_json: bool = False
    log_max_bytes: int = 1048576
    log_backup_count: int = 3
    log_remote_host: str | None = None
    log_remote_port: int = 0

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_csv(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return list(v) if v else []

    @field_validator("cache_ttl_seconds", mode="before")
    @classmethod
    def _parse_ttl(cls, v: Any) -> int:
        if v is None or v == "":
            return DEFAULT_CACHE_TTL_SECONDS
        try:
            return int(v)
        except (TypeError, ValueError):
            return DEFAULT_CACHE_TTL_SECONDS

    @field_validator("veriphone_api_key", mode="before")
    @classmethod
    def _blank_key_is_missing(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("default_region")
    @classmethod
    def _upper_region(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def pg_dsn(self) -> str:
        return (
            f"postgresql+psycopg2://{self.pg_user}:{self.pg_password}"
            f"@{self.pg_host}:{self.pg_port}/{self.pg_db}"
        )

    @property
    def store_url(self) -> str:
        """SQLAlchemy URL of the durable lookup store."""
        return self.pg_dsn if self.pg_host else self.database_url


try:
    settings = Settings()
except Exception as exc:  # ValidationError or others
    raise RuntimeError("Invalid phone lookup configuration") from exc
