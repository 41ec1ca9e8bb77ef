from typing import Optional

from databases import Database
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BITMAGNET_SORT_FIELDS = (
    "relevance",
    "published_at",
    "updated_at",
    "size",
    "files_count",
    "seeders",
    "leechers",
    "name",
    "info_hash",
)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    ADDON_ID: Optional[str] = "org.stremio.bitmagnet"
    ADDON_NAME: Optional[str] = "FW:Bitmagnet"
    FASTAPI_HOST: Optional[str] = "0.0.0.0"
    FASTAPI_PORT: Optional[int] = 7000
    FASTAPI_WORKERS: Optional[int] = 1
    LOG_LEVEL: Optional[str] = "DEBUG"
    DATABASE_TYPE: Optional[str] = "sqlite"
    DATABASE_URL: Optional[str] = "username:password@hostname:port"
    DATABASE_PATH: Optional[str] = "data/nebula.db"
    STREAM_CACHE_TTL: Optional[int] = 3600  # 1 hour
    STREAM_CACHE_EMPTY_TTL: Optional[int] = 300  # 5 minutes
    STREAM_CACHE_CLEANUP_INTERVAL: Optional[int] = 600
    BITMAGNET_URL: Optional[str] = None
    BITMAGNET_TIMEOUT: Optional[int] = 30
    BITMAGNET_SEARCH_LIMIT: Optional[int] = 30
    BITMAGNET_SORT_FIELD: Optional[str] = "seeders"
    BITMAGNET_SORT_DESCENDING: Optional[bool] = True
    TMDB_API_KEY: Optional[str] = None
    METADATA_TIMEOUT: Optional[int] = 10
    PREMIUMIZE_API_KEY: Optional[str] = None
    DEBRID_TIMEOUT: Optional[int] = 15
    TRACKERS_URL: Optional[str] = (
        "https://raw.githubusercontent.com/ngosang/trackerslist/refs/heads/master/trackers_best.txt"
    )
    TRACKERS_TIMEOUT: Optional[int] = 5
    HTTP_CLIENT_LIMIT: Optional[int] = 100
    HTTP_CLIENT_LIMIT_PER_HOST: Optional[int] = 20
    HTTP_CLIENT_TTL_DNS_CACHE: Optional[int] = 300
    HTTP_CLIENT_KEEPALIVE_TIMEOUT: Optional[int] = 15
    HTTP_CLIENT_TIMEOUT_TOTAL: Optional[int] = 60

    @field_validator("BITMAGNET_URL", "TRACKERS_URL")
    def remove_trailing_slash(cls, v):
        if v and v.endswith("/"):
            return v[:-1]
        return v

    @field_validator("BITMAGNET_SORT_FIELD")
    def normalize_sort_field(cls, v):
        if v is None or v.lower() not in BITMAGNET_SORT_FIELDS:
            return "seeders"
        return v.lower()

    @field_validator("TMDB_API_KEY", "PREMIUMIZE_API_KEY")
    def empty_key_is_none(cls, v):
        if v is not None and v.strip() == "":
            return None
        return v


settings = AppSettings()


class ConfigModel(BaseModel):
    bitmagnetUrl: Optional[str] = None
    tmdbApiKey: Optional[str] = None
    premiumizeApiKey: Optional[str] = None
    bitmagnetTimeout: Optional[int] = 30
    bitmagnetSortField: Optional[str] = "seeders"
    bitmagnetSortDescending: Optional[bool] = True
    bitmagnetSearchLimit: Optional[int] = 30

    @field_validator("bitmagnetUrl")
    def check_bitmagnet_url(cls, v):
        if v is None:
            return None
        v = v.strip()
        if not v.startswith("http"):
            raise ValueError("Bitmagnet URL must start with http:// or https://")
        if v.endswith("/"):
            return v[:-1]
        return v

    @field_validator("tmdbApiKey", "premiumizeApiKey")
    def empty_key_is_none(cls, v):
        if v is not None and v.strip() == "":
            return None
        return v

    @field_validator("bitmagnetTimeout")
    def check_timeout(cls, v):
        if v is None or v < 5:
            return 30
        return v

    @field_validator("bitmagnetSearchLimit")
    def check_search_limit(cls, v):
        if v is None or v < 1 or v > 100:
            return 30
        return v

    @field_validator("bitmagnetSortField")
    def check_sort_field(cls, v):
        if v is None:
            return "seeders"
        # accept the enum-style labels shown on the configuration form
        v = v.strip().lower().replace(" ", "_")
        if v == "files":
            v = "files_count"
        if v not in BITMAGNET_SORT_FIELDS:
            return "seeders"
        return v


default_config = ConfigModel(
    bitmagnetUrl=settings.BITMAGNET_URL,
    tmdbApiKey=settings.TMDB_API_KEY,
    premiumizeApiKey=settings.PREMIUMIZE_API_KEY,
    bitmagnetTimeout=settings.BITMAGNET_TIMEOUT,
    bitmagnetSortField=settings.BITMAGNET_SORT_FIELD,
    bitmagnetSortDescending=settings.BITMAGNET_SORT_DESCENDING,
    bitmagnetSearchLimit=settings.BITMAGNET_SEARCH_LIMIT,
).model_dump()

database_url = (
    settings.DATABASE_PATH if settings.DATABASE_TYPE == "sqlite" else settings.DATABASE_URL
)
database = Database(
    f"{'sqlite' if settings.DATABASE_TYPE == 'sqlite' else 'postgresql+asyncpg'}://{'/' if settings.DATABASE_TYPE == 'sqlite' else ''}{database_url}"
)
