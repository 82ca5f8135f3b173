from pathlib import Path
from typing import List, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Redemption'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production
    LOG_TIMEZONE: str = 'UTC'

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    ALGORITHM: str = 'HS256'
    AUTH_COOKIE_NAME: str = 'redemption_auth'

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL (ticket inventory + purchase ledger + audit log)
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticket_redemption'
    POSTGRES_PORT: int = 5432
    POSTGRES_REPLICA_SERVER: Optional[str] = None
    POSTGRES_REPLICA_PORT: Optional[int] = None

    # Full URL override (e.g. sqlite+aiosqlite:///./redemption.db for local runs)
    DATABASE_URL: Optional[str] = None

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    @property
    def DATABASE_READ_URL_ASYNC(self) -> str:
        if self.DATABASE_URL or not self.POSTGRES_REPLICA_SERVER:
            return self.DATABASE_URL_ASYNC
        password = self.POSTGRES_PASSWORD.get_secret_value()
        port = self.POSTGRES_REPLICA_PORT or self.POSTGRES_PORT
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_REPLICA_SERVER}:{port}/{self.POSTGRES_DB}'

    # Connection pool
    DB_POOL_SIZE_WRITE: int = 10
    DB_POOL_SIZE_READ: int = 20
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    # Evidence photo storage
    MEDIA_DIR: Optional[str] = None

    # Check-in client (device side)
    CHECK_IN_SERVER_URL: str = 'http://localhost:8000'
    CHECK_IN_ACCESS_TOKEN: SecretStr = SecretStr('')
    CHECK_IN_LOCAL_DB_PATH: Optional[str] = None
    HTTP_TIMEOUT_SECONDS: float = 10.0
    SYNC_INTERVAL_SECONDS: float = 300.0
    SYNC_RETRY_DELAY_SECONDS: float = 30.0
    SYNC_MAX_RETRIES: int = 3
    CONNECTIVITY_PROBE_SECONDS: float = 15.0


settings = Settings()  # type: ignore
