"""Runtime configuration read from the environment.

Values come from process environment variables, with a ``.env`` file in the
working directory loaded first when present.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Service settings."""

    database_url: str = "postgresql://localhost:5432/guildroster"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Member listing cache
    cache_ttl_seconds: float = 300.0

    # asyncpg pool
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_command_timeout: float = 30.0

    # Profile pictures (S3)
    avatar_bucket: str | None = None
    avatar_prefix: str = "avatars/"
    aws_region: str = "us-east-1"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            cors_origins=_env_list("CORS_ORIGINS", "*"),
            cache_ttl_seconds=float(
                os.getenv("CACHE_TTL_SECONDS", str(cls.cache_ttl_seconds))
            ),
            db_pool_min_size=int(os.getenv("DB_POOL_MIN_SIZE", str(cls.db_pool_min_size))),
            db_pool_max_size=int(os.getenv("DB_POOL_MAX_SIZE", str(cls.db_pool_max_size))),
            db_command_timeout=float(
                os.getenv("DB_COMMAND_TIMEOUT", str(cls.db_command_timeout))
            ),
            avatar_bucket=os.getenv("AVATAR_BUCKET") or None,
            avatar_prefix=os.getenv("AVATAR_PREFIX", cls.avatar_prefix),
            aws_region=os.getenv("AWS_REGION", cls.aws_region),
        )
