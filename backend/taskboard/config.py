from __future__ import annotations

import os
from dataclasses import dataclass, field

DEV_JWT_SECRET = "secret_for_dev"
TOKEN_TTL_SECONDS = 8 * 60 * 60  # 8h


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(p.strip() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    jwt_secret: str = DEV_JWT_SECRET
    token_ttl_seconds: int = TOKEN_TTL_SECONDS
    pbkdf2_iters: int = 200_000
    host: str = "0.0.0.0"
    port: int = 4000
    cors_origins: tuple[str, ...] = field(default=("*",))
    log_level: str = "INFO"
    log_format: str = "console"  # console|json
    db_init_retries: int = 30

    @property
    def uses_dev_secret(self) -> bool:
        return self.jwt_secret == DEV_JWT_SECRET

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.environ.get("DATABASE_URL") or None,
            # Insecure fallback for local dev only; set JWT_SECRET in any deployment.
            jwt_secret=os.environ.get("JWT_SECRET") or DEV_JWT_SECRET,
            pbkdf2_iters=int(os.environ.get("PBKDF2_ITERS", "200000")),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "4000")),
            cors_origins=_split_csv(os.environ.get("CORS_ORIGINS", "*")) or ("*",),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_format=os.environ.get("LOG_FORMAT", "console").lower(),
            db_init_retries=int(os.environ.get("DB_INIT_RETRIES", "30")),
        )
