from __future__ import annotations

from sqlalchemy import create_engine


def get_engine(url: str | None):
    if not url:
        raise RuntimeError("DATABASE_URL is required")
    # sync engine; FastAPI runs the sync routes in its threadpool
    return create_engine(url, pool_pre_ping=True)
