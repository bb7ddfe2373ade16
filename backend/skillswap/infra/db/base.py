"""Database base configuration."""
import os
import ssl
import sys
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool


def normalize_async_pg_url(url: str) -> str:
    """Ensure URL uses asyncpg driver; cloud often gives postgresql:// (sync)."""
    u = (url or "").strip()
    if u.startswith("postgresql://"):
        return u.replace("postgresql://", "postgresql+asyncpg://", 1)
    return u


def _ssl_context_no_verify() -> ssl.SSLContext:
    """SSL context that skips certificate verification."""
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def async_pg_connect_args(url: str) -> dict:
    """connect_args for asyncpg: asyncpg takes ssl=..., not sslmode=require.

    Set DATABASE_SSL_VERIFY=true for strict certificate verification.
    """
    qs = parse_qs(urlparse(url).query, keep_blank_values=True)
    if qs.get("sslmode") != ["require"]:
        return {}
    verify = os.environ.get("DATABASE_SSL_VERIFY", "false").strip().lower()
    if verify in ("true", "1"):
        return {"ssl": True}
    return {"ssl": _ssl_context_no_verify()}


def async_pg_url_without_sslmode(url: str) -> str:
    """Return URL with sslmode removed so asyncpg does not get an unknown kwarg."""
    parsed = urlparse(url)
    qs = parse_qs(parsed.query, keep_blank_values=True)
    qs.pop("sslmode", None)
    return urlunparse(parsed._replace(query=urlencode(qs, doseq=True)))


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for a database URL (postgres or sqlite)."""
    url = normalize_async_pg_url(database_url)
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo, future=True, connect_args={"timeout": 30})
    return create_async_engine(
        async_pg_url_without_sslmode(url),
        connect_args=async_pg_connect_args(url),
        echo=echo,
        future=True,
        poolclass=NullPool,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with the settings every caller expects."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Check if we're running in pytest (during collection or execution)
_is_pytest = 'pytest' in sys.modules or 'PYTEST_CURRENT_TEST' in os.environ

if not _is_pytest:
    from skillswap.settings import settings

    engine = build_engine(settings.database_url, echo=settings.database_echo)
    AsyncSessionLocal = build_session_factory(engine)
else:
    # Tests build their own engine and override get_db
    engine = None
    AsyncSessionLocal = None


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# Models are imported in skillswap/main.py to avoid circular imports
