"""Readiness checks: config, packages, database, migrations."""
import asyncio
import logging
from pathlib import Path
from typing import Optional

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import text

from skillswap.infra.db.base import build_engine

logger = logging.getLogger(__name__)

# Result: (passed: bool, message: str)
CheckResult = tuple[bool, str]
ChecksDict = dict[str, CheckResult]

# Migrations are reported but do not block readiness (tables may come from create_all).
REQUIRED_CHECKS = frozenset({"config", "packages", "database"})

_BACKEND_DIR = Path(__file__).resolve().parent.parent


def check_config() -> CheckResult:
    """Load settings and read app_name / database_url."""
    try:
        from skillswap.settings import get_settings
        s = get_settings()
        _ = s.app_name
        _ = s.database_url
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_packages() -> CheckResult:
    """Import critical modules: uvicorn, sqlalchemy, skillswap.main."""
    missing = []
    try:
        import uvicorn  # noqa: F401
    except ImportError:
        missing.append("uvicorn")
    try:
        import sqlalchemy  # noqa: F401
    except ImportError:
        missing.append("sqlalchemy")
    try:
        import skillswap.main  # noqa: F401
    except ImportError as e:
        missing.append(f"skillswap.main ({e})")
    if missing:
        return False, f"missing: {', '.join(missing)}"
    return True, "ok"


async def _check_database_async(database_url: str) -> CheckResult:
    """Run a trivial query against the database."""
    try:
        engine = build_engine(database_url)
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        await engine.dispose()
        return True, "ok"
    except Exception as e:
        logger.warning("Database readiness check failed: %s", e)
        return False, str(e)


def migration_head() -> Optional[str]:
    """Head revision of the Alembic scripts shipped in backend/alembic."""
    cfg = Config(str(_BACKEND_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(_BACKEND_DIR / "alembic"))
    return ScriptDirectory.from_config(cfg).get_current_head()


async def _check_migrations_async(database_url: str) -> CheckResult:
    """Compare the database's alembic_version with the script head."""
    try:
        head = migration_head()
        engine = build_engine(database_url)
        try:
            async with engine.connect() as conn:
                current = await conn.run_sync(
                    lambda sync_conn: MigrationContext.configure(sync_conn).get_current_revision()
                )
        finally:
            await engine.dispose()
    except Exception as e:
        logger.warning("Migration readiness check failed: %s", e)
        return False, str(e)
    if current != head:
        return False, f"at {current or 'base'}, head is {head}"
    return True, f"at head {head}"


def check_database() -> CheckResult:
    """Check database connectivity using settings.database_url."""
    try:
        from skillswap.settings import get_settings
        url = get_settings().database_url
        return asyncio.run(_check_database_async(url))
    except Exception as e:
        return False, str(e)


def check_migrations() -> CheckResult:
    """Check the database schema is at the Alembic head."""
    try:
        from skillswap.settings import get_settings
        return asyncio.run(_check_migrations_async(get_settings().database_url))
    except Exception as e:
        return False, str(e)


def run_all_checks() -> ChecksDict:
    """Run all readiness checks (sync). Returns dict of check_name -> (passed, message)."""
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": check_database(),
        "migrations": check_migrations(),
    }


async def run_all_checks_async() -> ChecksDict:
    """Run all readiness checks from an async context (e.g. GET /ready)."""
    from skillswap.settings import get_settings
    url = get_settings().database_url
    db_result = await _check_database_async(url)
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": db_result,
        "migrations": await _check_migrations_async(url),
    }


def is_ready(checks: ChecksDict | None = None) -> tuple[bool, dict[str, str]]:
    """
    True if all required checks pass.
    Returns (ready: bool, checks_summary: dict of name -> "ok" | error message).
    """
    if checks is None:
        checks = run_all_checks()
    summary: dict[str, str] = {name: msg for name, (_, msg) in checks.items()}
    all_required = all(checks[n][0] for n in REQUIRED_CHECKS if n in checks)
    return all_required, summary
