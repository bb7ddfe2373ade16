"""Readiness checks: config and packages always; database and migrations against a throwaway SQLite file."""
import sys
from pathlib import Path

backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest
from sqlalchemy import text

from skillswap.infra.db.base import build_engine
from skillswap.readiness import (
    _check_database_async,
    _check_migrations_async,
    check_config,
    check_packages,
    is_ready,
    migration_head,
    run_all_checks,
)


def test_config_and_packages_pass():
    assert check_config() == (True, "ok")
    ok, msg = check_packages()
    assert ok, msg


async def test_database_check_against_sqlite(tmp_path):
    ok, msg = await _check_database_async(f"sqlite+aiosqlite:///{tmp_path / 'ready.db'}")
    assert ok, msg


def test_is_ready_requires_every_check():
    ready, summary = is_ready({"config": (True, "ok"), "packages": (True, "ok"), "database": (True, "ok")})
    assert ready
    assert summary == {"config": "ok", "packages": "ok", "database": "ok"}

    ready, summary = is_ready(
        {"config": (True, "ok"), "packages": (True, "ok"), "database": (False, "connection refused")}
    )
    assert not ready
    assert summary["database"] == "connection refused"


def test_migration_head_is_swap_schema():
    assert migration_head() == "001_swap_schema"


async def test_migration_check_reports_revision(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'schema.db'}"
    ok, msg = await _check_migrations_async(url)
    assert not ok
    assert msg == "at base, head is 001_swap_schema"

    engine = build_engine(url)
    async with engine.begin() as conn:
        await conn.execute(text("CREATE TABLE alembic_version (version_num VARCHAR(32) NOT NULL)"))
        await conn.execute(text("INSERT INTO alembic_version (version_num) VALUES ('001_swap_schema')"))
    await engine.dispose()

    assert await _check_migrations_async(url) == (True, "at head 001_swap_schema")


def test_outdated_schema_does_not_block_readiness():
    ready, summary = is_ready({
        "config": (True, "ok"),
        "packages": (True, "ok"),
        "database": (True, "ok"),
        "migrations": (False, "at base, head is 001_swap_schema"),
    })
    assert ready
    assert summary["migrations"].startswith("at base")


@pytest.mark.integration
def test_readiness_all_checks_pass():
    """Needs the configured Postgres database."""
    checks = run_all_checks()
    ready, summary = is_ready(checks)
    report = "\n".join(f"  {name}: {msg}" for name, msg in summary.items())
    assert ready, f"Readiness checks failed:\n{report}"
