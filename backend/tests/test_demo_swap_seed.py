"""Tests for the demo swap seed script against a SQLite database."""
import importlib.util
import sys
from pathlib import Path

backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from skillswap.domain.swap.models import InteractionStatus, SwapRequestStatus
from skillswap.infra.db.repositories.swap_repo import SwapRepositoryImpl


def _load_script_module(name: str):
    spec = importlib.util.spec_from_file_location(
        name,
        backend_dir / "scripts" / f"{name}.py",
    )
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


async def test_seed_creates_demo_swap(db_session):
    seed = _load_script_module("seed_demo_swap")
    result = await seed.run_seed(db_session)

    assert set(result["user_ids"]) == {"ana", "ben", "chloe"}
    repo = SwapRepositoryImpl(db_session)

    request = await repo.get_swap_request(result["swap_request_id"])
    assert request.created_by == result["user_ids"]["ana"]
    assert request.request_status == SwapRequestStatus.IN_PROGRESS

    accepted_id, rejected_id = result["interaction_ids"]
    accepted = await repo.get_interaction(accepted_id)
    rejected = await repo.get_interaction(rejected_id)
    assert accepted.status == InteractionStatus.ACCEPTED
    assert rejected.status == InteractionStatus.REJECTED
    assert [u.percentage for u in accepted.updates] == [30, 25]
    assert rejected.updates == []


async def test_seed_is_skipped_when_demo_users_exist(db_session):
    seed = _load_script_module("seed_demo_swap")
    assert await seed.run_seed(db_session) is not None
    assert await seed.run_seed(db_session) is None
