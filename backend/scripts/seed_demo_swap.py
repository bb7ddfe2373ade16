"""
Seed a demo swap: three users, one swap request from Ana, two responses
(Ben's accepted, Chloe's rejected) and a couple of progress updates on the
accepted one. Run after migrations.

Usage (from repo root):
  cd backend && .venv/bin/python scripts/seed_demo_swap.py
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.domain.swap.services import SwapService
from skillswap.domain.users.services import UserService
from skillswap.infra.db.base import AsyncSessionLocal
from skillswap.infra.db.repositories.swap_repo import SwapRepositoryImpl
from skillswap.infra.db.repositories.user_repo import UserRepositoryImpl

USERS = [
    {"key": "ana", "email": "ana@demo.skillswap.app", "name": "Ana Costa", "skills": ["Guitar", "Spanish"]},
    {"key": "ben", "email": "ben@demo.skillswap.app", "name": "Ben Okafor", "skills": ["Web design"]},
    {"key": "chloe", "email": "chloe@demo.skillswap.app", "name": "Chloe Martin", "skills": ["Photography"]},
]


async def run_seed(session: AsyncSession) -> dict | None:
    """Create the demo data. Returns ids, or None when a demo user already exists."""
    user_repo = UserRepositoryImpl(session)
    for entry in USERS:
        if await user_repo.get_by_email(entry["email"]):
            return None

    users = UserService(user_repo)
    swaps = SwapService(SwapRepositoryImpl(session), user_repo)

    user_ids = {}
    for entry in USERS:
        user = await users.create_user(entry["email"], entry["name"], entry["skills"])
        user_ids[entry["key"]] = user.id

    request = await swaps.create_swap_request(
        created_by=user_ids["ana"],
        service_title="Guitar lessons for a portfolio site",
        service_required="Personal website design",
        service_description="Four beginner guitar lessons in exchange for a one-page portfolio.",
        categories=["Music", "Design"],
    )

    accepted = await swaps.create_interaction(request.id, user_ids["ben"], "I can build it in two weekends.")
    rejected = await swaps.create_interaction(request.id, user_ids["chloe"], "Could I offer photos instead?")
    await swaps.mark_accepted(accepted.id, user_ids["ana"])
    await swaps.mark_rejected(rejected.id, user_ids["ana"])

    await swaps.append_update(accepted.id, user_ids["ben"], "Wireframes shared", percentage=30, title="Design")
    await swaps.append_update(accepted.id, user_ids["ana"], "First lesson done", percentage=25, title="Lessons")

    return {
        "user_ids": user_ids,
        "swap_request_id": request.id,
        "interaction_ids": [accepted.id, rejected.id],
    }


async def seed_demo_swap():
    """CLI entrypoint: open session, run_seed, print."""
    async with AsyncSessionLocal() as session:
        result = await run_seed(session)
        if result is None:
            print("A demo user already exists; nothing seeded.")
            return
        print("Demo swap seeded.")
        print(f"   User IDs: {result['user_ids']}")
        print(f"   Swap request: {result['swap_request_id']}")
        print(f"   Interactions: {result['interaction_ids']}")


if __name__ == "__main__":
    asyncio.run(seed_demo_swap())
