"""Seed random users (with known passwords) into the users table."""
import argparse
import asyncio
import random
import sys
sys.path.insert(0, ".")

from app.database import async_session_factory, create_schema
from app.services.user_service import create_user, generate_random_user


async def seed(count: int, seed_value: int | None) -> None:
    await create_schema()
    rng = random.Random(seed_value)
    async with async_session_factory() as session:
        for _ in range(count):
            created = await create_user(session, generate_random_user(rng))
            print(f"  Seeded user {created.id}: {created.email} / {created.password}")
    print(f"Done seeding {count} users.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed random users")
    parser.add_argument("--count", type=int, default=20)
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for repeatable profiles")
    args = parser.parse_args()
    asyncio.run(seed(args.count, args.seed))
