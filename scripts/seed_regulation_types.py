"""
Seed script: creates the Boolean / Threshold / JUnit regulation types.
Safe to run repeatedly; existing types are left untouched.
Run: cd backend && python ../scripts/seed_regulation_types.py
"""
import asyncio
import os
import sys
from pathlib import Path

# Ensure backend is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))
os.chdir(str(Path(__file__).resolve().parent.parent / "backend"))

from app.database import async_session, engine  # noqa: E402
from app.services.regulation_types import list_regulation_types, seed_regulation_types  # noqa: E402


async def seed():
    async with async_session() as s:
        created = await seed_regulation_types(s)
        types = await list_regulation_types(s)

    print(f"Created: {', '.join(created) if created else 'nothing (all types present)'}")
    for rt in types:
        print(f"  #{rt.id:<3} {rt.name:<10} {rt.description or ''}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
