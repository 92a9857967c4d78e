#!/usr/bin/env python3
"""Seed the exercise catalog from ExerciseDB (RapidAPI). Existing names are skipped.
Usage: EXERCISEDB_API_KEY=your_key python scripts/seed_exercises.py  (run from backend/)"""
import asyncio
import os
import sys

import httpx
from sqlalchemy import select

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.db.session import async_session_maker, init_db  # noqa: E402
from app.models.exercise import Exercise  # noqa: E402

URL = "https://exercisedb.p.rapidapi.com/exercises"
API_KEY = os.environ.get("EXERCISEDB_API_KEY", "")
BATCH_SIZE = 50


async def fetch_exercises() -> list[dict]:
    headers = {"x-rapidapi-host": "exercisedb.p.rapidapi.com", "x-rapidapi-key": API_KEY}
    async with httpx.AsyncClient(timeout=60.0) as client:
        r = await client.get(URL, params={"limit": 1324}, headers=headers)
        r.raise_for_status()
        return r.json()


async def main():
    if not API_KEY:
        print("Set EXERCISEDB_API_KEY in environment")
        return
    items = await fetch_exercises()
    print(f"Fetched {len(items)} exercises")
    await init_db()

    added = 0
    async with async_session_maker() as session:
        r = await session.execute(select(Exercise.name))
        known = {name.lower() for name in r.scalars().all()}
        for start in range(0, len(items), BATCH_SIZE):
            for item in items[start:start + BATCH_SIZE]:
                name = (item.get("name") or "").strip()
                if not name or name.lower() in known:
                    continue
                session.add(
                    Exercise(
                        name=name,
                        body_part=(item.get("bodyPart") or "").lower() or None,
                        target=item.get("target"),
                        equipment=item.get("equipment"),
                        instructions=item.get("instructions") or None,
                    )
                )
                known.add(name.lower())
                added += 1
            await session.commit()
            print(f"  {min(start + BATCH_SIZE, len(items))}/{len(items)} processed")
    print(f"Added {added} exercises, skipped {len(items) - added}")


if __name__ == "__main__":
    asyncio.run(main())
