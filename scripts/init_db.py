#!/usr/bin/env python3
"""Initialize database tables.

The API creates tables on startup as well; this is for preparing a
database ahead of time, optionally with a demo user and agent.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --seed
"""

import argparse
import asyncio

from agentvox.db.repositories import AsyncAgentRepository, AsyncUserRepository
from agentvox.db.session import close_db, get_session_context, init_db
from agentvox.services.tts.protocol import VoiceSettings

DEMO_USERNAME = "demo"
DEMO_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"


async def seed_demo() -> None:
    """Create a demo user owning one voice agent."""
    async with get_session_context() as session:
        user = await AsyncUserRepository(session).create(DEMO_USERNAME)
        agent = await AsyncAgentRepository(session).create(
            user_id=user.id,
            name="Demo Assistant",
            description="Default agent for trying the voice chat",
            voice_id=DEMO_VOICE_ID,
            voice_settings=VoiceSettings(),
        )
        print(f"Seeded user {user.id} ({user.username}) and agent {agent.id}.")


async def run(seed: bool) -> None:
    await init_db()
    print("Database tables created successfully.")
    if seed:
        await seed_demo()
    await close_db()


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", action="store_true", help="add a demo user and agent")
    args = parser.parse_args()
    asyncio.run(run(args.seed))


if __name__ == "__main__":
    main()
