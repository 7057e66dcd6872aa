# journey/services/locks.py
import asyncio
from collections import defaultdict
from typing import Dict


class RoadmapLocks:
    """One asyncio.Lock per user id.

    Roadmap updates are read-modify-write against a last-write-wins store,
    so every mutation for a user runs while holding that user's lock.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def for_user(self, user_id: str) -> asyncio.Lock:
        return self._locks[user_id]

