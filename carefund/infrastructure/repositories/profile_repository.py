"""Key-value storage for user profiles."""

import asyncio
from typing import Any, Dict, Mapping, Optional, Protocol


class ProfileRepository(Protocol):
    """Protocol for profile data access - ASYNC"""

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get the stored profile fields for a user"""
        ...

    async def save(self, user_id: str, fields: Mapping[str, Any]) -> None:
        """Replace the stored profile fields for a user"""
        ...


class InMemoryProfileRepository:
    """Process-lifetime profile store; records are copied in and out."""

    def __init__(self):
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            stored = self._profiles.get(user_id)
            return dict(stored) if stored is not None else None

    async def save(self, user_id: str, fields: Mapping[str, Any]) -> None:
        async with self._lock:
            self._profiles[user_id] = dict(fields)
