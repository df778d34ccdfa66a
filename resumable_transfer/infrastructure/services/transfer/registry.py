"""
Session registry implementation.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from ....core.interfaces.transfer import ISessionRegistry
from .session import UploadSession

logger = logging.getLogger(__name__)


class SessionRegistry(ISessionRegistry):
    """In-memory token to session mapping guarded by a single lock."""

    def __init__(self) -> None:
        self._sessions: Dict[str, UploadSession] = {}
        self._lock = asyncio.Lock()

    async def create(self, token: str, session: UploadSession) -> None:
        async with self._lock:
            self._sessions[token] = session
        logger.debug(f"Registered session {token}")

    async def lookup(self, token: str) -> Optional[UploadSession]:
        async with self._lock:
            return self._sessions.get(token)

    async def remove(self, token: str) -> Optional[UploadSession]:
        async with self._lock:
            return self._sessions.pop(token, None)

    async def list(self) -> List[UploadSession]:
        async with self._lock:
            return list(self._sessions.values())

    async def purge(self, predicate: Callable[[UploadSession], bool]) -> List[str]:
        async with self._lock:
            tokens = [token for token, session in self._sessions.items()
                      if predicate(session)]
            for token in tokens:
                del self._sessions[token]

        if tokens:
            logger.info(f"Purged {len(tokens)} sessions from registry")
        return tokens

    def __len__(self) -> int:
        return len(self._sessions)
