"""
Incomplete-order drafts (abandoned checkout tracking).

Each session's latest draft is written only after a quiet period. A newer change
for the same session cancels the pending write and restarts the timer.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional, Set

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.config import DRAFT_SAVE_DELAY_SECONDS
from schemas.incomplete_order import IncompleteOrderIn

logger = logging.getLogger(__name__)

SaveFn = Callable[[IncompleteOrderIn], Awaitable[None]]


class DraftSaveScheduler:
    def __init__(self, save: SaveFn, delay: float = DRAFT_SAVE_DELAY_SECONDS) -> None:
        self._save = save
        self.delay = delay
        self._tasks: Dict[str, asyncio.Task] = {}
        # saves past their quiet period, already writing
        self._writes: Dict[str, Set[asyncio.Task]] = {}

    def schedule(self, session_id: str, draft: IncompleteOrderIn) -> None:
        self.cancel(session_id)
        self._tasks[session_id] = asyncio.create_task(self._fire(session_id, draft))

    def cancel(self, session_id: str) -> bool:
        """Drop a save still waiting out its quiet period."""
        task = self._tasks.pop(session_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def discard(self, session_id: str) -> None:
        """Cancel the waiting save and wait for any write already under way."""
        self.cancel(session_id)
        writes = list(self._writes.get(session_id, ()))
        if writes:
            await asyncio.gather(*writes, return_exceptions=True)

    def pending(self, session_id: str) -> bool:
        task = self._tasks.get(session_id)
        return task is not None and not task.done()

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        writes = [t for ts in self._writes.values() for t in ts]
        await asyncio.gather(*tasks, *writes, return_exceptions=True)

    async def _fire(self, session_id: str, draft: IncompleteOrderIn) -> None:
        await asyncio.sleep(self.delay)
        me = asyncio.current_task()
        if self._tasks.get(session_id) is me:
            del self._tasks[session_id]
        self._writes.setdefault(session_id, set()).add(me)
        try:
            await self._save(draft)
        except Exception:
            logger.exception("draft save failed for session %s", session_id)
        finally:
            writes = self._writes.get(session_id, set())
            writes.discard(me)
            if not writes:
                self._writes.pop(session_id, None)


async def save_draft(db: AsyncIOMotorDatabase, draft: IncompleteOrderIn) -> None:
    doc = draft.to_doc()
    doc["updatedAt"] = datetime.utcnow()
    await db.incomplete_orders.update_one({"sessionId": draft.session_id}, {"$set": doc}, upsert=True)


async def delete_draft(db: AsyncIOMotorDatabase, session_id: str, scheduler: Optional[DraftSaveScheduler] = None) -> int:
    if scheduler is not None:
        await scheduler.discard(session_id)
    res = await db.incomplete_orders.delete_one({"sessionId": session_id})
    return res.deleted_count
