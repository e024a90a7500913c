"""Plan-based quotas — map count limits and the scan counter.

Learn: Two different kinds of quota live here:

1. Map count (enforced). A Starter account may own a single map. The
   count check and the insert that follows must not interleave with a
   second create from the same user, or both could pass the check.
   guard() serializes creates per owner: an in-process asyncio.Lock, plus
   a SELECT ... FOR UPDATE on the owner row so separate API processes
   sharing one PostgreSQL database serialize too.

2. Scan counter (tracked only). Every public view of a map decrements its
   owner's scan_left, saturating at zero. Nothing is blocked at zero.
"""

import asyncio
import uuid
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pathix.db.models import (
    ACCOUNT_ENTERPRISE,
    ACCOUNT_PRO,
    ACCOUNT_STARTER,
    Map,
    User,
)
from pathix.errors import NotFound, QuotaExceeded

logger = structlog.get_logger()

# None = unlimited
PLAN_MAP_LIMITS: dict[str, Optional[int]] = {
    ACCOUNT_STARTER: 1,
    ACCOUNT_PRO: None,
    ACCOUNT_ENTERPRISE: None,
}

# Scan allowance granted when a plan is assigned
PLAN_SCAN_ALLOWANCE: dict[str, int] = {
    ACCOUNT_STARTER: 50,
    ACCOUNT_PRO: 1000,
    ACCOUNT_ENTERPRISE: 1_000_000,
}


class QuotaEnforcer:
    """One per process (kept on app.state)."""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    @asynccontextmanager
    async def guard(self, db: AsyncSession, user_id: uuid.UUID) -> AsyncIterator[User]:
        """Serialize quota-checked writes for one owner.

        Yields the owner row, locked for the rest of the transaction. The
        caller must commit inside the block so the next waiter sees it.
        """
        lock = self._lock_for(user_id)
        async with lock:
            result = await db.execute(
                select(User).where(User.id == user_id).with_for_update()
            )
            user = result.scalars().first()
            if user is None:
                raise NotFound("User not found")
            try:
                yield user
            except Exception:
                await db.rollback()
                raise

    async def check_map_quota(self, db: AsyncSession, user: User) -> None:
        """Raise QuotaExceeded if the user's plan allows no more maps."""
        limit = PLAN_MAP_LIMITS.get(user.account_type, PLAN_MAP_LIMITS[ACCOUNT_STARTER])
        if limit is None:
            return
        count = await db.scalar(
            select(func.count()).select_from(Map).where(Map.user_id == user.id)
        )
        if count >= limit:
            logger.info(
                "quota.maps_exceeded",
                user_id=str(user.id),
                plan=user.account_type,
                count=count,
            )
            raise QuotaExceeded()

    async def record_scan(self, db: AsyncSession, user_id: uuid.UUID) -> None:
        """Decrement the owner's scan counter, never below zero."""
        await db.execute(
            update(User)
            .where(User.id == user_id, User.scan_left > 0)
            .values(scan_left=User.scan_left - 1)
        )
        await db.commit()
