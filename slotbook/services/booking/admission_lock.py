# ===== slotbook/services/booking/admission_lock.py =====
"""
Serializes booking admission per calendar owner.

Two layers are held while the local conflict check and the insert run:
an in-process lock picked by owner from a fixed pool (covers threads sharing
one process and databases without advisory locks), and on PostgreSQL a
transaction-scoped advisory lock keyed by the same owner (covers multiple
worker processes).
The advisory lock is released by the commit or rollback that ends the
admission transaction.
"""
import logging
import threading
from contextlib import contextmanager
from typing import List
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# Owners hash onto a fixed set of locks; two owners may share one, never one owner two
LOCK_POOL_SIZE = 64
_owner_locks: List[threading.Lock] = [threading.Lock() for _ in range(LOCK_POOL_SIZE)]


def advisory_key(owner_id: UUID) -> int:
    """Signed 64-bit key derived from the owner id, as pg_advisory_xact_lock expects"""
    return int.from_bytes(owner_id.bytes[:8], byteorder="big", signed=True)


def lock_for(owner_id: UUID) -> threading.Lock:
    return _owner_locks[advisory_key(owner_id) % LOCK_POOL_SIZE]


@contextmanager
def admission_lock(db: Session, owner_id: UUID):
    """Hold the owner's admission lock for the duration of the block"""
    lock = lock_for(owner_id)
    with lock:
        if db.get_bind().dialect.name == "postgresql":
            db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": advisory_key(owner_id)})
            logger.debug(f"Advisory admission lock taken for owner {owner_id}")
        yield
