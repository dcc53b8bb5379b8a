# backend/models/affiliate_meta.py
from typing import Callable, Dict, Optional, Tuple
from datetime import datetime


class MongoAffiliateMetaStore:
    """
    Key/value metadata scoped to one affiliate.

    Documents look like ``{affiliate_id, meta_key, meta_value, updated_at}``
    with a unique index on ``(affiliate_id, meta_key)``; writes are upserts,
    so a key holds at most one value per affiliate.
    """

    def __init__(self, meta_collection: Callable):
        self._meta = meta_collection

    async def get_meta(self, affiliate_id: int, meta_key: str) -> Optional[str]:
        doc = await self._meta().find_one(
            {"affiliate_id": affiliate_id, "meta_key": meta_key},
            {"_id": 0, "meta_value": 1},
        )
        return doc.get("meta_value") if doc else None

    async def update_meta(self, affiliate_id: int, meta_key: str, meta_value: str) -> None:
        await self._meta().update_one(
            {"affiliate_id": affiliate_id, "meta_key": meta_key},
            {"$set": {"meta_value": meta_value, "updated_at": datetime.utcnow()}},
            upsert=True,
        )


class InMemoryAffiliateMetaStore:
    """Dict-backed metadata store for tests and local runs"""

    def __init__(self):
        self._entries: Dict[Tuple[int, str], str] = {}
        self.reads = 0
        self.writes = 0

    async def get_meta(self, affiliate_id: int, meta_key: str) -> Optional[str]:
        self.reads += 1
        return self._entries.get((affiliate_id, meta_key))

    async def update_meta(self, affiliate_id: int, meta_key: str, meta_value: str) -> None:
        self.writes += 1
        self._entries[(affiliate_id, meta_key)] = meta_value
