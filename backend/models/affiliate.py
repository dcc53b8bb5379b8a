# backend/models/affiliate.py
from pydantic import BaseModel, Field
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime
from enum import Enum
from pymongo import ReturnDocument, DESCENDING


class AffiliateStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"

class Affiliate(BaseModel):
    id: int
    user_login: str
    user_email: str
    password_hash: str = ""
    status: AffiliateStatus = AffiliateStatus.PENDING
    website: str = ""
    promotional_method: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


def _to_document(fields: Dict[str, Any]) -> Dict[str, Any]:
    # BSON stores enum members by value
    return {key: value.value if isinstance(value, Enum) else value for key, value in fields.items()}


class MongoAffiliateStore:
    """Affiliate records in MongoDB with integer ids from a counters collection"""

    def __init__(self, affiliates_collection: Callable, counters_collection: Callable):
        # Collection getters, resolved per call so nothing connects at import time
        self._affiliates = affiliates_collection
        self._counters = counters_collection

    async def _next_id(self) -> int:
        counter = await self._counters().find_one_and_update(
            {"_id": "affiliates"},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    async def insert(self, data: Dict[str, Any]) -> Affiliate:
        affiliate = Affiliate(id=await self._next_id(), **data)
        await self._affiliates().insert_one(_to_document(affiliate.model_dump()))
        return affiliate

    async def get(self, affiliate_id: int) -> Optional[Affiliate]:
        doc = await self._affiliates().find_one({"id": affiliate_id}, {"_id": 0})
        return Affiliate(**doc) if doc else None

    async def get_by_login(self, user_login: str) -> Optional[Affiliate]:
        doc = await self._affiliates().find_one({"user_login": user_login}, {"_id": 0})
        return Affiliate(**doc) if doc else None

    async def list(self, limit: int = 50, skip: int = 0) -> List[Affiliate]:
        cursor = self._affiliates().find({}, {"_id": 0}).sort("created_at", DESCENDING).skip(skip).limit(limit)
        return [Affiliate(**doc) async for doc in cursor]

    async def update(self, affiliate_id: int, fields: Dict[str, Any]) -> Optional[Affiliate]:
        fields = {**fields, "updated_at": datetime.utcnow()}
        doc = await self._affiliates().find_one_and_update(
            {"id": affiliate_id},
            {"$set": _to_document(fields)},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )
        return Affiliate(**doc) if doc else None


class InMemoryAffiliateStore:
    """Dict-backed affiliate store for tests and local runs"""

    def __init__(self):
        self._affiliates: Dict[int, Affiliate] = {}
        self._seq = 0

    async def insert(self, data: Dict[str, Any]) -> Affiliate:
        self._seq += 1
        affiliate = Affiliate(id=self._seq, **data)
        self._affiliates[affiliate.id] = affiliate
        return affiliate

    async def get(self, affiliate_id: int) -> Optional[Affiliate]:
        return self._affiliates.get(affiliate_id)

    async def get_by_login(self, user_login: str) -> Optional[Affiliate]:
        for affiliate in self._affiliates.values():
            if affiliate.user_login == user_login:
                return affiliate
        return None

    async def list(self, limit: int = 50, skip: int = 0) -> List[Affiliate]:
        ordered = sorted(self._affiliates.values(), key=lambda a: (a.created_at, a.id), reverse=True)
        return ordered[skip:skip + limit]

    async def update(self, affiliate_id: int, fields: Dict[str, Any]) -> Optional[Affiliate]:
        current = self._affiliates.get(affiliate_id)
        if current is None:
            return None
        updated = current.model_copy(update={**fields, "updated_at": datetime.utcnow()})
        self._affiliates[affiliate_id] = updated
        return updated
