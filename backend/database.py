import logging
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from core.config import settings

logger = logging.getLogger(__name__)

# ===== CLIENT INSTANCES =====
async_client: Optional[AsyncIOMotorClient] = None
async_database: Optional[AsyncIOMotorDatabase] = None

# ===== INITIALIZATION FLAGS =====
_async_initialized = False
_indexes_created = False


# ============================================
# ASYNC CLIENT INITIALIZATION
# ============================================

def initialize_async_client() -> AsyncIOMotorClient:
    """Initialize async MongoDB client with error handling (call once at startup)"""
    global async_client, async_database, _async_initialized

    if async_client is not None and _async_initialized:
        return async_client

    try:
        async_client = AsyncIOMotorClient(
            settings.MONGODB_URI,
            maxPoolSize=settings.DB_MAX_POOL_SIZE,
            minPoolSize=settings.DB_MIN_POOL_SIZE,
            maxIdleTimeMS=settings.DB_MAX_IDLE_TIME_MS,
            connectTimeoutMS=settings.DB_CONNECT_TIMEOUT_MS,
            serverSelectionTimeoutMS=settings.DB_SERVER_SELECTION_TIMEOUT_MS,
            retryWrites=True,
            retryReads=True,
            appName="affiliate_registration"
        )
        async_database = async_client[settings.MONGODB_DATABASE]
        _async_initialized = True
        logger.info("✅ Async MongoDB client initialized")

    except Exception as e:
        logger.error(f"❌ Failed to initialize async MongoDB client: {e}")
        raise

    return async_client


# ============================================
# ASYNC DATABASE & COLLECTION GETTERS
# ============================================

def get_async_database() -> AsyncIOMotorDatabase:
    """Get async database instance"""
    if async_database is None:
        initialize_async_client()
    return async_database


def get_affiliates_collection():
    """Affiliate records collection"""
    return get_async_database().affiliates

def get_affiliate_meta_collection():
    """Per-affiliate key/value metadata collection"""
    return get_async_database().affiliate_meta

def get_counters_collection():
    """Integer id sequences"""
    return get_async_database().counters


# ============================================
# DATABASE UTILITIES
# ============================================

async def ensure_indexes():
    """Create database indexes (idempotent)"""
    global _indexes_created

    if _indexes_created:
        return

    try:
        logger.info("🔧 Creating database indexes...")

        affiliates = get_affiliates_collection()
        await affiliates.create_index([("id", ASCENDING)], unique=True)
        await affiliates.create_index([("user_login", ASCENDING)], unique=True)
        await affiliates.create_index([("created_at", DESCENDING)])

        # One value per affiliate per key
        affiliate_meta = get_affiliate_meta_collection()
        await affiliate_meta.create_index([("affiliate_id", ASCENDING), ("meta_key", ASCENDING)], unique=True)

        _indexes_created = True
        logger.info("✅ Database indexes created successfully")

    except Exception as e:
        logger.error(f"❌ Failed to create indexes: {e}")
        # Startup continues without indexes


async def ping_database() -> bool:
    """Check async database connectivity"""
    try:
        await get_async_database().command("ping")
        return True
    except Exception as e:
        logger.error(f"Database ping failed: {e}")
        return False


def close_async_client():
    """Close async MongoDB client"""
    global async_client, async_database, _async_initialized

    if async_client is not None:
        async_client.close()
        logger.info("🔌 Async MongoDB client closed")

    async_client = None
    async_database = None
    _async_initialized = False
