# backend/main.py
"""
Affiliate registration API with the payout account extension
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.hooks import HookRegistry
from database import (
    get_affiliates_collection,
    get_affiliate_meta_collection,
    get_counters_collection,
    ensure_indexes,
    close_async_client,
    ping_database,
)
from models.affiliate import MongoAffiliateStore
from models.affiliate_meta import MongoAffiliateMetaStore
from payment_account import register_payment_account_extension
from routes import affiliates, admin_affiliates

# ===== LOGGING SETUP =====
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(affiliate_store=None, meta_store=None) -> FastAPI:
    """Build the app; stores default to MongoDB"""
    # ===== COMPOSITION ROOT =====
    if affiliate_store is None:
        affiliate_store = MongoAffiliateStore(get_affiliates_collection, get_counters_collection)
    if meta_store is None:
        meta_store = MongoAffiliateMetaStore(get_affiliate_meta_collection)
    use_mongo = isinstance(affiliate_store, MongoAffiliateStore) or isinstance(meta_store, MongoAffiliateMetaStore)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Starting Affiliate Registration API...")
        if use_mongo and not await ping_database():
            logger.warning("⚠️ MongoDB unreachable at startup")
        if use_mongo and settings.ENSURE_INDEXES_ON_STARTUP:
            await ensure_indexes()
        logger.info("✅ Affiliate Registration API ready!")
        yield
        if use_mongo:
            close_async_client()

    app = FastAPI(
        lifespan=lifespan,
        debug=settings.DEBUG_MODE,
        title=settings.APP_NAME,
        description="Affiliate registration with payout account details",
        version=settings.APP_VERSION
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.affiliate_store = affiliate_store
    app.state.meta_store = meta_store
    app.state.registry = HookRegistry()
    register_payment_account_extension(app.state.registry, app.state.meta_store)

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)
        process_time = time.time() - start_time

        # Log slow requests
        if process_time > 2.0:
            logger.warning(f"Slow request: {request.method} {request.url.path} - {process_time:.3f}s")

        response.headers["X-Process-Time"] = str(round(process_time, 3))
        return response

    @app.get("/health")
    async def health_check():
        """System health check"""
        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "version": settings.APP_VERSION,
        }

    app.include_router(affiliates.router)
    app.include_router(admin_affiliates.router)

    return app


app = create_app()
