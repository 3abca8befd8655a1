import logging
from typing import Any, Dict

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .models import DOCUMENT_MODELS

logger = logging.getLogger(__name__)

_client = None


async def init_models(database: AsyncIOMotorDatabase):
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)


async def init_db(mongo_url: str, db_name: str):
    global _client
    if _client is not None:
        try:
            await _client.admin.command("ping")
            return
        except Exception:
            logger.warning("Existing MongoDB client is unreachable, reconnecting")
            _client = None
    tls_kwargs: Dict[str, Any] = {}
    if mongo_url.startswith("mongodb+srv://") or "mongodb.net" in mongo_url:
        import certifi
        tls_kwargs = {"tls": True, "tlsCAFile": certifi.where()}

    # First attempt: strict TLS with CA
    try:
        _client = AsyncIOMotorClient(mongo_url, serverSelectionTimeoutMS=30000, **tls_kwargs)
        await _client.admin.command("ping")
    except Exception:
        if not tls_kwargs:
            raise
        logger.warning("Strict TLS connection to MongoDB failed, retrying without certificate checks")
        retry_kwargs = dict(tls_kwargs)
        retry_kwargs["tlsAllowInvalidCertificates"] = True
        _client = AsyncIOMotorClient(mongo_url, serverSelectionTimeoutMS=30000, **retry_kwargs)
        await _client.admin.command("ping")

    await init_models(_client[db_name])
    logger.info("Connected to MongoDB database %s", db_name)


def get_client() -> AsyncIOMotorClient:
    return _client


def close_db():
    global _client
    if _client is not None:
        _client.close()
        _client = None
