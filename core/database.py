"""
MongoDB client management.

One ``AsyncMongoClient`` is shared by the whole process. It is created on
first use and handed to route handlers through the ``get_database``
dependency, so tests can swap it with ``app.dependency_overrides``.
"""
import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from bson import ObjectId
from pymongo import AsyncMongoClient

from core.config import config, ConfigurationError, MongoConfig
from core.observability import get_logger

logger = get_logger(__name__)

MISSING_CONFIG_MESSAGE = (
    "Missing MONGODB_URI or MONGODB_DB in environment. Add them to .env or .env.local"
)

_client: Optional[AsyncMongoClient] = None
_client_lock = asyncio.Lock()


async def get_client(mongo_config: MongoConfig = None) -> AsyncMongoClient:
    """Get the singleton client, creating it on first call (coroutine-safe)."""
    global _client
    cfg = mongo_config or config.mongo
    if not cfg.is_configured:
        raise ConfigurationError(MISSING_CONFIG_MESSAGE)

    async with _client_lock:
        if _client is None:
            _client = AsyncMongoClient(
                cfg.uri,
                serverSelectionTimeoutMS=cfg.server_selection_timeout_ms,
            )
            logger.info(f"MongoDB client created for database '{cfg.database}'")
    return _client


async def get_database():
    """FastAPI dependency returning the configured database handle."""
    client = await get_client()
    return client[config.mongo.database]


async def close_client() -> None:
    """Close the singleton client (application shutdown)."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
        logger.info("MongoDB client closed")


def serialize_document(value: Any) -> Any:
    """
    Convert a BSON document (or any nested value) into JSON-safe data.

    ObjectId → str, Decimal128/Decimal → float, datetime/date → ISO string.
    """
    if isinstance(value, dict):
        return {str(key): serialize_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [serialize_document(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    if hasattr(value, "to_decimal"):
        return float(value.to_decimal())
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.hex()
    return value
