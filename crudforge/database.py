"""
Database Connection Management

Motor (asyncio MongoDB driver) client lifecycle and index setup.

NOTE: There is no module-level client. main.create_app() creates one, pings
it in its lifespan handler and binds the database to each registered
resource, so tests can pass their own database object instead.
"""
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.uri_parser import parse_uri

from crudforge.config import Settings
from crudforge.registry import ResourceRegistry
from crudforge.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DATABASE_NAME = "crud-boilerplate"


def database_name(settings: Settings) -> str:
    """DATABASE_NAME if set, else the path of MONGODB_URI."""
    if settings.DATABASE_NAME:
        return settings.DATABASE_NAME
    return parse_uri(settings.MONGODB_URI).get("database") or DEFAULT_DATABASE_NAME


def create_client(settings: Settings) -> AsyncIOMotorClient:
    """
    Create the driver client.

    The driver connects lazily and pools connections itself; call
    check_connection() to fail fast at startup.
    """
    return AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)


def get_database(client: AsyncIOMotorClient, settings: Settings) -> AsyncIOMotorDatabase:
    return client[database_name(settings)]


async def check_connection(client: AsyncIOMotorClient) -> None:
    """Ping the server, logging the host on success."""
    await client.admin.command("ping")
    host = client.address[0] if client.address else "unknown"
    logger.info(f"MongoDB connected: {host}")


async def ensure_indexes(database: Any, registry: ResourceRegistry) -> None:
    """Create a unique index for every field a registered schema marks unique."""
    for definition in registry:
        collection = database[definition.schema.collection_name]
        for field in definition.schema.unique_fields:
            await collection.create_index(field, unique=True)
            logger.debug(f"Unique index ensured: {definition.schema.collection_name}.{field}")
