"""
Polystore CRUD API — Document Store (MongoDB) Connection Manager
=================================================================

What:  Holds the single shared MongoDB client and exposes the `usuarios`
       collection.
Why:   One client per process: the driver pools its own connections and is
       safe to share across concurrent requests.
How:   pymongo's asyncio API (AsyncMongoClient). The client is created once
       at startup, reused by every request, and closed at shutdown.
Who:   Built by the app lifespan (or injected by tests); reached by route
       handlers through crud_api.deps.
"""

import logging
from typing import Any, Mapping, Optional

from pymongo import AsyncMongoClient

from crud_api.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# Collection that holds user documents
USERS_COLLECTION = "usuarios"


class DocumentStore:
    """
    Long-lived handle to MongoDB.

    Attributes:
        client:   The shared AsyncMongoClient
        database: Database named in the URI (or the configured fallback)
        users:    The `usuarios` collection
    """

    def __init__(self, client: Any, database_name: Optional[str] = None):
        self.client = client
        if database_name:
            self.database = client[database_name]
        else:
            self.database = client.get_default_database(
                default=default_settings.mongo_database
            )
        self.users = self.database[USERS_COLLECTION]

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "DocumentStore":
        config = config or default_settings
        client = AsyncMongoClient(config.mongo_uri)
        database = client.get_default_database(default=config.mongo_database)
        return cls(client, database_name=database.name)

    async def ping(self) -> Mapping[str, Any]:
        """Round-trip to the server; raises PyMongoError when unreachable."""
        return await self.client.admin.command("ping")

    async def close(self) -> None:
        await self.client.close()
