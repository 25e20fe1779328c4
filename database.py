import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.server_api import ServerApi

from config import Settings

logger = logging.getLogger(__name__)


class Store:
    """Holds the MongoDB client and the three collections the API works on."""

    def __init__(self, client: Any, settings: Settings):
        self.client = client
        self.db = client[settings.database_name]
        self.products: Collection = self.db[settings.products_collection]
        self.orders: Collection = self.db[settings.orders_collection]
        self.reviews: Collection = self.db[settings.reviews_collection]

    def close(self) -> None:
        self.client.close()


def connect(settings: Settings) -> Store:
    """Open the client and ping the server; raises if it cannot be reached."""
    if not settings.database_url:
        raise RuntimeError("Database not configured: set DATABASE_URL or DB_USERNAME/DB_PASSWORD/DB_CLUSTER")
    client = MongoClient(settings.database_url, server_api=ServerApi("1"))
    client.admin.command("ping")
    logger.info("Connected successfully to MongoDB database %s", settings.database_name)
    return Store(client, settings)


def to_obj_id(id_str: Any) -> Optional[ObjectId]:
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        return None


def sanitize(doc: Dict) -> Dict:
    if not doc:
        return doc
    d = {**doc}
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


def strip_ids(doc: Dict) -> Dict:
    """Copy of ``doc`` without caller-supplied identifiers."""
    return {k: v for k, v in doc.items() if k not in ("_id", "id")}
