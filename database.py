"""
MongoDB access shared by every route.

The client is opened once at import and reused; pymongo connects lazily, so
importing this module without a reachable server is fine. When DATABASE_URL is
not set `db` stays None and the /test endpoint reports it.
"""
from typing import Optional

from bson.errors import InvalidId
from bson.objectid import ObjectId
from pymongo import MongoClient
from pymongo.database import Database

import config

PARTICIPANTS = "participants"
MESSAGES = "messages"
RECIPES = "receitas"

client: Optional[MongoClient] = None
db: Optional[Database] = None

if config.DATABASE_URL:
    client = MongoClient(config.DATABASE_URL)
    db = client.get_default_database(default=config.DATABASE_NAME)


def object_id(value: str) -> Optional[ObjectId]:
    """Parse a path id; None when it can't be an ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_str_id(doc):
    if not doc:
        return doc
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d
