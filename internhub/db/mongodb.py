"""
MongoDB Connection Utility

MongoDB stores resume files in a GridFS bucket. The relational data lives in
PostgreSQL; applications only keep the GridFS key of the uploaded file.
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from internhub.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=settings.mongodb_timeout_ms)
    return _client


def get_mongo_db() -> Database:
    """Get the file storage database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def test_mongo_connection() -> bool:
    """Ping MongoDB. False when the server cannot be selected in time."""
    try:
        get_mongo_client().admin.command("ping")
        return True
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


def init_resume_bucket():
    """
    Ensure indexes on the resume bucket's files collection.
    Runs at app startup; create_index is a no-op when the index exists.
    """
    db = get_mongo_db()
    files = db[f"{settings.resume_bucket}.files"]

    # GridFS lookups go by filename (the storage key)
    files.create_index("filename", unique=True)
    # Per-student listing
    files.create_index("metadata.student_id")

    logger.info("Resume bucket '%s' indexes ensured", settings.resume_bucket)
