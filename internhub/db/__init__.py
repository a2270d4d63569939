"""
Database module - PostgreSQL and MongoDB connections.
"""
from internhub.db.postgres import get_db_session, test_postgres_connection
from internhub.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_db_session",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
