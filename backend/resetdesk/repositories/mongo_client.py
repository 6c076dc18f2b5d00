"""MongoDB Client - Connection and Collection Management"""
from typing import Any, Dict, Optional
from pymongo import MongoClient as PyMongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, PyMongoError

from ..config.settings import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Global client instance
_client: Optional[PyMongoClient] = None
_database: Optional[Database] = None


def get_client() -> PyMongoClient:
    """Get or create MongoDB client"""
    global _client
    if _client is None:
        logger.info(f"Connecting to MongoDB: {settings.mongo_uri}")
        _client = PyMongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=30000,
        )
        # Test connection
        try:
            _client.admin.command("ping")
            logger.info("MongoDB connection successful")
        except ConnectionFailure as e:
            logger.error(f"MongoDB connection failed: {e}")
            raise
    return _client


def get_database() -> Database:
    """Get the application database"""
    global _database
    if _database is None:
        client = get_client()
        _database = client[settings.mongo_db]
        logger.info(f"Using database: {settings.mongo_db}")
    return _database


def get_collection(name: str) -> Collection:
    """Get a collection from the database"""
    db = get_database()
    return db[name]


def close_connection() -> None:
    """Close MongoDB connection"""
    global _client, _database
    if _client is not None:
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


def create_indexes() -> None:
    """Create all required indexes"""
    db = get_database()
    logger.info("Creating MongoDB indexes...")

    # Units collection
    units = db["units"]
    units.create_index("unit_id", unique=True)
    units.create_index("name", unique=True)

    # Personnel collection
    personnel = db["personnel"]
    personnel.create_index("personnel_id", unique=True)
    personnel.create_index("nrp", unique=True)
    personnel.create_index("email", unique=True)
    personnel.create_index([("unit_id", ASCENDING), ("status", ASCENDING)])

    # Reset requests collection
    reset_requests = db["reset_requests"]
    reset_requests.create_index("request_id", unique=True)
    reset_requests.create_index([("unit_id", ASCENDING), ("status", ASCENDING)])
    reset_requests.create_index("requester.nrp")
    reset_requests.create_index("status")
    reset_requests.create_index("created_at", background=True)

    # Audit log collection
    audit_log = db["audit_log"]
    audit_log.create_index("log_id", unique=True)
    audit_log.create_index([("category", ASCENDING), ("timestamp", DESCENDING)])
    audit_log.create_index("timestamp", background=True)
    audit_log.create_index("correlation_id")

    # Site settings collection (singleton document)
    site_settings = db["site_settings"]
    site_settings.create_index("settings_id", unique=True)

    logger.info("MongoDB indexes created successfully")


def health_check() -> Dict[str, Any]:
    """Check MongoDB health"""
    try:
        get_database().command("ping")
        return {
            "status": "healthy",
            "database": settings.mongo_db,
            "connection": "ok"
        }
    except PyMongoError as e:
        logger.error(f"MongoDB health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": settings.mongo_db,
            "error": str(e)
        }
