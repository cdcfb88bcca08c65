from typing import List, Optional
import logging
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from beanie import init_beanie, Document
from app.core.config import settings
from app.models.messages import Message

# MongoDB client and database
client: Optional[AsyncMongoClient] = None
database: Optional[AsyncDatabase] = None

logger = logging.getLogger(__name__)

DOCUMENT_MODELS: List[type[Document]] = [
    Message,
]


async def connect_to_mongo():
    """Create database connection"""
    global client, database
    try:
        client = AsyncMongoClient(
            settings.mongo_url,
            maxPoolSize=10,
            minPoolSize=1,
            maxIdleTimeMS=30000,
            waitQueueTimeoutMS=5000,
        )
        database = client[settings.mongo_database]
        logger.info("Connected to MongoDB")
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise


async def init_mongodb():
    """Initialize MongoDB with Beanie"""
    try:
        await connect_to_mongo()
        await init_beanie(database=database, document_models=DOCUMENT_MODELS)
        logger.info("MongoDB initialized with Beanie successfully")
    except Exception as e:
        logger.error(f"Failed to initialize MongoDB: {e}")
        raise


async def check_mongo_connection() -> bool:
    """Check MongoDB connection"""
    try:
        if client:
            await client.admin.command('ping')
            return True
        return False
    except Exception as e:
        logger.error(f"MongoDB connection check failed: {e}")
        return False


async def close_mongo_connection():
    """Close MongoDB connection"""
    global client
    if client:
        await client.close()
        client = None
        logger.info("MongoDB connection closed")
