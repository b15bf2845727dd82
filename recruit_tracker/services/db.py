import motor.motor_asyncio
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError
import os
from dotenv import load_dotenv

from recruit_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)

load_dotenv()

MONGO_DETAILS = os.getenv("MONGO_DETAILS", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "recruit_tracker")

logger.info(f"Initializing MongoDB connection to database: {DB_NAME}")

# The client connects lazily, on first operation
try:
    client = motor.motor_asyncio.AsyncIOMotorClient(MONGO_DETAILS, tz_aware=True)
    db = client[DB_NAME]
    logger.info("MongoDB client initialized successfully")
except Exception as e:
    logger.error(f"Failed to initialize MongoDB client: {e}")
    raise

# Collections
candidates_coll = db["candidates"]
job_requirements_coll = db["job_requirements"]
auth_sessions_coll = db["auth_sessions"]


INDEXES = [
    (candidates_coll, [("candidate_id", ASCENDING)], {"unique": True}),
    (candidates_coll, [("user_id", ASCENDING), ("created_at", DESCENDING)], {}),
    (job_requirements_coll, [("job_requirement_id", ASCENDING)], {"unique": True}),
    (job_requirements_coll, [("title", ASCENDING)], {}),
    (auth_sessions_coll, [("access_token", ASCENDING)], {"unique": True}),
]


async def init_indexes():
    """Index initialization for collections."""
    logger.info("Starting database index initialization")

    for coll, keys, options in INDEXES:
        label = f"{coll.name}.({', '.join(k for k, _ in keys)})"
        try:
            await coll.create_index(keys, **options)
            logger.debug(f"Created index on {label}")
        except PyMongoError as e:
            if "already exists" in str(e).lower():
                logger.debug(f"Index on {label} already exists")
            else:
                logger.warning(f"Could not create index on {label}: {e}")

    logger.info("Database index initialization completed")


def to_dict(doc):
    """Drop Mongo's ``_id`` so documents validate against the API models."""
    if not doc:
        return None
    doc = dict(doc)
    doc.pop("_id", None)
    return doc
