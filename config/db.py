# db.py
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from config.env_config import MONGODB_URL, MONGODB_DB_NAME, ENVIRONMENT
from config.log_config import get_logger

logger = get_logger("db")

logger.info(f"Connecting to MongoDB at {MONGODB_URL}\nEnvironment is set to {ENVIRONMENT}")

client: AsyncIOMotorClient = AsyncIOMotorClient(MONGODB_URL, uuidRepresentation="standard", tz_aware=True)
db: AsyncIOMotorDatabase = client[MONGODB_DB_NAME]


# Dependency for FastAPI
def get_database() -> AsyncIOMotorDatabase:
    return db


async def init_db(database: AsyncIOMotorDatabase):
    admins_collection = database.get_collection("admins")

    # Create unique index for email
    await admins_collection.create_index(
        [("email", 1)],
        unique=True,
        name="unique_admin_email_index"
    )
    logger.info("MongoDB client initialized.")
