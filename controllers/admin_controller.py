from fastapi import status
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from config.env_config import ADMIN_EMAIL, ADMIN_PASSWORD
from config.log_config import get_logger
from utils.exceptions import AuthError
from utils.jwt import create_jwt
from utils.security import hash_password, verify_password
from validation.content_types import AdminLogin

logger = get_logger("admin_api")


async def ensure_admin_account(db: AsyncIOMotorDatabase, email: str | None = ADMIN_EMAIL, password: str | None = ADMIN_PASSWORD):
    """Seed the first admin from the environment when none exists yet."""
    admins_collection = db.get_collection("admins")
    if await admins_collection.count_documents({}) > 0:
        return None

    if not email or not password:
        logger.warning("No admin account exists and ADMIN_EMAIL/ADMIN_PASSWORD are not set")
        return None

    try:
        result = await admins_collection.insert_one({
            "email": email.strip().lower(),
            "password": hash_password(password),
        })
    except DuplicateKeyError:
        # another worker seeded it first
        return None

    logger.info(f"Seeded admin account {email}")
    return str(result.inserted_id)


async def authenticate_admin(credentials: AdminLogin, db: AsyncIOMotorDatabase) -> tuple[str, dict]:
    admin = await db["admins"].find_one({"email": credentials.email.strip().lower()})

    if not admin or not verify_password(credentials.password, admin.get("password")):
        logger.warning(f"Failed admin login for {credentials.email}")
        raise AuthError()

    token = create_jwt(admin_id=str(admin["_id"]), role="admin")
    return token, admin


async def login_admin(credentials: AdminLogin, db: AsyncIOMotorDatabase):
    token, admin = await authenticate_admin(credentials, db)
    return JSONResponse(
        content={"message": "Login successful", "access_token": token, "token_type": "bearer", "email": admin["email"]},
        status_code=status.HTTP_200_OK
    )
