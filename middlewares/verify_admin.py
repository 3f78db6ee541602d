from fastapi import Request, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from utils.jwt import decode_jwt
from config.db import get_database  # Dependency that returns `AsyncIOMotorDatabase`

ACCESS_TOKEN_COOKIE = "access_token"


def extract_token(request: Request) -> str | None:
    # API clients send a bearer header, the dashboard pages carry a cookie
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


async def find_admin(token: str, db: AsyncIOMotorDatabase) -> dict | None:
    payload = decode_jwt(token)
    if not payload or not ObjectId.is_valid(payload.get("admin_id", "")):
        return None
    return await db["admins"].find_one({"_id": ObjectId(payload["admin_id"])})


async def auth_required(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    token = extract_token(request)

    if not token:
        raise HTTPException(status_code=401, detail="Missing or invalid token")

    admin = await find_admin(token, db)

    if not admin:
        raise HTTPException(status_code=403, detail="Token invalid or expired")

    request.state.admin = admin
    return admin


async def optional_admin(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Like ``auth_required`` but returns None instead of failing, for page redirects."""
    token = extract_token(request)
    if not token:
        return None
    return await find_admin(token, db)
