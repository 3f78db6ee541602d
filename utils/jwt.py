import jwt
from datetime import datetime, timedelta, timezone
from config.env_config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRATION_MINUTES


# JWT creation
def create_jwt(admin_id: str, role: str = "admin") -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "admin_id": admin_id,
        "role": role,
        "exp": now + timedelta(minutes=JWT_EXPIRATION_MINUTES),
        "iat": now
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


# JWT decoding
def decode_jwt(token: str) -> dict | None:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
