import os
from dotenv import load_dotenv

load_dotenv()

# Development or Production Environment
ENVIRONMENT = os.environ.get("ENVIRONMENT", "Development")
PORT = int(os.environ.get("PORT", 8000))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG" if ENVIRONMENT == "Development" else "INFO")


# MongoDB configuration
MONGODB_URL = os.environ.get("MONGODB_URL") or "mongodb://localhost:27017"
MONGODB_DB_NAME = os.environ.get("MONGO_DB_NAME", "portfolio_db")


# Admin authentication
JWT_SECRET = os.environ.get("JWT_SECRET", "change-me-in-production-portfolio-jwt-secret")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_MINUTES = int(os.environ.get("JWT_EXPIRATION_MINUTES", 60 * 12))

# First admin account, seeded when the admins collection is empty
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD")


# Public site
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")
CORS_ORIGINS = [origin.strip() for origin in os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",") if origin.strip()]


# Uploads (GridFS)
UPLOAD_BUCKET = os.environ.get("UPLOAD_BUCKET", "uploads")
MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
UPLOAD_CHUNK_BYTES = int(os.environ.get("UPLOAD_CHUNK_BYTES", 256 * 1024))


# Contact form notifications (optional)
SMTP_HOST = os.environ.get("SMTP_HOST")
SMTP_PORT = int(os.environ.get("SMTP_PORT", 587))
SMTP_USERNAME = os.environ.get("SMTP_USERNAME")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD")
CONTACT_NOTIFY_EMAIL = os.environ.get("CONTACT_NOTIFY_EMAIL")
