import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Public site address used to build gateway return URLs
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")

# Root directory for uploaded images (served as static files by the frontend)
UPLOAD_ROOT = os.getenv("UPLOAD_ROOT", "public")

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "EUR")

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

SUPPORTED_LOCALES: list[str] = ["en", "ru"]
DEFAULT_LOCALE = "en"
