import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./boatbook.db")
# Hosted Postgres URLs come as postgres:// or postgresql://; the engine drives psycopg 3
for _prefix in ("postgres://", "postgresql://"):
    if DATABASE_URL.startswith(_prefix):
        DATABASE_URL = "postgresql+psycopg://" + DATABASE_URL[len(_prefix) :]
        break

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# Public base URL of this deployment - used for gateway return URLs and QR codes
APP_URL = os.getenv("APP_URL", "http://localhost:8000").rstrip("/")

# Frontend base URL for booking page redirects
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")

# Bayarcash Configuration
# Production unless explicitly set to "true"
BAYARCASH_SANDBOX = os.getenv("BAYARCASH_SANDBOX", "false").lower() == "true"
BAYARCASH_PORTAL_KEY = os.getenv("BAYARCASH_PORTAL_KEY", "")
BAYARCASH_API_TOKEN = os.getenv("BAYARCASH_API_TOKEN", "")
BAYARCASH_API_SECRET_KEY = os.getenv("BAYARCASH_API_SECRET_KEY", "")
BAYARCASH_TIMEOUT_SECONDS = float(os.getenv("BAYARCASH_TIMEOUT_SECONDS", "20"))

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "MYR")

# Cron - shared secret for the auto-cancel endpoint (x-api-key or Bearer)
CRON_SECRET = os.getenv("CRON_SECRET")

# Bookings
REF_CODE_PREFIX = os.getenv("REF_CODE_PREFIX", "NTT")
# Slot times are wall-clock times at the jetty
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Asia/Kuala_Lumpur")

# Manifest / ticket fallbacks when a business has not configured its boat yet
DEFAULT_BOAT_NAME = os.getenv("DEFAULT_BOAT_NAME", "NASROM CABIN 01")
DEFAULT_BOAT_REG_NO = os.getenv("DEFAULT_BOAT_REG_NO", "TRK 1234")
DEFAULT_DESTINATION = os.getenv("DEFAULT_DESTINATION", "JETI TOK BALI - PULAU PERHENTIAN")
DEFAULT_OPERATOR_NAME = os.getenv("DEFAULT_OPERATOR_NAME", "NASROM TRAVEL & TOURS SDN BHD")
DEFAULT_CREW_COUNT = int(os.getenv("DEFAULT_CREW_COUNT", "2"))

# Rate limiting (public booking endpoints)
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

# CORS
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")
    if origin.strip()
]
