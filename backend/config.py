import os
from dotenv import load_dotenv

load_dotenv()

APP_NAME = os.getenv("APP_NAME", "Ascend")

# --- Identity provider tokens ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_ISSUER = os.getenv("JWT_ISSUER") or None  # verified only when set

# --- Database ---
# Default to local SQLite, but prefer environment variable
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/ascend.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Gamification ---
# Attempts for an XP award that keeps losing the optimistic version check
AWARD_MAX_RETRIES = int(os.getenv("AWARD_MAX_RETRIES", "5"))

# Lifetime of tokens minted by create_token (local development and tests)
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "720"))
