"""
Configuration settings for SmartStudy
"""
import os
import secrets
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base paths
BASE_DIR = Path(os.getenv("SMARTSTUDY_HOME", str(Path.home() / ".smartstudy")))
DATA_DIR = BASE_DIR / "data"
LOGS_DIR = BASE_DIR / "logs"

# Create directories if they don't exist
for dir_path in [DATA_DIR, LOGS_DIR]:
    dir_path.mkdir(parents=True, exist_ok=True)

# API Configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", 8000))
API_VERSION = os.getenv("API_VERSION", "v1")
DEBUG_MODE = os.getenv("DEBUG_MODE", "False").lower() == "true"

# =============================================================================
# Storage Settings
# =============================================================================
# Backend: memory (process lifetime only), local (JSON files), supabase (hosted)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()
LOCAL_STORAGE_DIR = Path(os.getenv("LOCAL_STORAGE_DIR", str(DATA_DIR / "storage")))
LOCAL_STORAGE_PREFIX = os.getenv("LOCAL_STORAGE_PREFIX", "smartstudy")

# Supabase. Every table query carries the caller's access token, so RLS applies
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
# HS256 projects verify tokens with this secret; otherwise the project JWKS is used
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")

# Auth
MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", 6))
PASSWORD_HASH_ITERATIONS = int(os.getenv("PASSWORD_HASH_ITERATIONS", 100_000))

# Bearer tokens issued by the local store. Unset means a random per-process secret,
# so tokens stop working when the server restarts
JWT_SECRET = os.getenv("JWT_SECRET") or secrets.token_urlsafe(32)
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "smartstudy")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", 60 * 24))

# =============================================================================
# External Lookup APIs (free, no key required)
# =============================================================================
DICTIONARY_API_URL = os.getenv("DICTIONARY_API_URL", "https://api.dictionaryapi.dev/api/v2")
TRIVIA_API_URL = os.getenv("TRIVIA_API_URL", "https://opentdb.com")
TRIVIA_MAX_QUESTIONS = int(os.getenv("TRIVIA_MAX_QUESTIONS", 50))
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", 10))
HTTP_USER_AGENT = os.getenv("HTTP_USER_AGENT", "SmartStudy/1.0")

# API Rate Limiting
RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", 100))
RATE_LIMIT_PER_HOUR = int(os.getenv("RATE_LIMIT_PER_HOUR", 1000))
LOOKUP_RATE_LIMIT = os.getenv("LOOKUP_RATE_LIMIT", "30/minute")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = Path(os.getenv("LOG_FILE", str(LOGS_DIR / "smartstudy.log")))
LOG_ROTATION = os.getenv("LOG_ROTATION", "10 MB")
LOG_RETENTION = os.getenv("LOG_RETENTION", "7 days")
# Write the file sink as one JSON object per line
LOG_JSON = os.getenv("LOG_JSON", "False").lower() == "true"
