import os

from config import env_list

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "visitor_registry"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# React dev server
CORS_ORIGINS = env_list("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")

TOP_VISITORS_LIMIT = int(os.getenv("TOP_VISITORS_LIMIT", "5"))

# Unicode TTF for PDF exports (e.g. DejaVuSans.ttf); unset = first installed candidate.
PDF_FONT_PATH = os.getenv("PDF_FONT_PATH") or None

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the demo admin/agent accounts on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
