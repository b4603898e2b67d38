import os

from config import env_list

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "visitor_registry"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "visitor_registry"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

CORS_ORIGINS = env_list("CORS_ORIGINS")

TOP_VISITORS_LIMIT = int(os.getenv("TOP_VISITORS_LIMIT", "5"))

# Unicode TTF for PDF exports (e.g. DejaVuSans.ttf); unset = first installed candidate.
PDF_FONT_PATH = os.getenv("PDF_FONT_PATH") or None

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
