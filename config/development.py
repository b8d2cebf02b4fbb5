import os

from .config import Config, db_config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

DEFAULT_REQUIRED_ATTENDANCE = Config.DEFAULT_REQUIRED_ATTENDANCE
DEFAULT_ONSITE_PERFORMANCE = Config.DEFAULT_ONSITE_PERFORMANCE
DEFAULT_ANNOTATION_SCORE = Config.DEFAULT_ANNOTATION_SCORE

ADMIN_EMAIL = Config.ADMIN_EMAIL
ADMIN_PASSWORD = Config.ADMIN_PASSWORD
