import os

from .config import db_config

SECRET_KEY = "test-secret"

DB_CONFIG = db_config()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

DEFAULT_REQUIRED_ATTENDANCE = 22
DEFAULT_ONSITE_PERFORMANCE = 3.0
DEFAULT_ANNOTATION_SCORE = 80.0

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"
