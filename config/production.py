import os

from .config import Config, db_config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

DEFAULT_REQUIRED_ATTENDANCE = Config.DEFAULT_REQUIRED_ATTENDANCE
DEFAULT_ONSITE_PERFORMANCE = Config.DEFAULT_ONSITE_PERFORMANCE
DEFAULT_ANNOTATION_SCORE = Config.DEFAULT_ANNOTATION_SCORE

ADMIN_EMAIL = Config.ADMIN_EMAIL
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
