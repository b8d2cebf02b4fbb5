import importlib
import os
from types import ModuleType


def get_settings_module() -> str:
    # Lấy giá trị môi trường từ biến APP_ENV, mặc định là 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def load_settings() -> ModuleType:
    """Import the settings module for the current APP_ENV.

    Call after ``load_dotenv`` so values from ``.env`` are visible.
    """
    return importlib.import_module(get_settings_module())
