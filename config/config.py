import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "khoa_bi_mat_cua_nhom"

    # Cấu hình DB
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "performance_db")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Giá trị mặc định khi tạo bảng hiệu suất theo nhóm
    DEFAULT_REQUIRED_ATTENDANCE = int(os.environ.get("DEFAULT_REQUIRED_ATTENDANCE", "22"))
    DEFAULT_ONSITE_PERFORMANCE = float(os.environ.get("DEFAULT_ONSITE_PERFORMANCE", "3"))
    DEFAULT_ANNOTATION_SCORE = float(os.environ.get("DEFAULT_ANNOTATION_SCORE", "80"))

    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@example.com")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin123")


def db_config() -> dict:
    return {
        "host": Config.DB_HOST,
        "port": Config.DB_PORT,
        "user": Config.DB_USER,
        "password": Config.DB_PASSWORD,
        "database": Config.DB_NAME,
    }
