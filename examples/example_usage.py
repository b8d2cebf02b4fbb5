"""Ví dụ: dùng service layer (không qua Flask).

Đăng nhập bằng tài khoản admin rồi in bảng hiệu suất của tháng trước.
"""

from dotenv import load_dotenv

from config import load_settings

from src.performance_system.performance_system.common.datetime_utils import recent_periods
from src.performance_system.performance_system.container import build_container
from src.performance_system.performance_system.performance.service import records_for_display


def main():
    load_dotenv(override=False)
    settings = load_settings()
    container = build_container(db_config=settings.DB_CONFIG)

    admin = container.auth_service.verify(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    period = recent_periods(1)[0]
    views = container.performance_service.list_records(admin, period=period)
    for row in records_for_display(views):
        print(f"{row['employee_name']:<20} {row['final_score']!s:>8}  {row['level']}")


if __name__ == "__main__":
    main()
