from __future__ import annotations

from typing import Optional


def score_level(score: Optional[float]) -> str:
    """Xếp loại hiển thị theo điểm tổng."""
    if score is None:
        return "Chưa đánh giá"
    if score >= 90:
        return "Xuất sắc"
    if score >= 75:
        return "Tốt"
    if score >= 60:
        return "Đạt"
    return "Cần cải thiện"
