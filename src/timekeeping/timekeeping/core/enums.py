from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from .constants import DEFAULT_PAY_RATE


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    ADMIN = "admin"
    USER = "user"


class Rank(str, Enum):
    """Chức vụ: quyết định hệ số lương theo giờ."""

    DIRECTOR = "Giám đốc"
    DEPUTY_DIRECTOR = "Phó Giám đốc"
    ASSISTANT = "Trợ lý"
    SECRETARY = "Thư ký"
    DEPARTMENT_HEAD = "Trưởng phòng"
    DEPUTY_HEAD = "Phó phòng"
    OFFICER = "Cảnh sát viên"
    RESERVE_OFFICER = "Sĩ quan dự bị"

    @property
    def pay_rate(self) -> Decimal:
        return _RANK_PAY_RATES[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Rank"]:
        """Map a form value to a rank; blank means "no rank"."""
        if value is None or not value.strip():
            return None
        return cls(value.strip())


_RANK_PAY_RATES = {
    Rank.DIRECTOR: Decimal("50000"),
    Rank.DEPUTY_DIRECTOR: Decimal("50000"),
    Rank.ASSISTANT: Decimal("25000"),
    Rank.SECRETARY: Decimal("21500"),
    Rank.DEPARTMENT_HEAD: Decimal("18000"),
    Rank.DEPUTY_HEAD: Decimal("14500"),
    Rank.OFFICER: Decimal("10714"),
    Rank.RESERVE_OFFICER: Decimal("10714"),
}


def pay_rate_for(rank: Optional[Rank]) -> Decimal:
    if rank is None:
        return DEFAULT_PAY_RATE
    return rank.pay_rate


# Quân hàm: chỉ hiển thị, không ảnh hưởng lương.
AVAILABLE_POSITIONS = (
    "Hạ sĩ",
    "Trung sĩ",
    "Thượng sĩ",
    "Thiếu úy",
    "Trung úy",
    "Thượng úy",
    "Đại úy",
    "Thiếu tá",
    "Trung tá",
    "Thượng tá",
    "Đại tá",
)


class ShiftStatus(str, Enum):
    """Trạng thái ca trực lưu trong tài liệu roster."""

    ON_DUTY = "ON_DUTY"
    ON_DUTY_ADMIN = "ON_DUTY_ADMIN"
    SHORT_UNPAID = "SHORT_UNPAID"
    SHORT_UNPAID_ADMIN = "SHORT_UNPAID_ADMIN"
    COMPLETED = "COMPLETED"
    DAILY_CAP_REACHED = "DAILY_CAP_REACHED"
    CLOSED_BY_ADMIN = "CLOSED_BY_ADMIN"
    AUTO_CLOSED = "AUTO_CLOSED"
    AUTO_CLOSED_ERROR = "AUTO_CLOSED_ERROR"

    @property
    def label(self) -> str:
        return _SHIFT_STATUS_LABELS[self]


_SHIFT_STATUS_LABELS = {
    ShiftStatus.ON_DUTY: "Đang On-duty",
    ShiftStatus.ON_DUTY_ADMIN: "Đang On-duty (Admin bật)",
    ShiftStatus.SHORT_UNPAID: "Ca dưới 1 tiếng – không tính lương",
    ShiftStatus.SHORT_UNPAID_ADMIN: "Ca dưới 1 tiếng – không tính lương (tắt bởi quản lý)",
    ShiftStatus.COMPLETED: "Hoàn thành ca",
    ShiftStatus.DAILY_CAP_REACHED: "Đủ 4 giờ hôm nay",
    ShiftStatus.CLOSED_BY_ADMIN: "Hoàn thành ca (Admin tắt)",
    ShiftStatus.AUTO_CLOSED: "Đã Đạt Giới Hạn (Hệ Thống Tự Động)",
    ShiftStatus.AUTO_CLOSED_ERROR: "Ca lỗi - Hệ thống tự chốt",
}

# Closed shifts that never count toward career or monthly totals.
UNPAID_SHIFT_STATUSES = frozenset(
    {ShiftStatus.SHORT_UNPAID, ShiftStatus.SHORT_UNPAID_ADMIN, ShiftStatus.AUTO_CLOSED_ERROR}
)


class DutyStatus(str, Enum):
    """Trạng thái trong ngày của một nhân sự (bảng quản trị / xuất Excel)."""

    ON_DUTY = "ON_DUTY"
    OFF_DUTY = "OFF_DUTY"
    NOT_STARTED = "NOT_STARTED"

    @property
    def label(self) -> str:
        return {
            DutyStatus.ON_DUTY: "Đang On Duty",
            DutyStatus.OFF_DUTY: "Đã Off Duty",
            DutyStatus.NOT_STARTED: "Chưa vào ca",
        }[self]


class AuditAction(str, Enum):
    """Loại hành động quản trị được ghi vào nhật ký."""

    CREATE_WORKER = "TẠO NHÂN SỰ"
    UPDATE_WORKER = "CẬP NHẬT"
    RENAME_WORKER = "ĐỔI TÊN"
    CHANGE_RANK = "CẬP NHẬT CHỨC VỤ"
    CHANGE_POSITION = "CẬP NHẬT QUÂN HÀM"
    CHANGE_PAY_RATE = "CẬP NHẬT HỆ SỐ LƯƠNG"
    CHANGE_ROLE = "CẬP NHẬT QUYỀN"
    RESET_PASSWORD = "ĐẶT LẠI MẬT KHẨU"
    TRASH_WORKER = "XÓA TẠM THỜI"
    RESTORE_WORKER = "KHÔI PHỤC"
    PURGE_WORKER = "XÓA VĨNH VIỄN (HÀNG LOẠT)"
    RESET_PAY = "RESET LƯƠNG"
    RESET_ALL_PAY = "RESET LƯƠNG TOÀN SERVER"
    RESET_DAY = "XÓA NGÀY CÔNG"
    DELETE_SHIFT = "XÓA CA TRỰC"
    ADMIN_CLOCK_IN = "BẬT ON-DUTY"
    ADMIN_CLOCK_OUT = "TẮT ON-DUTY"
