from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from ..core.enums import Rank, Role
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} không hợp lệ")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} tối thiểu {min_len} ký tự")
    return value


def require_positive_amount(value, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, AttributeError):
        raise ValidationError(f"{field_name} không hợp lệ")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field_name} phải lớn hơn 0")
    return amount


def parse_rank(value: Optional[str]) -> Optional[Rank]:
    try:
        return Rank.parse(value)
    except ValueError:
        raise ValidationError("Chức vụ không hợp lệ")


def parse_role(value: Optional[str]) -> Role:
    try:
        return Role((value or "").strip())
    except ValueError:
        raise ValidationError("Loại tài khoản không hợp lệ")
