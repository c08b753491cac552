from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import Iterable, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..audit.service import record
from ..common.datetime_utils import date_key, display_date, now_local
from ..common.validators import (
    parse_rank,
    parse_role,
    require_min_length,
    require_non_empty,
    require_positive_amount,
)
from ..core.constants import DEFAULT_POSITION, DEFAULT_RESET_PASSWORD, MIN_PASSWORD_LENGTH
from ..core.enums import AuditAction, Rank, Role, pay_rate_for
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    RecordNotFound,
    ValidationError,
    WorkerNotFound,
)
from ..ledger.service import recompute_totals
from ..storage.document import RosterDocument
from ..storage.repository import RosterRepository
from .model import Worker


@dataclass(frozen=True)
class SessionWorker:
    """What we store into Flask session after login."""

    worker_id: int
    username: str
    display_name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_worker(cls, w: Worker) -> "SessionWorker":
        return cls(worker_id=w.worker_id, username=w.username, display_name=w.display_name, role=w.role)


class AuthService:
    """Use case: authenticate worker (login) and self-service account changes."""

    def __init__(self, roster: RosterRepository):
        self._roster = roster

    def authenticate(self, username: str, password: str) -> SessionWorker:
        worker = None
        for w in self._roster.load().workers:
            if w.username == (username or "").strip():
                worker = w
                break
        if not worker:
            raise AuthenticationError()

        try:
            ok = check_password_hash(worker.password_hash, password or "")
        except (TypeError, ValueError):
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError()
        return SessionWorker.from_worker(worker)

    def get_session_worker(self, worker_id: int) -> Optional[SessionWorker]:
        worker = self._roster.load().find_worker(int(worker_id))
        return SessionWorker.from_worker(worker) if worker else None

    def change_own_password(self, worker_id: int, new_password: str) -> None:
        require_min_length(new_password, "Mật khẩu", MIN_PASSWORD_LENGTH)
        with self._roster.transaction() as doc:
            worker = doc.find_worker(int(worker_id))
            if not worker:
                raise WorkerNotFound()
            worker.password_hash = generate_password_hash(new_password)

    def rename_self(self, worker_id: int, new_name: str) -> str:
        new_name = require_non_empty(new_name, "Tên in-game")
        with self._roster.transaction() as doc:
            worker = doc.find_worker(int(worker_id))
            if not worker:
                raise WorkerNotFound()
            _ensure_unique_display_name(doc, new_name, worker.worker_id)
            worker.display_name = new_name
        return new_name


def _ensure_unique_display_name(doc: RosterDocument, name: str, worker_id: int) -> None:
    for w in doc.workers:
        if w.worker_id != worker_id and w.display_name.lower() == name.lower():
            raise ValidationError("Tên hiển thị đã tồn tại")


class RosterService:
    """Use case: manage personnel (admin). Every change is written to the audit log."""

    def __init__(self, roster: RosterRepository, *, tz: tzinfo):
        self._roster = roster
        self._tz = tz

    def _now(self) -> datetime:
        return now_local(self._tz)

    @staticmethod
    def _require_admin(actor: SessionWorker) -> None:
        if not actor or not actor.is_admin:
            raise AuthorizationError()

    @staticmethod
    def _require_worker(doc: RosterDocument, worker_id: int) -> Worker:
        worker = doc.find_worker(int(worker_id))
        if not worker:
            raise WorkerNotFound()
        return worker

    def _audit(self, doc: RosterDocument, actor: SessionWorker, action: AuditAction, target: str, detail: str = "") -> None:
        record(doc, actor=actor.username, action=action, target=target, detail=detail, now=self._now())

    # ---- queries -------------------------------------------------------------

    def list_trash(self) -> List[Worker]:
        return list(self._roster.load().trash)

    def get_worker(self, worker_id: int) -> Worker:
        return self._require_worker(self._roster.load(), worker_id)

    # ---- personnel -----------------------------------------------------------

    def create_worker(
        self,
        actor: SessionWorker,
        *,
        username: str,
        password: str,
        display_name: str,
        rank: Optional[str],
        position: Optional[str] = None,
    ) -> int:
        self._require_admin(actor)
        username = require_non_empty(username, "Tên đăng nhập")
        display_name = require_non_empty(display_name, "Tên hiển thị")
        require_min_length(password, "Mật khẩu", MIN_PASSWORD_LENGTH)
        parsed_rank = parse_rank(rank)
        if parsed_rank is None:
            raise ValidationError("Vui lòng chọn chức vụ")

        with self._roster.transaction() as doc:
            if doc.find_by_username(username):
                raise ValidationError("Tên đăng nhập đã tồn tại")
            _ensure_unique_display_name(doc, display_name, worker_id=-1)

            worker = Worker(
                worker_id=doc.allocate_worker_id(),
                username=username,
                password_hash=generate_password_hash(password),
                display_name=display_name,
                role=Role.USER,
                rank=parsed_rank,
                position=(position or "").strip() or DEFAULT_POSITION,
                pay_rate=pay_rate_for(parsed_rank),
                created_at=self._now(),
            )
            doc.workers.append(worker)
            self._audit(doc, actor, AuditAction.CREATE_WORKER, display_name, f"Chức vụ: {parsed_rank.value}")
            return worker.worker_id

    def update_worker(
        self,
        actor: SessionWorker,
        worker_id: int,
        *,
        display_name: Optional[str] = None,
        rank: Optional[str] = None,
        position: Optional[str] = None,
    ) -> None:
        """Edit from the admin modal; blank fields are left unchanged."""

        self._require_admin(actor)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            changes = []
            if display_name and display_name.strip() and display_name.strip() != worker.display_name:
                _ensure_unique_display_name(doc, display_name.strip(), worker.worker_id)
                changes.append(f'Tên "{worker.display_name}" → "{display_name.strip()}"')
                worker.display_name = display_name.strip()
            if rank and rank.strip():
                new_rank = parse_rank(rank)
                if new_rank != worker.rank:
                    changes.append(f"Chức vụ → {new_rank.value}")
                    worker.rank = new_rank
                    worker.pay_rate = pay_rate_for(new_rank)
            if position is not None and position.strip() and position.strip() != worker.position:
                changes.append(f"Quân hàm → {position.strip()}")
                worker.position = position.strip()
            self._audit(doc, actor, AuditAction.UPDATE_WORKER, worker.display_name, "; ".join(changes) or "Chỉnh sửa thông tin")

    def rename_worker(self, actor: SessionWorker, worker_id: int, new_name: str) -> None:
        self._require_admin(actor)
        new_name = require_non_empty(new_name, "Tên hiển thị")
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            _ensure_unique_display_name(doc, new_name, worker.worker_id)
            old_name = worker.display_name
            worker.display_name = new_name
            self._audit(doc, actor, AuditAction.RENAME_WORKER, new_name, f'Từ "{old_name}"')

    def change_rank(self, actor: SessionWorker, worker_id: int, rank: Optional[str]) -> Decimal:
        """Set the job title and re-derive the pay rate; blank resets to the default rate."""

        self._require_admin(actor)
        new_rank = parse_rank(rank)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            old_rank = worker.rank
            worker.rank = new_rank
            worker.pay_rate = pay_rate_for(new_rank)

            if old_rank != new_rank:
                detail = (
                    f'Chức vụ từ "{_rank_label(old_rank)}" → "{_rank_label(new_rank)}"'
                    f" | Hệ số lương mới: {worker.pay_rate}$/h"
                )
            else:
                detail = "Không thay đổi chức vụ"
            self._audit(doc, actor, AuditAction.CHANGE_RANK, worker.display_name, detail)
            return worker.pay_rate

    def change_position(self, actor: SessionWorker, worker_id: int, position: Optional[str]) -> None:
        self._require_admin(actor)
        new_position = (position or "").strip() or DEFAULT_POSITION
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            old_position = worker.position
            worker.position = new_position
            detail = (
                f'Quân hàm từ "{old_position}" → "{new_position}"'
                if old_position != new_position
                else "Không thay đổi quân hàm"
            )
            self._audit(doc, actor, AuditAction.CHANGE_POSITION, worker.display_name, detail)

    def set_pay_rate(self, actor: SessionWorker, worker_id: int, rate) -> Decimal:
        self._require_admin(actor)
        amount = require_positive_amount(rate, "Hệ số lương")
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            old_rate = worker.pay_rate
            worker.pay_rate = amount
            self._audit(doc, actor, AuditAction.CHANGE_PAY_RATE, worker.display_name, f"{old_rate}$ → {amount}$")
            return amount

    def change_role(self, actor: SessionWorker, worker_id: int, role: str) -> None:
        self._require_admin(actor)
        new_role = parse_role(role)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            if worker.worker_id == actor.worker_id and new_role != Role.ADMIN:
                raise ValidationError("Không thể tự hạ quyền của chính mình")
            worker.role = new_role
            self._audit(doc, actor, AuditAction.CHANGE_ROLE, worker.display_name, f"Quyền: {new_role.value}")

    def reset_password(self, actor: SessionWorker, worker_id: int) -> None:
        self._require_admin(actor)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            worker.password_hash = generate_password_hash(DEFAULT_RESET_PASSWORD)
            self._audit(doc, actor, AuditAction.RESET_PASSWORD, worker.display_name)

    # ---- trash ---------------------------------------------------------------

    def trash_worker(self, actor: SessionWorker, worker_id: int) -> None:
        self._require_admin(actor)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            if worker.worker_id == actor.worker_id:
                raise ValidationError("Không thể tự xóa tài khoản của mình")
            worker.deleted_at = self._now()
            doc.workers.remove(worker)
            doc.trash.append(worker)
            self._audit(doc, actor, AuditAction.TRASH_WORKER, worker.display_name, "Vào thùng rác")

    def restore_worker(self, actor: SessionWorker, worker_id: int) -> None:
        self._require_admin(actor)
        with self._roster.transaction() as doc:
            worker = doc.find_trashed(int(worker_id))
            if not worker:
                raise WorkerNotFound("Không tìm thấy nhân sự trong thùng rác")
            worker.deleted_at = None
            doc.trash.remove(worker)
            doc.workers.append(worker)
            self._audit(doc, actor, AuditAction.RESTORE_WORKER, worker.display_name, "Đã đưa sĩ quan trở lại từ thùng rác")

    def purge_workers(self, actor: SessionWorker, worker_ids: Iterable) -> int:
        """Permanently delete the selected workers from the trash."""

        self._require_admin(actor)
        try:
            wanted = {int(i) for i in worker_ids}
        except (TypeError, ValueError):
            raise ValidationError("Danh sách nhân sự không hợp lệ")
        if not wanted:
            raise ValidationError("Chưa chọn nhân sự nào")

        with self._roster.transaction() as doc:
            purged = [w for w in doc.trash if w.worker_id in wanted]
            doc.trash = [w for w in doc.trash if w.worker_id not in wanted]
            for w in purged:
                self._audit(doc, actor, AuditAction.PURGE_WORKER, w.display_name, "Dữ liệu đã bị dọn dẹp sạch")
            return len(purged)

    # ---- pay resets / ad-hoc ledger edits -------------------------------------

    def reset_worker_pay(self, actor: SessionWorker, worker_id: int) -> None:
        self._require_admin(actor)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            _clear_ledger(worker)
            self._audit(doc, actor, AuditAction.RESET_PAY, worker.display_name)

    def reset_all_pay(self, actor: SessionWorker) -> int:
        self._require_admin(actor)
        with self._roster.transaction() as doc:
            for worker in doc.workers:
                _clear_ledger(worker)
            self._audit(doc, actor, AuditAction.RESET_ALL_PAY, "Toàn server", f"{len(doc.workers)} nhân sự")
            return len(doc.workers)

    def reset_day(self, actor: SessionWorker, worker_id: int, work_date: date) -> int:
        """Delete every shift of one day, then rebuild totals from what remains."""

        self._require_admin(actor)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            before = len(worker.shifts)
            worker.shifts = [s for s in worker.shifts if s.work_date != work_date]
            removed = before - len(worker.shifts)
            if not removed:
                raise RecordNotFound(f"Không có ca trực ngày {display_date(work_date)}")
            recompute_totals(worker)
            self._audit(doc, actor, AuditAction.RESET_DAY, worker.display_name, f"Ngày {date_key(work_date)}: {removed} ca")
            return removed

    def delete_shift(self, actor: SessionWorker, worker_id: int, shift_id: str) -> None:
        self._require_admin(actor)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            shift = worker.find_shift(shift_id)
            if not shift:
                raise RecordNotFound()
            worker.shifts.remove(shift)
            recompute_totals(worker)
            self._audit(
                doc,
                actor,
                AuditAction.DELETE_SHIFT,
                worker.display_name,
                f"Ca {date_key(shift.work_date)}: {shift.hours}h / {shift.wage}$",
            )


def _clear_ledger(worker: Worker) -> None:
    worker.shifts = []
    worker.monthly_totals = []
    worker.career_total = Decimal("0")


def _rank_label(rank: Optional[Rank]) -> str:
    return rank.value if rank else "Không có"
