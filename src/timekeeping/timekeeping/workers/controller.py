from __future__ import annotations

from flask import Flask, session

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.logging_config import get_logger
from ..common.web import admin_required, current_worker, login_required, ok, payload, store_session
from ..core.enums import AVAILABLE_POSITIONS, Rank
from ..core.exceptions import AuthenticationError, MalformedTimestamp, ValidationError
from ..container import Container

log = get_logger("workers")


def register(app: Flask, container: Container) -> None:
    @app.before_request
    def drop_stale_session():
        # Trashed or purged workers lose their session on the next request;
        # role and name changes apply on the next request too.
        if "worker_id" not in session:
            return None
        s_worker = container.auth_service.get_session_worker(int(session["worker_id"]))
        if s_worker is None:
            session.clear()
        else:
            store_session(s_worker)
        return None

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = payload()
        username = data.get("username", "")
        password = data.get("password", "")

        try:
            s_worker = container.auth_service.authenticate(username, password)
        except AuthenticationError:
            log.info("failed login for %r", username)
            raise

        session.clear()
        session.permanent = True
        store_session(s_worker)
        return ok(
            "Đăng nhập thành công!",
            user={"id": s_worker.worker_id, "display_name": s_worker.display_name, "role": s_worker.role.value},
        )

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok("Đã đăng xuất hệ thống.")

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        worker = container.roster_service.get_worker(int(session["worker_id"]))
        today = now_local(container.tz).date()
        return ok(user=container.payroll_report_service.worker_to_ui(worker, today))

    @app.route("/profile/update", methods=["POST"], endpoint="profile_update")
    @login_required
    def profile_update():
        new_name = container.auth_service.rename_self(int(session["worker_id"]), payload().get("displayName", ""))
        session["name"] = new_name
        return ok("Cập nhật thành công!", display_name=new_name)

    @app.route("/settings/password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        container.auth_service.change_own_password(int(session["worker_id"]), payload().get("newPassword", ""))
        return ok("Đổi mật khẩu thành công!")

    # ---- admin: personnel -----------------------------------------------------

    @app.route("/admin/options", methods=["GET"], endpoint="admin_options")
    @admin_required
    def admin_options():
        return ok(ranks=[r.value for r in Rank], positions=list(AVAILABLE_POSITIONS))

    @app.route("/admin/users", methods=["POST"], endpoint="add_worker")
    @admin_required
    def add_worker():
        data = payload()
        worker_id = container.roster_service.create_worker(
            current_worker(),
            username=data.get("username", ""),
            password=data.get("password", ""),
            display_name=data.get("displayName", ""),
            rank=data.get("rank"),
            position=data.get("position"),
        )
        return ok("Thêm nhân sự thành công!", id=worker_id), 201

    @app.route("/admin/users/<int:worker_id>/update", methods=["POST"], endpoint="update_worker")
    @admin_required
    def update_worker(worker_id: int):
        data = payload()
        container.roster_service.update_worker(
            current_worker(),
            worker_id,
            display_name=data.get("displayName"),
            rank=data.get("rank"),
            position=data.get("position"),
        )
        return ok("Đã cập nhật thông tin nhân sự.")

    @app.route("/admin/users/<int:worker_id>/rename", methods=["POST"], endpoint="rename_worker")
    @admin_required
    def rename_worker(worker_id: int):
        container.roster_service.rename_worker(current_worker(), worker_id, payload().get("displayName", ""))
        return ok("Đã đổi tên.")

    @app.route("/admin/users/<int:worker_id>/rank", methods=["POST"], endpoint="change_rank")
    @admin_required
    def change_rank(worker_id: int):
        rate = container.roster_service.change_rank(current_worker(), worker_id, payload().get("rank"))
        return ok("Cập nhật chức vụ thành công!", pay_rate=float(rate))

    @app.route("/admin/users/<int:worker_id>/position", methods=["POST"], endpoint="change_position")
    @admin_required
    def change_position(worker_id: int):
        container.roster_service.change_position(current_worker(), worker_id, payload().get("position"))
        return ok("Cập nhật quân hàm thành công!")

    @app.route("/admin/users/<int:worker_id>/pay-rate", methods=["POST"], endpoint="set_pay_rate")
    @admin_required
    def set_pay_rate(worker_id: int):
        rate = container.roster_service.set_pay_rate(current_worker(), worker_id, payload().get("rate"))
        return ok("Cập nhật hệ số lương thành công!", pay_rate=float(rate))

    @app.route("/admin/users/<int:worker_id>/role", methods=["POST"], endpoint="change_role")
    @admin_required
    def change_role(worker_id: int):
        container.roster_service.change_role(current_worker(), worker_id, payload().get("role"))
        return ok("Cập nhật quyền thành công!")

    @app.route("/admin/users/<int:worker_id>/reset-password", methods=["POST"], endpoint="reset_password")
    @admin_required
    def reset_password(worker_id: int):
        container.roster_service.reset_password(current_worker(), worker_id)
        return ok("Đã đặt lại mật khẩu về mặc định.")

    @app.route("/admin/users/<int:worker_id>/delete", methods=["POST"], endpoint="trash_worker")
    @admin_required
    def trash_worker(worker_id: int):
        container.roster_service.trash_worker(current_worker(), worker_id)
        return ok("Đã chuyển nhân sự vào thùng rác.")

    # ---- admin: trash ---------------------------------------------------------

    @app.route("/admin/trash", methods=["GET"], endpoint="list_trash")
    @admin_required
    def list_trash():
        trash = [
            {
                "id": w.worker_id,
                "display_name": w.display_name,
                "username": w.username,
                "deleted_at": w.deleted_at.isoformat() if w.deleted_at else None,
            }
            for w in container.roster_service.list_trash()
        ]
        return ok(trash=trash)

    @app.route("/admin/trash/<int:worker_id>/restore", methods=["POST"], endpoint="restore_worker")
    @admin_required
    def restore_worker(worker_id: int):
        container.roster_service.restore_worker(current_worker(), worker_id)
        return ok("Khôi phục thành công!")

    @app.route("/admin/trash/bulk-delete", methods=["POST"], endpoint="purge_workers")
    @admin_required
    def purge_workers():
        ids = payload().get("ids") or []
        if isinstance(ids, str):
            ids = [i for i in ids.split(",") if i.strip()]
        count = container.roster_service.purge_workers(current_worker(), ids)
        return ok(f"Đã xóa vĩnh viễn {count} nhân sự.", deleted=count)

    # ---- admin: pay resets / ledger edits ---------------------------------------

    @app.route("/admin/pay/<int:worker_id>/reset", methods=["POST"], endpoint="reset_worker_pay")
    @admin_required
    def reset_worker_pay(worker_id: int):
        container.roster_service.reset_worker_pay(current_worker(), worker_id)
        return ok("Đã reset lương nhân sự.")

    @app.route("/admin/pay/reset-all", methods=["POST"], endpoint="reset_all_pay")
    @admin_required
    def reset_all_pay():
        count = container.roster_service.reset_all_pay(current_worker())
        return ok("Đã reset lương toàn server.", workers=count)

    @app.route("/admin/pay/<int:worker_id>/reset-day", methods=["POST"], endpoint="reset_day")
    @admin_required
    def reset_day(worker_id: int):
        try:
            work_date = parse_iso_date(payload().get("date", ""))
        except MalformedTimestamp as e:
            raise ValidationError("Ngày phải có dạng YYYY-MM-DD") from e
        removed = container.roster_service.reset_day(current_worker(), worker_id, work_date)
        return ok("Đã xóa ngày công.", removed=removed)

    @app.route("/admin/shifts/<int:worker_id>/<shift_id>/delete", methods=["POST"], endpoint="delete_shift")
    @admin_required
    def delete_shift(worker_id: int, shift_id: str):
        container.roster_service.delete_shift(current_worker(), worker_id, shift_id)
        return ok("Đã xóa ca trực.")

    @app.route("/admin/logs", methods=["GET"], endpoint="admin_logs")
    @admin_required
    def admin_logs():
        svc = container.audit_log_service
        return ok(logs=[svc.to_ui(e) for e in svc.list_recent()])
