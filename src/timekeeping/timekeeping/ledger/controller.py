from __future__ import annotations

from flask import Flask, session

from ..common.datetime_utils import now_local
from ..common.logging_config import get_logger
from ..common.web import admin_required, current_worker, login_required, ok
from ..core.constants import DISPLAY_TIME_FORMAT
from ..core.exceptions import StorageError
from ..container import Container

log = get_logger("ledger")


def register(app: Flask, container: Container) -> None:
    @app.before_request
    def sweep_session_worker():
        """Close the logged-in worker's abandoned shifts before serving anything."""
        if "worker_id" not in session:
            return None
        try:
            container.ledger_service.sweep_for_worker(int(session["worker_id"]))
        except StorageError:
            # serve the request anyway
            log.exception("per-request sweep failed for worker %s", session.get("worker_id"))
        return None

    @app.route("/attendance", methods=["GET"], endpoint="attendance")
    @login_required
    def attendance():
        worker = container.roster_service.get_worker(int(session["worker_id"]))
        today = now_local(container.tz).date()
        report = container.payroll_report_service
        s = report.attendance_summary(worker, today)
        return ok(
            summary={
                "today_hours": float(s.today_hours),
                "remaining_hours": float(s.remaining_hours),
                "on_duty": s.on_duty,
                "can_clock_in": s.can_clock_in,
                "month_hours": float(s.month_hours),
                "month_salary": float(s.month_wage),
                "pay_rate": float(s.pay_rate),
                "career_total": float(s.career_total),
            },
            history=report.history_to_ui(worker),
        )

    @app.route("/attendance/check", methods=["POST"], endpoint="attendance_check")
    @login_required
    def attendance_check():
        result = container.ledger_service.toggle_duty(int(session["worker_id"]))
        shift = container.payroll_report_service.shift_to_ui(result.shift)
        if result.clocked_in:
            return ok("Đã vào ca!", action="on", shift=shift)
        return ok(f"Đã tan ca: {result.shift.status.label}", action="off", shift=shift)

    @app.route("/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        result = container.ledger_service.clock_in(int(session["worker_id"]))
        message = "Đã vào ca!" if result.created else "Bạn đang trong ca trực"
        return ok(message, created=result.created, shift=container.payroll_report_service.shift_to_ui(result.shift))

    @app.route("/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        shift = container.ledger_service.clock_out(int(session["worker_id"]))
        return ok(f"Đã tan ca: {shift.status.label}", shift=container.payroll_report_service.shift_to_ui(shift))

    @app.route("/onduty", methods=["GET"], endpoint="onduty")
    @login_required
    def onduty():
        today = now_local(container.tz).date()
        doc = container.roster_repo.load()
        workers = []
        for w in container.payroll_report_service.on_duty(doc, today):
            shift = w.open_shift_on(today)
            workers.append(
                {
                    "id": w.worker_id,
                    "display_name": w.display_name,
                    "title": w.title,
                    "on_time": shift.clock_in.strftime(DISPLAY_TIME_FORMAT) if shift.clock_in else "--:--",
                }
            )
        return ok(workers=workers, count=len(workers))

    @app.route("/admin/duty/<int:worker_id>/on", methods=["POST"], endpoint="admin_duty_on")
    @admin_required
    def admin_duty_on(worker_id: int):
        container.ledger_service.admin_clock_in(worker_id, actor=current_worker().username)
        return ok("Đã bật On-duty cho nhân sự.")

    @app.route("/admin/duty/<int:worker_id>/off", methods=["POST"], endpoint="admin_duty_off")
    @admin_required
    def admin_duty_off(worker_id: int):
        shift = container.ledger_service.admin_clock_out(worker_id, actor=current_worker().username)
        return ok(
            f"Đã tắt On-duty: {shift.status.label}",
            hours=float(shift.hours),
            salary=float(shift.wage),
        )
