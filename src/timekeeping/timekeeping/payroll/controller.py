from __future__ import annotations

from flask import Flask, session

from ..common.datetime_utils import now_local
from ..common.web import admin_required, login_required, ok
from ..container import Container
from .export import XLSX_MIMETYPE, build_payroll_workbook, export_filename


def register(app: Flask, container: Container) -> None:
    report = container.payroll_report_service

    @app.route("/profile/history", methods=["GET"], endpoint="profile_history")
    @login_required
    def profile_history():
        worker = container.roster_service.get_worker(int(session["worker_id"]))
        return ok(
            history=report.history_to_ui(worker),
            monthly=report.monthly_to_ui(report.monthly_totals(worker)),
            career_total=float(worker.career_total),
        )

    @app.route("/admin/panel", methods=["GET"], endpoint="admin_panel")
    @admin_required
    def admin_panel():
        today = now_local(container.tz).date()
        doc = container.roster_repo.load()
        stats = report.duty_stats(doc, today)
        totals = report.organization_totals(doc)
        return ok(
            stats={"on_duty": stats.on_duty, "off_duty": stats.off_duty, "not_started": stats.not_started},
            totals={"hours": float(totals["hours"]), "salary": float(totals["wage"])},
            users=[report.worker_to_ui(w, today) for w in doc.workers],
        )

    @app.route("/admin/history/<int:worker_id>", methods=["GET"], endpoint="admin_history")
    @admin_required
    def admin_history(worker_id: int):
        doc = container.roster_repo.load()
        worker = container.roster_service.get_worker(worker_id)
        return ok(
            history=report.history_to_ui(worker),
            monthly=report.monthly_to_ui(report.monthly_totals(worker)),
            user_total=float(report.career_wage(worker)),
            server_total=float(report.organization_totals(doc)["wage"]),
        )

    @app.route("/admin/export.xlsx", methods=["GET"], endpoint="export_payroll")
    @admin_required
    def export_payroll():
        today = now_local(container.tz).date()
        rows = report.export_rows(container.roster_repo.load(), today)
        return app.response_class(
            build_payroll_workbook(rows),
            mimetype=XLSX_MIMETYPE,
            headers={"Content-Disposition": f'attachment; filename="{export_filename(today)}"'},
        )
