from src.timekeeping.timekeeping.audit.service import AuditLogService, record
from src.timekeeping.timekeeping.core.enums import AuditAction
from tests.helpers import at


def test_record_prepends_and_trims(roster):
    doc = roster.doc
    for i in range(5):
        record(doc, actor="admin", action=AuditAction.RENAME_WORKER, target=f"w{i}", now=at(10, 9, i), limit=3)

    assert [e.target for e in doc.logs] == ["w4", "w3", "w2"]


def test_list_recent_for_ui(roster):
    record(roster.doc, actor="admin", action=AuditAction.RESET_PAY, target="An", detail="", now=at(10, 9, 5))

    svc = AuditLogService(roster)
    rows = [svc.to_ui(e) for e in svc.list_recent()]

    assert rows == [{"time": "09:05 10/03/2024", "actor": "admin", "action": "RESET LƯƠNG", "target": "An", "detail": ""}]
