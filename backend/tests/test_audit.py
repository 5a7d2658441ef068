"""감사 로그 기록/조회 테스트입니다."""

import json

from sqlalchemy.exc import SQLAlchemyError

from agentcms.config import settings
from agentcms.models.audit_log import AuditLog
from agentcms.services import audit_service, content_item_service


def test_mutations_emit_one_audit_entry_each(client, db, seed_item):
    item_id = seed_item.id
    client.put(f"/api/content-items/{item_id}", json={"status": "published"}, headers={"X-Actor": "agent-7"})
    client.post(f"/api/content-items/{item_id}/rollback", json={"version": 1})
    client.delete(f"/api/content-items/{item_id}", headers={"X-Request-ID": "req-123"})

    logs = client.get("/api/audit-logs", params={"entityType": "content_item", "entityId": item_id}).json()
    assert [row["action"] for row in logs] == ["delete", "rollback", "update"]

    update = logs[2]
    assert update["actor"] == "agent-7"
    details = json.loads(update["details"])
    assert details["fields"] == ["status"]
    assert details["version"] == 2
    assert details["requestId"]

    rollback = json.loads(logs[1]["details"])
    assert (rollback["fromVersion"], rollback["toVersion"]) == (2, 1)
    assert json.loads(logs[0]["details"])["requestId"] == "req-123"


def test_dry_run_emits_no_audit(client, db, seed_item):
    client.put(f"/api/content-items/{seed_item.id}?mode=dry_run", json={"status": "published"})
    client.delete(f"/api/content-items/{seed_item.id}?mode=dry_run")
    assert db.query(AuditLog).count() == 0


def test_failed_mutation_emits_no_audit(client, db, seed_item):
    client.put(f"/api/content-items/{seed_item.id}", json={"data": {"title": "no body"}})
    assert db.query(AuditLog).count() == 0


def test_audit_filter_by_action(client, seed_item):
    client.put(f"/api/content-items/{seed_item.id}", json={"status": "published"})
    client.put(f"/api/content-items/{seed_item.id}", json={"status": "archived"})

    logs = client.get("/api/audit-logs", params={"action": "update", "limit": 1}).json()
    assert len(logs) == 1
    assert logs[0]["action"] == "update"


def test_audit_disabled_skips_writes(db, seed_type, monkeypatch):
    monkeypatch.setattr(settings, "AUDIT_ENABLED", False)
    content_item_service.create_item(db, seed_type.id, {"title": "A", "body": "B"})
    assert db.query(AuditLog).count() == 0


def test_audit_failure_does_not_fail_mutation(db, seed_type, monkeypatch, caplog):
    real_commit = db.commit
    calls = {"n": 0}

    def flaky_commit():
        calls["n"] += 1
        # 두 번째 commit은 감사 로그 기록이다.
        if calls["n"] == 2:
            raise SQLAlchemyError("audit table unavailable")
        real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    item = content_item_service.create_item(db, seed_type.id, {"title": "A", "body": "B"})

    assert item.id > 0
    assert any("[audit] failed to record" in record.getMessage() for record in caplog.records)
    assert audit_service.list_audit_logs(db) == []
