"""배치 오케스트레이터 atomic/partial/dry-run 동작 테스트입니다."""

from agentcms.config import settings
from agentcms.models.audit_log import AuditLog
from agentcms.models.content_item import ContentItem
from agentcms.models.content_version import ContentItemVersion
from tests.conftest import item_data


def _payloads(type_id: int, count: int = 3, bad_index=None):
    rows = []
    for n in range(count):
        data = {"title": f"t{n}", "body": f"b{n}"}
        if n == bad_index:
            data = {"title": f"t{n}"}
        rows.append({"contentTypeId": type_id, "data": data})
    return rows


def test_partial_create_reports_each_item(client, db, seed_type):
    resp = client.post("/api/content-items/batch", json={"items": _payloads(seed_type.id, bad_index=1)})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["atomic"] is False
    assert [row["index"] for row in body["results"]] == [0, 1, 2]
    assert [row["ok"] for row in body["results"]] == [True, False, True]
    assert body["results"][1]["code"] == "CONTENT_SCHEMA_INVALID"
    assert "id" not in body["results"][1]
    assert body["results"][0]["version"] == 1
    assert db.query(ContentItem).count() == 2


def test_atomic_create_commits_all(client, db, seed_type):
    resp = client.post("/api/content-items/batch", json={"items": _payloads(seed_type.id), "atomic": True})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["atomic"] is True
    assert all(row["ok"] for row in body["results"])
    assert db.query(ContentItem).count() == 3


def test_atomic_create_rolls_back_everything_on_failure(client, db, seed_type):
    resp = client.post(
        "/api/content-items/batch",
        json={"items": _payloads(seed_type.id, bad_index=2), "atomic": True},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "BATCH_ATOMIC_FAILED"
    assert body["context"]["index"] == 2
    assert body["context"]["code"] == "CONTENT_SCHEMA_INVALID"
    assert db.query(ContentItem).count() == 0
    assert db.query(AuditLog).count() == 0


def test_batch_dry_run_persists_nothing(client, db, seed_type):
    resp = client.post(
        "/api/content-items/batch",
        json={"items": _payloads(seed_type.id, bad_index=0), "dryRun": True},
    )
    assert resp.status_code == 200, resp.text
    results = resp.json()["results"]
    assert results[0]["ok"] is False
    assert results[1] == {"index": 1, "ok": True, "id": 0, "version": 1}
    assert db.query(ContentItem).count() == 0


def test_batch_dry_run_via_mode_query(client, db, seed_type):
    resp = client.post("/api/content-items/batch?mode=dry_run", json={"items": _payloads(seed_type.id)})
    assert resp.status_code == 200
    assert all(row["id"] == 0 for row in resp.json()["results"])
    assert db.query(ContentItem).count() == 0


def test_atomic_dry_run_reports_first_failure(client, db, seed_type):
    resp = client.post(
        "/api/content-items/batch",
        json={"items": _payloads(seed_type.id, bad_index=1), "atomic": True, "dryRun": True},
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "BATCH_ATOMIC_FAILED"
    assert resp.json()["context"]["index"] == 1


def test_empty_batch_rejected(client, seed_type):
    resp = client.post("/api/content-items/batch", json={"items": []})
    assert resp.status_code == 400
    assert resp.json()["code"] == "EMPTY_BATCH"

    resp = client.request("DELETE", "/api/content-items/batch", json={"ids": []})
    assert resp.status_code == 400
    assert resp.json()["code"] == "EMPTY_BATCH"


def test_oversized_batch_rejected(client, db, seed_type, monkeypatch):
    monkeypatch.setattr(settings, "BATCH_MAX_ITEMS", 2)
    resp = client.post("/api/content-items/batch", json={"items": _payloads(seed_type.id)})
    assert resp.status_code == 400
    assert resp.json()["code"] == "BATCH_TOO_LARGE"
    assert resp.json()["context"] == {"size": 3, "limit": 2}
    assert db.query(ContentItem).count() == 0


def test_partial_update_isolates_failures(client, db, seed_type):
    created = client.post("/api/content-items/batch", json={"items": _payloads(seed_type.id)}).json()
    ids = [row["id"] for row in created["results"]]

    resp = client.put(
        "/api/content-items/batch",
        json={
            "items": [
                {"id": ids[0], "status": "published"},
                {"id": 999, "status": "published"},
                {"id": ids[2], "data": {"title": "new", "body": "new"}},
            ]
        },
    )
    assert resp.status_code == 200, resp.text
    results = resp.json()["results"]
    assert [row["ok"] for row in results] == [True, False, True]
    assert results[1]["code"] == "CONTENT_ITEM_NOT_FOUND"
    assert results[0]["version"] == 2
    assert results[2]["version"] == 2

    db.expire_all()
    assert db.query(ContentItemVersion).count() == 2
    assert item_data(db.query(ContentItem).filter(ContentItem.id == ids[2]).one())["title"] == "new"


def test_atomic_update_failure_leaves_versions_untouched(client, db, seed_type):
    created = client.post("/api/content-items/batch", json={"items": _payloads(seed_type.id)}).json()
    ids = [row["id"] for row in created["results"]]

    resp = client.put(
        "/api/content-items/batch",
        json={
            "atomic": True,
            "items": [
                {"id": ids[0], "status": "published"},
                {"id": ids[1], "data": {"body": "no title"}},
            ],
        },
    )
    assert resp.status_code == 400
    assert resp.json()["context"]["index"] == 1

    db.expire_all()
    assert db.query(ContentItemVersion).count() == 0
    assert {row.version for row in db.query(ContentItem).all()} == {1}


def test_update_batch_dry_run_previews_next_version(client, db, seed_item):
    resp = client.put(
        "/api/content-items/batch",
        json={"items": [{"id": seed_item.id, "status": "published"}], "dryRun": True},
    )
    assert resp.status_code == 200
    assert resp.json()["results"] == [{"index": 0, "ok": True, "id": seed_item.id, "version": 2}]

    db.expire_all()
    assert db.query(ContentItem).one().version == 1


def test_update_batch_dry_run_chains_repeated_ids_like_live_run(client, db, seed_item):
    item_id = seed_item.id
    items = [
        {"id": item_id, "status": "published"},
        {"id": item_id, "data": {"title": "no body"}},
        {"id": item_id, "data": {"title": "Second", "body": "v3"}},
    ]
    dry = client.put("/api/content-items/batch", json={"items": items, "dryRun": True})
    assert dry.status_code == 200, dry.text
    dry_results = dry.json()["results"]
    assert [row.get("version") for row in dry_results] == [2, None, 3]
    assert dry_results[1]["code"] == "CONTENT_SCHEMA_INVALID"

    db.expire_all()
    assert db.query(ContentItem).one().version == 1
    assert db.query(ContentItemVersion).count() == 0

    live = client.put("/api/content-items/batch", json={"items": items})
    assert live.json()["results"] == dry_results


def test_delete_batch_dry_run_rejects_repeated_id(client, db, seed_item):
    item_id = seed_item.id
    dry = client.request("DELETE", "/api/content-items/batch", json={"ids": [item_id, item_id], "dryRun": True})
    assert dry.status_code == 200
    results = dry.json()["results"]
    assert [row["ok"] for row in results] == [True, False]
    assert results[1]["code"] == "CONTENT_ITEM_NOT_FOUND"

    live = client.request("DELETE", "/api/content-items/batch", json={"ids": [item_id, item_id]})
    assert live.json()["results"] == results


def test_delete_batch_partial_and_atomic(client, db, seed_type):
    created = client.post("/api/content-items/batch", json={"items": _payloads(seed_type.id)}).json()
    ids = [row["id"] for row in created["results"]]

    atomic = client.request("DELETE", "/api/content-items/batch", json={"ids": [ids[0], 999], "atomic": True})
    assert atomic.status_code == 400
    db.expire_all()
    assert db.query(ContentItem).count() == 3

    partial = client.request("DELETE", "/api/content-items/batch", json={"ids": [ids[0], 999, ids[1]]})
    assert partial.status_code == 200
    results = partial.json()["results"]
    assert [row["ok"] for row in results] == [True, False, True]
    assert "version" not in results[0]

    db.expire_all()
    assert [row.id for row in db.query(ContentItem).all()] == [ids[2]]


def test_batch_audit_details_mark_mode(client, db, seed_type):
    client.post("/api/content-items/batch", json={"items": _payloads(seed_type.id, count=2), "atomic": True})
    logs = client.get("/api/audit-logs", params={"entityType": "content_item"}).json()
    assert len(logs) == 2
    assert all('"mode": "atomic"' in row["details"] for row in logs)
