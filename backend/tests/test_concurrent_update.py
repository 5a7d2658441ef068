"""두 세션이 같은 항목을 번갈아 갱신할 때 버전 이력이 유실되지 않는지 검증합니다."""

import json

import pytest

from agentcms.models.content_item import ContentItem
from agentcms.models.content_version import ContentItemVersion
from agentcms.services import content_item_service
from tests.conftest import TestingSession, item_data


@pytest.fixture
def sessions():
    first, second = TestingSession(), TestingSession()
    try:
        yield first, second
    finally:
        first.close()
        second.close()


def _history(db, item_id: int):
    db.expire_all()
    return (
        db.query(ContentItemVersion)
        .filter(ContentItemVersion.content_item_id == item_id)
        .order_by(ContentItemVersion.version.asc())
        .all()
    )


def test_stale_session_rereads_row_before_writing(db, seed_item, sessions):
    item_id = seed_item.id
    session_a, session_b = sessions
    changes = content_item_service.collect_changes(status="published")

    # B는 v1 상태를 읽고 미리보기를 만든 채로 멈춰 있다.
    preview = content_item_service.prepare_update(session_b, item_id, changes)
    assert preview.version == 1

    updated = content_item_service.update_item(session_a, item_id, data={"title": "From A", "body": "a"})
    assert updated.version == 2

    current = content_item_service.apply_update(session_b, item_id, changes)
    session_b.commit()
    assert current.version == 3

    history = _history(db, item_id)
    assert [row.version for row in history] == [1, 2]
    assert json.loads(history[0].data)["body"] == "first"
    assert json.loads(history[1].data) == {"title": "From A", "body": "a"}
    assert history[1].status == "draft"

    row = db.query(ContentItem).filter(ContentItem.id == item_id).one()
    assert row.version == 3
    assert row.status == "published"
    assert item_data(row) == {"title": "From A", "body": "a"}


def test_stale_session_rollback_snapshots_latest_state(db, seed_item, sessions):
    item_id = seed_item.id
    session_a, session_b = sessions

    assert content_item_service.get_item(session_b, item_id).version == 1
    content_item_service.update_item(session_a, item_id, data={"title": "From A", "body": "a"})

    restored = content_item_service.apply_rollback(session_b, item_id, 1)
    session_b.commit()
    assert restored.version == 3

    history = _history(db, item_id)
    assert [row.version for row in history] == [1, 2]
    assert json.loads(history[1].data)["body"] == "a"

    row = db.query(ContentItem).filter(ContentItem.id == item_id).one()
    assert item_data(row) == {"title": "Hello", "body": "first"}
