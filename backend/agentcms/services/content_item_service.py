"""콘텐츠 항목 생성/수정/삭제/롤백과 버전 체이닝을 담당하는 변경 엔진 서비스입니다.

모든 함수는 SQLAlchemy ``Session``을 트랜잭션 핸들로 명시적으로 전달받는다.
``apply_*`` 함수는 flush까지만 수행하고 commit 여부는 호출자(단건 API 또는
배치 오케스트레이터)가 결정한다.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from agentcms.config import settings
from agentcms.models.content_item import ContentItem
from agentcms.models.content_type import ContentType
from agentcms.services import audit_service, errors, version_service
from agentcms.services.content_schema import serialize_data, validate_data

DEFAULT_STATUS = "draft"
UPDATABLE_FIELDS = ("content_type_id", "data", "status")


def get_content_type(db: Session, content_type_id: int) -> ContentType:
    content_type = db.query(ContentType).filter(ContentType.id == content_type_id).first()
    if not content_type:
        raise errors.content_type_not_found(content_type_id)
    return content_type


def get_item(db: Session, item_id: int) -> ContentItem:
    item = db.query(ContentItem).filter(ContentItem.id == item_id).first()
    if not item:
        raise errors.content_item_not_found(item_id)
    return item


def list_items(
    db: Session,
    *,
    content_type_id: Optional[int] = None,
    status: Optional[str] = None,
    created_after: Optional[datetime] = None,
    created_before: Optional[datetime] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[ContentItem]:
    q = db.query(ContentItem)
    if content_type_id is not None:
        q = q.filter(ContentItem.content_type_id == content_type_id)
    if status:
        q = q.filter(ContentItem.status == status)
    if created_after is not None:
        q = q.filter(ContentItem.created_at >= created_after)
    if created_before is not None:
        q = q.filter(ContentItem.created_at <= created_before)
    return (
        q.order_by(ContentItem.id.asc())
        .offset(max(0, int(offset or 0)))
        .limit(settings.list_limit(limit))
        .all()
    )


def copy_item(item: ContentItem, **overrides) -> ContentItem:
    """세션에 붙지 않은 사본을 만든다. 미리보기/삭제 응답에 사용한다."""
    values = {
        "id": item.id,
        "content_type_id": item.content_type_id,
        "data": item.data,
        "status": item.status,
        "version": item.version,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
    }
    values.update(overrides)
    return ContentItem(**values)


def collect_changes(
    content_type_id: Optional[int] = None,
    data: Any = None,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    changes = {
        "content_type_id": content_type_id,
        "data": serialize_data(data),
        "status": status,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        raise errors.empty_update_body()
    return changes


def _validate_against(db: Session, content_type_id: int, data: str) -> ContentType:
    content_type = get_content_type(db, content_type_id)
    failure = validate_data(content_type.schema, data)
    if failure:
        raise errors.from_validation_failure(failure)
    return content_type


def _item_details(item: ContentItem) -> Dict[str, Any]:
    return {
        "contentTypeId": item.content_type_id,
        "status": item.status,
        "version": item.version,
    }


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def prepare_create(
    db: Session,
    content_type_id: int,
    data: Any,
    status: Optional[str] = None,
) -> ContentItem:
    data_text = serialize_data(data)
    _validate_against(db, content_type_id, data_text)
    now = datetime.now()
    return ContentItem(
        content_type_id=content_type_id,
        data=data_text,
        status=status or DEFAULT_STATUS,
        version=1,
        created_at=now,
        updated_at=now,
    )


def apply_create(db: Session, item: ContentItem) -> ContentItem:
    db.add(item)
    db.flush()
    return item


def create_item(
    db: Session,
    content_type_id: int,
    data: Any,
    status: Optional[str] = None,
    *,
    dry_run: bool = False,
    actor: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ContentItem:
    item = prepare_create(db, content_type_id, data, status)
    if dry_run:
        item.id = 0
        return item

    try:
        apply_create(db, item)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(item)
    audit_service.emit(db, "create", "content_item", item.id, _item_details(item), actor, request_id)
    return item


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


def prepare_update(
    db: Session,
    item_id: int,
    changes: Dict[str, Any],
    existing: Optional[ContentItem] = None,
) -> ContentItem:
    """병합 결과를 검증하고 버전을 올리지 않은 미리보기 사본을 반환한다.

    ``existing``을 주면 저장된 행 대신 그 사본 위에 병합한다 (배치 미리보기 연쇄용).
    """
    if existing is None:
        existing = get_item(db, item_id)
    target_type_id = changes.get("content_type_id", existing.content_type_id)
    target_data = changes.get("data", existing.data)
    _validate_against(db, target_type_id, target_data)
    return copy_item(existing, **changes)


def apply_update(db: Session, item_id: int, changes: Dict[str, Any]) -> ContentItem:
    # 트랜잭션 안에서 다시 읽어야 동시 갱신이 같은 버전을 덮어쓰지 않는다.
    current = (
        db.query(ContentItem)
        .filter(ContentItem.id == item_id)
        .populate_existing()
        .first()
    )
    if not current:
        raise errors.content_item_not_found(item_id)
    _validate_against(
        db,
        changes.get("content_type_id", current.content_type_id),
        changes.get("data", current.data),
    )

    version_service.append_snapshot(db, current)
    for key, value in changes.items():
        setattr(current, key, value)
    current.version = current.version + 1
    current.updated_at = datetime.now()
    db.flush()
    return current


def update_item(
    db: Session,
    item_id: int,
    *,
    content_type_id: Optional[int] = None,
    data: Any = None,
    status: Optional[str] = None,
    dry_run: bool = False,
    actor: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ContentItem:
    changes = collect_changes(content_type_id, data, status)
    preview = prepare_update(db, item_id, changes)
    if dry_run:
        return preview

    try:
        updated = apply_update(db, item_id, changes)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(updated)
    audit_service.emit(
        db,
        "update",
        "content_item",
        updated.id,
        {"fields": sorted(changes), "version": updated.version},
        actor,
        request_id,
    )
    return updated


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


def apply_delete(db: Session, item_id: int) -> ContentItem:
    item = db.query(ContentItem).filter(ContentItem.id == item_id).first()
    if not item:
        raise errors.content_item_not_found(item_id)
    deleted = copy_item(item)
    db.delete(item)
    db.flush()
    return deleted


def delete_item(
    db: Session,
    item_id: int,
    *,
    dry_run: bool = False,
    actor: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ContentItem:
    if dry_run:
        return copy_item(get_item(db, item_id))

    try:
        deleted = apply_delete(db, item_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    audit_service.emit(db, "delete", "content_item", deleted.id, _item_details(deleted), actor, request_id)
    return deleted


# ---------------------------------------------------------------------------
# rollback
# ---------------------------------------------------------------------------


def _get_target_version(db: Session, item_id: int, target_version: int):
    target = version_service.get_version(db, item_id=item_id, version=target_version)
    if not target:
        raise errors.target_version_not_found(item_id, target_version)
    return target


def apply_rollback(db: Session, item_id: int, target_version: int) -> ContentItem:
    current = (
        db.query(ContentItem)
        .filter(ContentItem.id == item_id)
        .populate_existing()
        .first()
    )
    if not current:
        raise errors.content_item_not_found(item_id)
    target = _get_target_version(db, item_id, target_version)
    # 과거 스냅샷도 현재 스키마 기준으로 검증한다.
    _validate_against(db, current.content_type_id, target.data)

    version_service.append_snapshot(db, current)
    current.data = target.data
    current.status = target.status
    current.version = current.version + 1
    current.updated_at = datetime.now()
    db.flush()
    return current


def rollback_item(
    db: Session,
    item_id: int,
    target_version: int,
    *,
    dry_run: bool = False,
    actor: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ContentItem:
    current = get_item(db, item_id)
    target = _get_target_version(db, item_id, target_version)
    _validate_against(db, current.content_type_id, target.data)
    if dry_run:
        return copy_item(
            current,
            data=target.data,
            status=target.status,
            version=current.version + 1,
        )

    try:
        restored = apply_rollback(db, item_id, target_version)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(restored)
    audit_service.emit(
        db,
        "rollback",
        "content_item",
        restored.id,
        {"fromVersion": restored.version - 1, "toVersion": target_version},
        actor,
        request_id,
    )
    return restored


def list_item_versions(db: Session, item_id: int):
    get_item(db, item_id)
    return version_service.list_versions(db, item_id=item_id)
