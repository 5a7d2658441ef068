"""Content Type 도메인 서비스 레이어입니다. 스키마 검증과 CRUD 흐름을 캡슐화합니다."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from agentcms.models.content_item import ContentItem
from agentcms.models.content_type import ContentType
from agentcms.services import audit_service, errors
from agentcms.services.content_item_service import get_content_type
from agentcms.services.content_schema import serialize_data, validate_type_schema


def _ensure_valid_schema(schema_text: str) -> None:
    failure = validate_type_schema(schema_text)
    if failure:
        raise errors.from_validation_failure(failure)


def _ensure_slug_available(db: Session, slug: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(ContentType.id).filter(ContentType.slug == slug)
    if exclude_id is not None:
        q = q.filter(ContentType.id != exclude_id)
    if q.first():
        raise errors.slug_conflict(slug)


def _copy(content_type: ContentType, **overrides) -> ContentType:
    values = {
        "id": content_type.id,
        "name": content_type.name,
        "slug": content_type.slug,
        "schema": content_type.schema,
        "description": content_type.description,
        "created_at": content_type.created_at,
        "updated_at": content_type.updated_at,
    }
    values.update(overrides)
    return ContentType(**values)


def list_content_types(db: Session) -> List[ContentType]:
    return db.query(ContentType).order_by(ContentType.id.asc()).all()


def create_content_type(
    db: Session,
    *,
    name: str,
    slug: str,
    schema: Any,
    description: Optional[str] = None,
    dry_run: bool = False,
    actor: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ContentType:
    schema_text = serialize_data(schema)
    _ensure_valid_schema(schema_text)
    _ensure_slug_available(db, slug)

    now = datetime.now()
    content_type = ContentType(
        name=name,
        slug=slug,
        schema=schema_text,
        description=description,
        created_at=now,
        updated_at=now,
    )
    if dry_run:
        content_type.id = 0
        return content_type

    db.add(content_type)
    db.commit()
    db.refresh(content_type)
    audit_service.emit(
        db, "create", "content_type", content_type.id, {"slug": slug}, actor, request_id
    )
    return content_type


def update_content_type(
    db: Session,
    content_type_id: int,
    *,
    name: Optional[str] = None,
    slug: Optional[str] = None,
    schema: Any = None,
    description: Optional[str] = None,
    dry_run: bool = False,
    actor: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ContentType:
    changes: Dict[str, Any] = {
        "name": name,
        "slug": slug,
        "schema": serialize_data(schema),
        "description": description,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        raise errors.ContentServiceError(
            400,
            "EMPTY_UPDATE_BODY",
            "Empty update payload",
            "The request body must contain at least one field to update (name, slug, schema, or description).",
        )

    content_type = get_content_type(db, content_type_id)
    if "schema" in changes:
        _ensure_valid_schema(changes["schema"])
    if "slug" in changes:
        _ensure_slug_available(db, changes["slug"], exclude_id=content_type_id)

    if dry_run:
        return _copy(content_type, **changes)

    for key, value in changes.items():
        setattr(content_type, key, value)
    content_type.updated_at = datetime.now()
    db.commit()
    db.refresh(content_type)
    audit_service.emit(
        db, "update", "content_type", content_type.id, {"fields": sorted(changes)}, actor, request_id
    )
    return content_type


def delete_content_type(
    db: Session,
    content_type_id: int,
    *,
    dry_run: bool = False,
    actor: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ContentType:
    content_type = get_content_type(db, content_type_id)
    item_count = db.query(ContentItem).filter(ContentItem.content_type_id == content_type_id).count()
    if item_count:
        raise errors.content_type_in_use(content_type_id, item_count)

    deleted = _copy(content_type)
    if dry_run:
        return deleted

    db.delete(content_type)
    db.commit()
    audit_service.emit(
        db, "delete", "content_type", deleted.id, {"slug": deleted.slug}, actor, request_id
    )
    return deleted
