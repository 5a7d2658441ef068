"""콘텐츠 항목 버전 이력(append-only 원장) 저장/조회 기능을 제공하는 도메인 서비스입니다."""

from typing import List, Optional

from sqlalchemy.orm import Session

from agentcms.models.content_item import ContentItem
from agentcms.models.content_version import ContentItemVersion


def append_snapshot(db: Session, item: ContentItem) -> ContentItemVersion:
    """item의 현재 상태를 현재 버전 번호로 기록한다.

    호출자의 트랜잭션 안에서 flush만 수행하며 commit은 호출자가 결정한다.
    """
    row = ContentItemVersion(
        content_item_id=item.id,
        version=item.version,
        data=item.data,
        status=item.status,
        created_at=item.updated_at,
    )
    db.add(row)
    db.flush()
    return row


def list_versions(db: Session, *, item_id: int) -> List[ContentItemVersion]:
    return (
        db.query(ContentItemVersion)
        .filter(ContentItemVersion.content_item_id == item_id)
        .order_by(ContentItemVersion.version.desc())
        .all()
    )


def get_version(db: Session, *, item_id: int, version: int) -> Optional[ContentItemVersion]:
    return (
        db.query(ContentItemVersion)
        .filter(
            ContentItemVersion.content_item_id == item_id,
            ContentItemVersion.version == version,
        )
        .first()
    )
