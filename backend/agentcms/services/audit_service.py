"""커밋 이후 변경 작업 감사 로그를 남기고 조회하는 서비스입니다."""

import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agentcms.config import settings
from agentcms.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

AUDIT_ACTIONS = ("create", "update", "delete", "rollback")
ENTITY_TYPES = ("content_type", "content_item")


def emit(
    db: Session,
    action: str,
    entity_type: str,
    entity_id: int,
    details: Optional[Dict[str, Any]] = None,
    actor: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Optional[AuditLog]:
    """변경 작업 1건당 감사 로그 1건을 기록한다.

    변경 트랜잭션이 이미 커밋된 뒤 호출되므로, 감사 기록 실패는 경고 로그만 남기고
    호출자의 성공 응답에는 영향을 주지 않는다.
    """
    if not settings.AUDIT_ENABLED:
        return None

    payload = dict(details or {})
    if request_id:
        payload["requestId"] = request_id

    try:
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor,
            details=json.dumps(payload, ensure_ascii=False, default=str) if payload else None,
        )
        db.add(entry)
        db.commit()
        return entry
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning(
            "[audit] failed to record %s %s#%s: %s",
            action,
            entity_type,
            entity_id,
            exc,
        )
        return None


def list_audit_logs(
    db: Session,
    *,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[AuditLog]:
    q = db.query(AuditLog)
    if entity_type:
        q = q.filter(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        q = q.filter(AuditLog.entity_id == entity_id)
    if action:
        q = q.filter(AuditLog.action == action)
    limit = max(1, min(int(limit or settings.DEFAULT_AUDIT_LIMIT), settings.MAX_LIST_LIMIT))
    return q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()


def parse_details(entry: AuditLog) -> Dict[str, Any]:
    try:
        return json.loads(entry.details or "{}")
    except json.JSONDecodeError:
        return {}
