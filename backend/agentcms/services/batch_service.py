"""콘텐츠 항목 배치 생성/수정/삭제를 atomic/partial/dry-run 모드로 실행하는 오케스트레이터입니다.

- atomic: 배치 전체가 하나의 트랜잭션이며 첫 실패 시 전체 롤백 후 BATCH_ATOMIC_FAILED
- partial: 항목마다 독립 트랜잭션, 항목별 결과 배열 반환
- dry_run: 라이브 경로와 동일하게 검증만 수행하고 아무것도 저장하지 않음
"""

import logging
from typing import Any, Callable, Dict, List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agentcms.config import settings
from agentcms.models.content_item import ContentItem
from agentcms.schemas.batch import BatchItemResult
from agentcms.schemas.content_item import ContentItemBatchUpdateEntry, ContentItemCreate
from agentcms.services import audit_service, content_item_service, errors
from agentcms.services.errors import ContentServiceError

logger = logging.getLogger(__name__)


def _ensure_batch_size(entries: Sequence[Any], field: str) -> None:
    if not entries:
        raise errors.empty_batch(field)
    if len(entries) > settings.BATCH_MAX_ITEMS:
        raise errors.batch_too_large(len(entries), settings.BATCH_MAX_ITEMS)


def _failure(index: int, code: str, message: str) -> BatchItemResult:
    return BatchItemResult(index=index, ok=False, code=code, error=message)


def _atomic_context(index: int, exc: ContentServiceError) -> Dict[str, Any]:
    context: Dict[str, Any] = {"index": index, "code": exc.code, "error": exc.error}
    if exc.context:
        context["details"] = exc.context
    return context


def _run_dry(
    entries: Sequence[Any],
    preview: Callable[[Any], BatchItemResult],
    *,
    atomic: bool,
    operation: str,
) -> Dict[str, Any]:
    results: List[BatchItemResult] = []
    for index, entry in enumerate(entries):
        try:
            result = preview(entry)
        except ContentServiceError as exc:
            if atomic:
                raise errors.batch_atomic_failed(operation, _atomic_context(index, exc)) from exc
            results.append(_failure(index, exc.code, exc.error))
            continue
        result.index = index
        results.append(result)
    return {"atomic": atomic, "results": results}


def _run_atomic(
    db: Session,
    entries: Sequence[Any],
    apply: Callable[[Any], ContentItem],
    *,
    action: str,
    operation: str,
    actor: str | None,
    request_id: str | None,
) -> Dict[str, Any]:
    results: List[BatchItemResult] = []
    try:
        for index, entry in enumerate(entries):
            try:
                item = apply(entry)
            except ContentServiceError as exc:
                raise errors.batch_atomic_failed(operation, _atomic_context(index, exc)) from exc
            results.append(BatchItemResult(index=index, ok=True, id=item.id, version=item.version))
        db.commit()
    except Exception:
        db.rollback()
        raise

    # 배치 전체 커밋 이후에만 감사 로그를 남긴다.
    for row in results:
        audit_service.emit(
            db, action, "content_item", row.id, {"batch": True, "mode": "atomic"}, actor, request_id
        )
    return {"atomic": True, "results": results}


def _run_partial(
    db: Session,
    entries: Sequence[Any],
    apply: Callable[[Any], ContentItem],
    *,
    action: str,
    actor: str | None,
    request_id: str | None,
) -> Dict[str, Any]:
    results: List[BatchItemResult] = []
    for index, entry in enumerate(entries):
        try:
            item = apply(entry)
            item_id, version = item.id, item.version
            db.commit()
        except ContentServiceError as exc:
            db.rollback()
            results.append(_failure(index, exc.code, exc.error))
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("[batch] %s item %s failed: %s", action, index, exc)
            results.append(_failure(index, "BATCH_ITEM_FAILED", f"Storage error: {exc.__class__.__name__}"))
            continue

        audit_service.emit(
            db, action, "content_item", item_id, {"batch": True, "mode": "partial"}, actor, request_id
        )
        results.append(BatchItemResult(index=index, ok=True, id=item_id, version=version))
    return {"atomic": False, "results": results}


def _execute(
    db: Session,
    entries: Sequence[Any],
    *,
    apply: Callable[[Any], ContentItem],
    preview: Callable[[Any], BatchItemResult],
    action: str,
    operation: str,
    atomic: bool,
    dry_run: bool,
    actor: str | None,
    request_id: str | None,
) -> Dict[str, Any]:
    if dry_run:
        return _run_dry(entries, preview, atomic=atomic, operation=operation)
    if atomic:
        return _run_atomic(
            db, entries, apply,
            action=action, operation=operation, actor=actor, request_id=request_id,
        )
    return _run_partial(db, entries, apply, action=action, actor=actor, request_id=request_id)


def create_batch(
    db: Session,
    items: Sequence[ContentItemCreate],
    *,
    atomic: bool = False,
    dry_run: bool = False,
    actor: str | None = None,
    request_id: str | None = None,
) -> Dict[str, Any]:
    _ensure_batch_size(items, "items")

    def apply(entry: ContentItemCreate) -> ContentItem:
        prepared = content_item_service.prepare_create(db, entry.content_type_id, entry.data, entry.status)
        return content_item_service.apply_create(db, prepared)

    def preview(entry: ContentItemCreate) -> BatchItemResult:
        content_item_service.prepare_create(db, entry.content_type_id, entry.data, entry.status)
        return BatchItemResult(index=0, ok=True, id=0, version=1)

    return _execute(
        db, items,
        apply=apply, preview=preview,
        action="create", operation="create",
        atomic=atomic, dry_run=dry_run, actor=actor, request_id=request_id,
    )


def update_batch(
    db: Session,
    items: Sequence[ContentItemBatchUpdateEntry],
    *,
    atomic: bool = False,
    dry_run: bool = False,
    actor: str | None = None,
    request_id: str | None = None,
) -> Dict[str, Any]:
    _ensure_batch_size(items, "items")

    def changes_of(entry: ContentItemBatchUpdateEntry) -> Dict[str, Any]:
        return content_item_service.collect_changes(entry.content_type_id, entry.data, entry.status)

    def apply(entry: ContentItemBatchUpdateEntry) -> ContentItem:
        return content_item_service.apply_update(db, entry.id, changes_of(entry))

    # 같은 id가 배치에 여러 번 나오면 앞선 미리보기 결과 위에 이어서 병합한다.
    pending: Dict[int, ContentItem] = {}

    def preview(entry: ContentItemBatchUpdateEntry) -> BatchItemResult:
        merged = content_item_service.prepare_update(
            db, entry.id, changes_of(entry), existing=pending.get(entry.id)
        )
        merged.version += 1
        pending[entry.id] = merged
        return BatchItemResult(index=0, ok=True, id=entry.id, version=merged.version)

    return _execute(
        db, items,
        apply=apply, preview=preview,
        action="update", operation="update",
        atomic=atomic, dry_run=dry_run, actor=actor, request_id=request_id,
    )


def delete_batch(
    db: Session,
    ids: Sequence[int],
    *,
    atomic: bool = False,
    dry_run: bool = False,
    actor: str | None = None,
    request_id: str | None = None,
) -> Dict[str, Any]:
    _ensure_batch_size(ids, "ids")

    def apply(item_id: int) -> ContentItem:
        return content_item_service.apply_delete(db, item_id)

    removed: set = set()

    def preview(item_id: int) -> BatchItemResult:
        if item_id in removed:
            raise errors.content_item_not_found(item_id)
        content_item_service.get_item(db, item_id)
        removed.add(item_id)
        return BatchItemResult(index=0, ok=True, id=item_id)

    results = _execute(
        db, ids,
        apply=apply, preview=preview,
        action="delete", operation="delete",
        atomic=atomic, dry_run=dry_run, actor=actor, request_id=request_id,
    )
    # 삭제 결과에는 버전 번호를 싣지 않는다.
    for row in results["results"]:
        row.version = None
    return results
