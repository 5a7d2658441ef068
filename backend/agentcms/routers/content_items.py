"""Content Items 기능 API 라우터입니다. 요청을 검증하고 변경 엔진/배치 오케스트레이터로 위임합니다."""

from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from agentcms.database import get_db
from agentcms.middleware.request_context import RequestContext, get_request_context, is_dry_run
from agentcms.schemas.batch import BatchCreateRequest, BatchDeleteRequest, BatchResult, BatchUpdateRequest
from agentcms.schemas.content_item import (
    ContentItemCreate,
    ContentItemOut,
    ContentItemRollback,
    ContentItemUpdate,
)
from agentcms.schemas.version import ContentItemVersionOut
from agentcms.services import batch_service, content_item_service

router = APIRouter(prefix="/api/content-items", tags=["content-items"])

DryRunMode = Optional[Literal["dry_run"]]


@router.post("", response_model=ContentItemOut, status_code=201)
def create_content_item(
    data: ContentItemCreate,
    response: Response,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    dry_run = is_dry_run(mode)
    item = content_item_service.create_item(
        db,
        data.content_type_id,
        data.data,
        data.status,
        dry_run=dry_run,
        actor=ctx.actor,
        request_id=ctx.request_id,
    )
    if dry_run:
        response.status_code = 200
    return item


@router.get("", response_model=List[ContentItemOut])
def list_content_items(
    content_type_id: Optional[int] = Query(None, alias="contentTypeId"),
    status: Optional[str] = None,
    created_after: Optional[datetime] = Query(None, alias="createdAfter"),
    created_before: Optional[datetime] = Query(None, alias="createdBefore"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return content_item_service.list_items(
        db,
        content_type_id=content_type_id,
        status=status,
        created_after=created_after,
        created_before=created_before,
        limit=limit,
        offset=offset,
    )


# 배치 경로는 /{item_id}보다 먼저 등록해야 "batch"가 ID로 해석되지 않는다.
@router.post("/batch", response_model=BatchResult, response_model_exclude_none=True)
def create_content_items_batch(
    payload: BatchCreateRequest,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    return batch_service.create_batch(
        db,
        payload.items,
        atomic=payload.atomic,
        dry_run=payload.dry_run or is_dry_run(mode),
        actor=ctx.actor,
        request_id=ctx.request_id,
    )


@router.put("/batch", response_model=BatchResult, response_model_exclude_none=True)
def update_content_items_batch(
    payload: BatchUpdateRequest,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    return batch_service.update_batch(
        db,
        payload.items,
        atomic=payload.atomic,
        dry_run=payload.dry_run or is_dry_run(mode),
        actor=ctx.actor,
        request_id=ctx.request_id,
    )


@router.delete("/batch", response_model=BatchResult, response_model_exclude_none=True)
def delete_content_items_batch(
    payload: BatchDeleteRequest,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    return batch_service.delete_batch(
        db,
        payload.ids,
        atomic=payload.atomic,
        dry_run=payload.dry_run or is_dry_run(mode),
        actor=ctx.actor,
        request_id=ctx.request_id,
    )


@router.get("/{item_id}", response_model=ContentItemOut)
def get_content_item(item_id: int, db: Session = Depends(get_db)):
    return content_item_service.get_item(db, item_id)


@router.put("/{item_id}", response_model=ContentItemOut)
def update_content_item(
    item_id: int,
    data: ContentItemUpdate,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    return content_item_service.update_item(
        db,
        item_id,
        content_type_id=data.content_type_id,
        data=data.data,
        status=data.status,
        dry_run=is_dry_run(mode),
        actor=ctx.actor,
        request_id=ctx.request_id,
    )


@router.delete("/{item_id}", response_model=ContentItemOut)
def delete_content_item(
    item_id: int,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    return content_item_service.delete_item(
        db,
        item_id,
        dry_run=is_dry_run(mode),
        actor=ctx.actor,
        request_id=ctx.request_id,
    )


@router.get("/{item_id}/versions", response_model=List[ContentItemVersionOut])
def list_content_item_versions(item_id: int, db: Session = Depends(get_db)):
    return content_item_service.list_item_versions(db, item_id)


@router.post("/{item_id}/rollback", response_model=ContentItemOut)
def rollback_content_item(
    item_id: int,
    payload: ContentItemRollback,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    return content_item_service.rollback_item(
        db,
        item_id,
        payload.version,
        dry_run=is_dry_run(mode),
        actor=ctx.actor,
        request_id=ctx.request_id,
    )
