"""Content Types 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from agentcms.database import get_db
from agentcms.middleware.request_context import RequestContext, get_request_context, is_dry_run
from agentcms.schemas.content_type import ContentTypeCreate, ContentTypeOut, ContentTypeUpdate
from agentcms.services import content_item_service, content_type_service

router = APIRouter(prefix="/api/content-types", tags=["content-types"])

DryRunMode = Optional[Literal["dry_run"]]


@router.post("", response_model=ContentTypeOut, status_code=201)
def create_content_type(
    data: ContentTypeCreate,
    response: Response,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    dry_run = is_dry_run(mode)
    content_type = content_type_service.create_content_type(
        db,
        name=data.name,
        slug=data.slug,
        schema=data.schema_,
        description=data.description,
        dry_run=dry_run,
        actor=ctx.actor,
        request_id=ctx.request_id,
    )
    if dry_run:
        response.status_code = 200
    return content_type


@router.get("", response_model=List[ContentTypeOut])
def list_content_types(db: Session = Depends(get_db)):
    return content_type_service.list_content_types(db)


@router.get("/{content_type_id}", response_model=ContentTypeOut)
def get_content_type(content_type_id: int, db: Session = Depends(get_db)):
    return content_item_service.get_content_type(db, content_type_id)


@router.put("/{content_type_id}", response_model=ContentTypeOut)
def update_content_type(
    content_type_id: int,
    data: ContentTypeUpdate,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    return content_type_service.update_content_type(
        db,
        content_type_id,
        name=data.name,
        slug=data.slug,
        schema=data.schema_,
        description=data.description,
        dry_run=is_dry_run(mode),
        actor=ctx.actor,
        request_id=ctx.request_id,
    )


@router.delete("/{content_type_id}", response_model=ContentTypeOut)
def delete_content_type(
    content_type_id: int,
    mode: DryRunMode = Query(None),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    return content_type_service.delete_content_type(
        db,
        content_type_id,
        dry_run=is_dry_run(mode),
        actor=ctx.actor,
        request_id=ctx.request_id,
    )
