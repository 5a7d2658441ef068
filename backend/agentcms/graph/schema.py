"""GraphQL Query/Mutation 리졸버입니다. 와이어 형식만 변환하고 비즈니스 로직은 서비스 레이어에 위임합니다."""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, List, Optional

import strawberry
from fastapi import Depends
from graphql import GraphQLError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from strawberry.fastapi import GraphQLRouter
from strawberry.scalars import JSON
from strawberry.types import Info

from agentcms.database import get_db
from agentcms.graph.types import (
    AuditLogNode,
    BatchResultNode,
    ContentItemInput,
    ContentItemNode,
    ContentItemUpdateInput,
    ContentItemVersionNode,
    ContentTypeNode,
)
from agentcms.middleware.request_context import RequestContext, get_request_context
from agentcms.services import (
    audit_service,
    batch_service,
    content_item_service,
    content_type_service,
    errors,
)
from agentcms.services.errors import ContentServiceError

logger = logging.getLogger(__name__)


@contextmanager
def graph_errors():
    try:
        yield
    except ContentServiceError as exc:
        raise GraphQLError(exc.error, extensions=exc.envelope()) from exc
    except SQLAlchemyError as exc:
        logger.exception("[graphql] storage failure")
        failure = errors.internal_error()
        raise GraphQLError(failure.error, extensions=failure.envelope()) from exc


def _db(info: Info) -> Session:
    return info.context["db"]


def _audit_kwargs(info: Info) -> dict:
    return {
        "actor": info.context.get("actor"),
        "request_id": info.context.get("request_id"),
    }


async def _resolve(info: Info, convert: Callable[[Any], Any], func: Callable[..., Any], *args, **kwargs):
    """서비스 호출과 노드 변환을 스레드풀에서 함께 실행한다. 동기 세션 I/O가 이벤트 루프를 막지 않는다.

    한 요청의 Query 필드는 동시에 해석될 수 있으므로 세션 사용은 요청 단위 락으로 직렬화한다.
    """
    lock = info.context.setdefault("session_lock", threading.Lock())

    def call():
        with lock, graph_errors():
            return convert(func(_db(info), *args, **kwargs))

    return await run_in_threadpool(call)


def _each(node) -> Callable[[Any], list]:
    return lambda rows: [node.from_row(row) for row in rows]


@strawberry.type
class Query:
    @strawberry.field
    async def content_types(self, info: Info) -> List[ContentTypeNode]:
        return await _resolve(
            info,
            _each(ContentTypeNode),
            content_type_service.list_content_types,
        )

    @strawberry.field
    async def content_type(self, info: Info, id: int) -> ContentTypeNode:
        return await _resolve(
            info,
            ContentTypeNode.from_row,
            content_item_service.get_content_type,
            id,
        )

    @strawberry.field
    async def content_items(
        self,
        info: Info,
        content_type_id: Optional[int] = None,
        status: Optional[str] = None,
        created_after: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[ContentItemNode]:
        return await _resolve(
            info,
            _each(ContentItemNode),
            content_item_service.list_items,
            content_type_id=content_type_id,
            status=status,
            created_after=created_after,
            created_before=created_before,
            limit=limit,
            offset=offset,
        )

    @strawberry.field
    async def content_item(self, info: Info, id: int) -> ContentItemNode:
        return await _resolve(
            info,
            ContentItemNode.from_row,
            content_item_service.get_item,
            id,
        )

    @strawberry.field
    async def content_item_versions(self, info: Info, id: int) -> List[ContentItemVersionNode]:
        return await _resolve(
            info,
            _each(ContentItemVersionNode),
            content_item_service.list_item_versions,
            id,
        )

    @strawberry.field
    async def audit_logs(
        self,
        info: Info,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        action: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[AuditLogNode]:
        return await _resolve(
            info,
            _each(AuditLogNode),
            audit_service.list_audit_logs,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            limit=limit,
        )


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_content_type(
        self,
        info: Info,
        name: str,
        slug: str,
        schema: JSON,
        description: Optional[str] = None,
        dry_run: bool = False,
    ) -> ContentTypeNode:
        return await _resolve(
            info,
            ContentTypeNode.from_row,
            content_type_service.create_content_type,
            name=name,
            slug=slug,
            schema=schema,
            description=description,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def update_content_type(
        self,
        info: Info,
        id: int,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        schema: Optional[JSON] = None,
        description: Optional[str] = None,
        dry_run: bool = False,
    ) -> ContentTypeNode:
        return await _resolve(
            info,
            ContentTypeNode.from_row,
            content_type_service.update_content_type,
            id,
            name=name,
            slug=slug,
            schema=schema,
            description=description,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def delete_content_type(self, info: Info, id: int, dry_run: bool = False) -> ContentTypeNode:
        return await _resolve(
            info,
            ContentTypeNode.from_row,
            content_type_service.delete_content_type,
            id,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def create_content_item(
        self,
        info: Info,
        content_type_id: int,
        data: JSON,
        status: Optional[str] = None,
        dry_run: bool = False,
    ) -> ContentItemNode:
        return await _resolve(
            info,
            ContentItemNode.from_row,
            content_item_service.create_item,
            content_type_id,
            data,
            status,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def create_content_items_batch(
        self,
        info: Info,
        items: List[ContentItemInput],
        atomic: bool = False,
        dry_run: bool = False,
    ) -> BatchResultNode:
        return await _resolve(
            info,
            BatchResultNode.from_result,
            batch_service.create_batch,
            items,
            atomic=atomic,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def update_content_item(
        self,
        info: Info,
        id: int,
        content_type_id: Optional[int] = None,
        data: Optional[JSON] = None,
        status: Optional[str] = None,
        dry_run: bool = False,
    ) -> ContentItemNode:
        return await _resolve(
            info,
            ContentItemNode.from_row,
            content_item_service.update_item,
            id,
            content_type_id=content_type_id,
            data=data,
            status=status,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def update_content_items_batch(
        self,
        info: Info,
        items: List[ContentItemUpdateInput],
        atomic: bool = False,
        dry_run: bool = False,
    ) -> BatchResultNode:
        return await _resolve(
            info,
            BatchResultNode.from_result,
            batch_service.update_batch,
            items,
            atomic=atomic,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def delete_content_item(self, info: Info, id: int, dry_run: bool = False) -> ContentItemNode:
        return await _resolve(
            info,
            ContentItemNode.from_row,
            content_item_service.delete_item,
            id,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def delete_content_items_batch(
        self,
        info: Info,
        ids: List[int],
        atomic: bool = False,
        dry_run: bool = False,
    ) -> BatchResultNode:
        return await _resolve(
            info,
            BatchResultNode.from_result,
            batch_service.delete_batch,
            ids,
            atomic=atomic,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )

    @strawberry.mutation
    async def rollback_content_item(
        self,
        info: Info,
        id: int,
        version: int,
        dry_run: bool = False,
    ) -> ContentItemNode:
        return await _resolve(
            info,
            ContentItemNode.from_row,
            content_item_service.rollback_item,
            id,
            version,
            dry_run=dry_run,
            **_audit_kwargs(info),
        )


schema = strawberry.Schema(query=Query, mutation=Mutation)


def get_graphql_context(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> dict:
    return {"db": db, "actor": ctx.actor, "request_id": ctx.request_id}


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_graphql_context)
