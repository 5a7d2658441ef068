"""에이전트용 MCP 도구 서버입니다.

각 도구는 REST/GraphQL과 동일한 서비스 함수를 호출하는 얇은 어댑터이며,
호출마다 독립 세션을 열고 닫는다. 실패는 ``{code, error, remediation, context?}``
JSON 문자열을 담은 ``ToolError``로 전달된다.
"""

import json
import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agentcms.config import settings
from agentcms.database import SessionLocal
from agentcms.schemas.audit import AuditLogOut
from agentcms.schemas.batch import BatchResult
from agentcms.schemas.content_item import ContentItemBatchUpdateEntry, ContentItemCreate, ContentItemOut
from agentcms.schemas.content_type import ContentTypeOut
from agentcms.schemas.version import ContentItemVersionOut
from agentcms.services import (
    audit_service,
    batch_service,
    content_item_service,
    content_type_service,
    errors,
)
from agentcms.services.errors import ContentServiceError
from agentcms.utils.helpers import parse_timestamp

logger = logging.getLogger(__name__)

ACTOR = "mcp"


def _dump(schema: type[BaseModel], row: Any) -> Dict[str, Any]:
    return schema.model_validate(row).model_dump(by_alias=True, mode="json", exclude_none=True)


def _tool_error(exc: ContentServiceError) -> ToolError:
    return ToolError(json.dumps(exc.envelope(), ensure_ascii=False))


def build_tool_handlers(session_factory: Callable[[], Session] = SessionLocal) -> Dict[str, Callable[..., Any]]:
    """도구 이름 -> 핸들러 매핑을 만든다. 테스트에서는 핸들러를 직접 호출한다."""

    @contextmanager
    def session_scope() -> Iterator[Session]:
        db = session_factory()
        try:
            yield db
        except ContentServiceError as exc:
            raise _tool_error(exc) from exc
        except ValidationError as exc:
            failure = errors.request_validation_failed(exc.errors(include_url=False))
            raise _tool_error(failure) from exc
        except SQLAlchemyError as exc:
            logger.exception("[mcp] storage failure")
            raise _tool_error(errors.internal_error()) from exc
        finally:
            db.close()

    def _parse_time(value: Optional[str], field: str) -> Optional[datetime]:
        if value is None:
            return None
        parsed = parse_timestamp(value)
        if parsed is None:
            raise _tool_error(
                ContentServiceError(
                    400,
                    "INVALID_TIMESTAMP",
                    f"Invalid {field} timestamp",
                    f"Pass {field} as an ISO-8601 timestamp such as 2024-01-31T09:00:00.",
                    {field: value},
                )
            )
        return parsed

    # -- content types ------------------------------------------------------

    def create_content_type(
        name: str,
        slug: str,
        schema: Dict[str, Any] | str,
        description: Optional[str] = None,
        dryRun: bool = False,
    ) -> Dict[str, Any]:
        """Create a content type with a JSON Schema. dryRun=true validates without saving."""
        with session_scope() as db:
            row = content_type_service.create_content_type(
                db,
                name=name,
                slug=slug,
                schema=schema,
                description=description,
                dry_run=dryRun,
                actor=ACTOR,
            )
            return _dump(ContentTypeOut, row)

    def list_content_types() -> List[Dict[str, Any]]:
        """List all content types with their JSON Schemas."""
        with session_scope() as db:
            return [_dump(ContentTypeOut, row) for row in content_type_service.list_content_types(db)]

    def get_content_type(id: int) -> Dict[str, Any]:
        """Get one content type by ID."""
        with session_scope() as db:
            return _dump(ContentTypeOut, content_item_service.get_content_type(db, id))

    def update_content_type(
        id: int,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        schema: Dict[str, Any] | str | None = None,
        description: Optional[str] = None,
        dryRun: bool = False,
    ) -> Dict[str, Any]:
        """Update a content type. Provide at least one field."""
        with session_scope() as db:
            row = content_type_service.update_content_type(
                db,
                id,
                name=name,
                slug=slug,
                schema=schema,
                description=description,
                dry_run=dryRun,
                actor=ACTOR,
            )
            return _dump(ContentTypeOut, row)

    def delete_content_type(id: int, dryRun: bool = False) -> Dict[str, Any]:
        """Delete a content type that has no content items."""
        with session_scope() as db:
            row = content_type_service.delete_content_type(db, id, dry_run=dryRun, actor=ACTOR)
            return _dump(ContentTypeOut, row)

    # -- content items ------------------------------------------------------

    def create_content_item(
        contentTypeId: int,
        data: Dict[str, Any] | List[Any] | str,
        status: Optional[str] = None,
        dryRun: bool = False,
    ) -> Dict[str, Any]:
        """Create a content item validated against its content type schema.

        dryRun=true returns a preview with id=0 and version=1 and writes nothing.
        """
        with session_scope() as db:
            row = content_item_service.create_item(
                db, contentTypeId, data, status, dry_run=dryRun, actor=ACTOR
            )
            return _dump(ContentItemOut, row)

    def create_content_items_batch(
        items: List[Dict[str, Any]],
        atomic: bool = False,
        dryRun: bool = False,
    ) -> Dict[str, Any]:
        """Create several content items. atomic=true commits all or nothing."""
        with session_scope() as db:
            entries = [ContentItemCreate.model_validate(entry) for entry in items]
            result = batch_service.create_batch(db, entries, atomic=atomic, dry_run=dryRun, actor=ACTOR)
            return BatchResult.model_validate(result).model_dump(by_alias=True, exclude_none=True)

    def get_content_items(
        contentTypeId: Optional[int] = None,
        status: Optional[str] = None,
        createdAfter: Optional[str] = None,
        createdBefore: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """List content items with optional filters. limit defaults to 50, max 500."""
        created_after = _parse_time(createdAfter, "createdAfter")
        created_before = _parse_time(createdBefore, "createdBefore")
        with session_scope() as db:
            rows = content_item_service.list_items(
                db,
                content_type_id=contentTypeId,
                status=status,
                created_after=created_after,
                created_before=created_before,
                limit=limit,
                offset=offset,
            )
            return [_dump(ContentItemOut, row) for row in rows]

    def get_content_item(id: int) -> Dict[str, Any]:
        """Get one content item by ID."""
        with session_scope() as db:
            return _dump(ContentItemOut, content_item_service.get_item(db, id))

    def update_content_item(
        id: int,
        contentTypeId: Optional[int] = None,
        data: Dict[str, Any] | List[Any] | str | None = None,
        status: Optional[str] = None,
        dryRun: bool = False,
    ) -> Dict[str, Any]:
        """Update a content item. The previous state is kept as a version snapshot."""
        with session_scope() as db:
            row = content_item_service.update_item(
                db,
                id,
                content_type_id=contentTypeId,
                data=data,
                status=status,
                dry_run=dryRun,
                actor=ACTOR,
            )
            return _dump(ContentItemOut, row)

    def update_content_items_batch(
        items: List[Dict[str, Any]],
        atomic: bool = False,
        dryRun: bool = False,
    ) -> Dict[str, Any]:
        """Update several content items. Each entry needs an id plus fields to change."""
        with session_scope() as db:
            entries = [ContentItemBatchUpdateEntry.model_validate(entry) for entry in items]
            result = batch_service.update_batch(db, entries, atomic=atomic, dry_run=dryRun, actor=ACTOR)
            return BatchResult.model_validate(result).model_dump(by_alias=True, exclude_none=True)

    def delete_content_item(id: int, dryRun: bool = False) -> Dict[str, Any]:
        """Delete a content item together with its version history."""
        with session_scope() as db:
            row = content_item_service.delete_item(db, id, dry_run=dryRun, actor=ACTOR)
            return _dump(ContentItemOut, row)

    def delete_content_items_batch(
        ids: List[int],
        atomic: bool = False,
        dryRun: bool = False,
    ) -> Dict[str, Any]:
        """Delete several content items by ID."""
        with session_scope() as db:
            result = batch_service.delete_batch(db, ids, atomic=atomic, dry_run=dryRun, actor=ACTOR)
            return BatchResult.model_validate(result).model_dump(by_alias=True, exclude_none=True)

    def get_content_item_versions(id: int) -> List[Dict[str, Any]]:
        """List version snapshots of a content item, newest first."""
        with session_scope() as db:
            rows = content_item_service.list_item_versions(db, id)
            return [_dump(ContentItemVersionOut, row) for row in rows]

    def rollback_content_item(id: int, version: int, dryRun: bool = False) -> Dict[str, Any]:
        """Restore an earlier version as a new version. History is never rewritten."""
        with session_scope() as db:
            row = content_item_service.rollback_item(db, id, version, dry_run=dryRun, actor=ACTOR)
            return _dump(ContentItemOut, row)

    def get_audit_logs(
        entityType: Optional[str] = None,
        entityId: Optional[int] = None,
        action: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """List audit log entries, newest first."""
        with session_scope() as db:
            rows = audit_service.list_audit_logs(
                db,
                entity_type=entityType,
                entity_id=entityId,
                action=action,
                limit=limit,
            )
            return [_dump(AuditLogOut, row) for row in rows]

    handlers = [
        create_content_type,
        list_content_types,
        get_content_type,
        update_content_type,
        delete_content_type,
        create_content_item,
        create_content_items_batch,
        get_content_items,
        get_content_item,
        update_content_item,
        update_content_items_batch,
        delete_content_item,
        delete_content_items_batch,
        get_content_item_versions,
        rollback_content_item,
        get_audit_logs,
    ]
    return {fn.__name__: fn for fn in handlers}


def create_server(session_factory: Callable[[], Session] = SessionLocal) -> FastMCP:
    mcp = FastMCP(settings.MCP_SERVER_NAME, instructions=settings.MCP_SERVER_INSTRUCTIONS)
    for name, handler in build_tool_handlers(session_factory).items():
        mcp.add_tool(handler, name=name, description=handler.__doc__)
    return mcp


def main() -> None:
    # stdio 전송에서는 stdout이 프로토콜 채널이므로 로그는 stderr로 보낸다.
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    from agentcms.database import Base, engine

    Base.metadata.create_all(bind=engine)
    create_server().run(transport="stdio")


if __name__ == "__main__":
    main()
