"""GraphQL 표면에서 사용하는 strawberry 객체/입력 타입 정의입니다."""

from datetime import datetime
from typing import List, Optional

import strawberry
from strawberry.scalars import JSON


@strawberry.type(name="ContentType")
class ContentTypeNode:
    id: int
    name: str
    slug: str
    schema: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "ContentTypeNode":
        return cls(
            id=row.id,
            name=row.name,
            slug=row.slug,
            schema=row.schema,
            description=row.description,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@strawberry.type(name="ContentItem")
class ContentItemNode:
    id: int
    content_type_id: int
    data: str
    status: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "ContentItemNode":
        return cls(
            id=row.id,
            content_type_id=row.content_type_id,
            data=row.data,
            status=row.status,
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@strawberry.type(name="ContentItemVersion")
class ContentItemVersionNode:
    id: int
    content_item_id: int
    version: int
    data: str
    status: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "ContentItemVersionNode":
        return cls(
            id=row.id,
            content_item_id=row.content_item_id,
            version=row.version,
            data=row.data,
            status=row.status,
            created_at=row.created_at,
        )


@strawberry.type(name="AuditLog")
class AuditLogNode:
    id: int
    action: str
    entity_type: str
    entity_id: int
    actor: Optional[str] = None
    details: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "AuditLogNode":
        return cls(
            id=row.id,
            action=row.action,
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            actor=row.actor,
            details=row.details,
            created_at=row.created_at,
        )


@strawberry.type(name="BatchItemResult")
class BatchItemResultNode:
    index: int
    ok: bool
    id: Optional[int] = None
    version: Optional[int] = None
    code: Optional[str] = None
    error: Optional[str] = None


@strawberry.type(name="BatchResult")
class BatchResultNode:
    atomic: bool
    results: List[BatchItemResultNode]

    @classmethod
    def from_result(cls, result: dict) -> "BatchResultNode":
        return cls(
            atomic=result["atomic"],
            results=[
                BatchItemResultNode(
                    index=row.index,
                    ok=row.ok,
                    id=row.id,
                    version=row.version,
                    code=row.code,
                    error=row.error,
                )
                for row in result["results"]
            ],
        )


@strawberry.input
class ContentItemInput:
    content_type_id: int
    data: JSON
    status: Optional[str] = None


@strawberry.input
class ContentItemUpdateInput:
    id: int
    content_type_id: Optional[int] = None
    data: Optional[JSON] = None
    status: Optional[str] = None
