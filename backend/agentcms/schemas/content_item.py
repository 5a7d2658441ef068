"""Content Item 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from agentcms.schemas.common import CamelModel

ContentData = Union[str, Dict[str, Any], List[Any]]


class ContentItemCreate(CamelModel):
    content_type_id: int
    data: ContentData
    status: Optional[str] = None


class ContentItemUpdate(CamelModel):
    content_type_id: Optional[int] = None
    data: Optional[ContentData] = None
    status: Optional[str] = None


class ContentItemBatchUpdateEntry(ContentItemUpdate):
    id: int


class ContentItemRollback(CamelModel):
    version: int


class ContentItemOut(CamelModel):
    id: int
    content_type_id: int
    data: str
    status: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
