"""Content Item 배치 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from typing import List, Optional

from agentcms.schemas.common import CamelModel
from agentcms.schemas.content_item import ContentItemBatchUpdateEntry, ContentItemCreate


class BatchCreateRequest(CamelModel):
    items: List[ContentItemCreate]
    atomic: bool = False
    dry_run: bool = False


class BatchUpdateRequest(CamelModel):
    items: List[ContentItemBatchUpdateEntry]
    atomic: bool = False
    dry_run: bool = False


class BatchDeleteRequest(CamelModel):
    ids: List[int]
    atomic: bool = False
    dry_run: bool = False


class BatchItemResult(CamelModel):
    index: int
    ok: bool
    id: Optional[int] = None
    version: Optional[int] = None
    code: Optional[str] = None
    error: Optional[str] = None


class BatchResult(CamelModel):
    atomic: bool
    results: List[BatchItemResult]
