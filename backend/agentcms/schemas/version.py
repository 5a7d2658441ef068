"""콘텐츠 항목 버전 이력 응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Optional

from agentcms.schemas.common import CamelModel


class ContentItemVersionOut(CamelModel):
    id: int
    content_item_id: int
    version: int
    data: str
    status: str
    created_at: Optional[datetime] = None
