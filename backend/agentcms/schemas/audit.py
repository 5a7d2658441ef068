"""감사 로그 조회 응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Optional

from agentcms.schemas.common import CamelModel


class AuditLogOut(CamelModel):
    id: int
    action: str
    entity_type: str
    entity_id: int
    actor: Optional[str] = None
    details: Optional[str] = None
    created_at: Optional[datetime] = None
