"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from agentcms.models.content_type import ContentType
from agentcms.models.content_item import ContentItem
from agentcms.models.content_version import ContentItemVersion
from agentcms.models.audit_log import AuditLog

__all__ = [
    "ContentType",
    "ContentItem",
    "ContentItemVersion",
    "AuditLog",
]
