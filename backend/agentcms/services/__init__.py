"""서비스 레이어 패키지 초기화 모듈입니다."""

from agentcms.services import (
    audit_service,
    batch_service,
    content_item_service,
    content_type_service,
    version_service,
)
