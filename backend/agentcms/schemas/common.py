"""모든 요청/응답 스키마가 공유하는 camelCase 기본 모델과 오류 응답 계약입니다."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # 입력은 camelCase/snake_case 모두 허용, 출력은 camelCase
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ErrorEnvelope(BaseModel):
    code: str
    error: str
    remediation: str
    context: Optional[Dict[str, Any]] = None
