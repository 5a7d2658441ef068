"""Content Type 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import Field

from agentcms.schemas.common import CamelModel

SchemaDocument = Union[str, Dict[str, Any]]


# BaseModel.schema와 충돌하지 않도록 필드명은 schema_, 외부 키는 schema를 사용한다.
class ContentTypeCreate(CamelModel):
    name: str
    slug: str
    schema_: SchemaDocument = Field(alias="schema")
    description: Optional[str] = None


class ContentTypeUpdate(CamelModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    schema_: Optional[SchemaDocument] = Field(default=None, alias="schema")
    description: Optional[str] = None


class ContentTypeOut(CamelModel):
    id: int
    name: str
    slug: str
    schema_: str = Field(alias="schema")
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
