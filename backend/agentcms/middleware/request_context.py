import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Header


@dataclass(frozen=True)
class RequestContext:
    actor: Optional[str]
    request_id: str


def get_request_context(
    x_actor: Optional[str] = Header(None),
    x_request_id: Optional[str] = Header(None),
) -> RequestContext:
    # 인증은 별도 계층에서 처리하고, 여기서는 감사 로그용 식별자만 전달한다.
    return RequestContext(
        actor=(x_actor or "").strip() or None,
        request_id=(x_request_id or "").strip() or uuid.uuid4().hex,
    )


def is_dry_run(mode: Optional[str]) -> bool:
    return mode == "dry_run"
