"""세 프로토콜 표면이 공유하는 구조화 오류 타입과 오류 코드별 생성 헬퍼입니다.

모든 오류는 ``{code, error, remediation, context?}`` 형태로 직렬화되어
에이전트가 사람 개입 없이 스스로 요청을 수정할 수 있도록 한다.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder

from agentcms.services.content_schema import ValidationFailure


class ContentServiceError(HTTPException):
    def __init__(
        self,
        status_code: int,
        code: str,
        error: str,
        remediation: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.error = error
        self.remediation = remediation
        self.context = context
        super().__init__(status_code=status_code, detail=self.envelope())

    def envelope(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "code": self.code,
            "error": self.error,
            "remediation": self.remediation,
        }
        if self.context:
            payload["context"] = self.context
        return payload

    def __str__(self) -> str:
        return f"{self.code}: {self.error}"


def from_validation_failure(failure: ValidationFailure) -> ContentServiceError:
    return ContentServiceError(400, failure.code, failure.error, failure.remediation, failure.context)


def content_type_not_found(content_type_id: int) -> ContentServiceError:
    return ContentServiceError(
        404,
        "CONTENT_TYPE_NOT_FOUND",
        "Content type not found",
        f"The content type with ID {content_type_id} does not exist. "
        "List available types with GET /api/content-types to find valid IDs.",
        {"contentTypeId": content_type_id},
    )


def content_item_not_found(item_id: int) -> ContentServiceError:
    return ContentServiceError(
        404,
        "CONTENT_ITEM_NOT_FOUND",
        "Content item not found",
        f"The content item with ID {item_id} does not exist. "
        "List available items with GET /api/content-items to find valid IDs.",
        {"id": item_id},
    )


def target_version_not_found(item_id: int, version: int) -> ContentServiceError:
    return ContentServiceError(
        404,
        "TARGET_VERSION_NOT_FOUND",
        "Target version not found",
        f"Version {version} does not exist for content item {item_id}. "
        f"Use GET /api/content-items/{item_id}/versions to list available versions.",
        {"id": item_id, "version": version},
    )


def empty_update_body() -> ContentServiceError:
    return ContentServiceError(
        400,
        "EMPTY_UPDATE_BODY",
        "Empty update payload",
        "The request body must contain at least one field to update (contentTypeId, data, or status). "
        'Send a body like { "data": "...", "status": "published" }.',
    )


def empty_batch(field: str = "items") -> ContentServiceError:
    return ContentServiceError(
        400,
        "EMPTY_BATCH",
        "Batch request is empty",
        f"Provide at least one entry in {field}.",
    )


def batch_too_large(size: int, limit: int) -> ContentServiceError:
    return ContentServiceError(
        400,
        "BATCH_TOO_LARGE",
        "Batch request exceeds the maximum size",
        f"Split the request into batches of at most {limit} entries.",
        {"size": size, "limit": limit},
    )


def batch_atomic_failed(operation: str, context: Dict[str, Any]) -> ContentServiceError:
    return ContentServiceError(
        400,
        "BATCH_ATOMIC_FAILED",
        f"Atomic batch {operation} failed",
        "Fix the failing item and retry; atomic mode rolls back all items on failure.",
        context,
    )


def slug_conflict(slug: str) -> ContentServiceError:
    return ContentServiceError(
        409,
        "CONTENT_TYPE_SLUG_CONFLICT",
        "Content type slug already exists",
        f"Choose a different slug than '{slug}' or update the existing content type instead.",
        {"slug": slug},
    )


def content_type_in_use(content_type_id: int, item_count: int) -> ContentServiceError:
    return ContentServiceError(
        409,
        "CONTENT_TYPE_IN_USE",
        "Content type still has content items",
        f"Delete or move the {item_count} content item(s) of content type {content_type_id} before deleting it.",
        {"contentTypeId": content_type_id, "itemCount": item_count},
    )


def internal_error() -> ContentServiceError:
    return ContentServiceError(
        500,
        "INTERNAL_ERROR",
        "Internal server error",
        "The storage backend failed to complete the request. Retry later; no partial changes were committed.",
    )


def request_validation_failed(details: List[Dict[str, Any]]) -> ContentServiceError:
    return ContentServiceError(
        400,
        "VALIDATION_ERROR",
        "Request payload failed validation",
        "Review the payload against the endpoint contract. Ensure all required fields are present "
        "and properly typed, then retry.",
        {"validation": jsonable_encoder(details)},
    )
