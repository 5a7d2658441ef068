"""콘텐츠 타입 스키마와 콘텐츠 데이터를 JSON Schema로 검증하는 순수 함수 모음입니다.

엔진은 ``validate_data(schema, data) -> ValidationFailure | None`` 형태의
좁은 인터페이스에만 의존하므로 검증기 구현은 교체할 수 있다.
"""

import json
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, best_match
from jsonschema.validators import validator_for


@dataclass(frozen=True)
class ValidationFailure:
    code: str
    error: str
    remediation: str
    context: Optional[Dict[str, Any]] = field(default=None)


def _parse_json(text: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (TypeError, ValueError) as exc:
        return False, str(exc)


@lru_cache(maxsize=256)
def _compile(schema_text: str):
    ok, parsed = _parse_json(schema_text)
    if not ok:
        return ValidationFailure(
            code="INVALID_CONTENT_SCHEMA_JSON",
            error="Invalid content schema JSON",
            remediation='Provide a valid JSON object in the content type "schema" field.',
            context={"details": parsed},
        )
    if not isinstance(parsed, dict):
        return ValidationFailure(
            code="INVALID_CONTENT_SCHEMA_TYPE",
            error="Invalid content schema type",
            remediation="Content type schema must be a JSON object that follows JSON Schema format.",
        )

    cls = validator_for(parsed, default=Draft202012Validator)
    try:
        cls.check_schema(parsed)
    except SchemaError as exc:
        return ValidationFailure(
            code="INVALID_CONTENT_SCHEMA_DEFINITION",
            error="Invalid JSON Schema definition",
            remediation="Ensure the schema is valid JSON Schema syntax (types, required, properties, etc.).",
            context={"details": exc.message},
        )
    return cls(parsed)


def _format_error(error) -> str:
    path = "/" + "/".join(str(part) for part in error.absolute_path)
    return f"{path} {error.message}".strip()


def validate_type_schema(schema_text: str) -> Optional[ValidationFailure]:
    compiled = _compile(schema_text)
    if isinstance(compiled, ValidationFailure):
        return compiled
    return None


def validate_data(schema_text: str, data_text: str) -> Optional[ValidationFailure]:
    compiled = _compile(schema_text)
    if isinstance(compiled, ValidationFailure):
        return compiled

    ok, parsed = _parse_json(data_text)
    if not ok:
        return ValidationFailure(
            code="INVALID_CONTENT_DATA_JSON",
            error="Invalid content data JSON",
            remediation='Provide valid JSON for the content item "data" field.',
            context={"details": parsed},
        )

    errors = list(compiled.iter_errors(parsed))
    if not errors:
        return None
    return ValidationFailure(
        code="CONTENT_SCHEMA_INVALID",
        error="Content data does not satisfy content type schema",
        remediation="Adjust content item data so it matches the content type JSON schema.",
        context={
            "details": _format_error(best_match(errors)),
            "errorCount": len(errors),
        },
    )


def serialize_data(data: Any) -> Optional[str]:
    """dict/list 입력은 JSON 문자열로 바꾸고, 문자열은 그대로 저장 형식으로 사용한다."""
    if data is None or isinstance(data, str):
        return data
    return json.dumps(data, ensure_ascii=False)
