"""JSON Schema 기반 콘텐츠 검증 순수 함수 테스트입니다."""

import json

from agentcms.services.content_schema import serialize_data, validate_data, validate_type_schema

SCHEMA = json.dumps(
    {
        "type": "object",
        "properties": {"title": {"type": "string"}, "tags": {"type": "array", "items": {"type": "string"}}},
        "required": ["title"],
    }
)


def test_valid_data_passes():
    assert validate_data(SCHEMA, json.dumps({"title": "ok", "tags": ["a"]})) is None


def test_invalid_data_reports_path_and_count():
    failure = validate_data(SCHEMA, json.dumps({"title": 1, "tags": ["a", 2]}))
    assert failure.code == "CONTENT_SCHEMA_INVALID"
    assert failure.context["errorCount"] == 2
    assert failure.context["details"].startswith("/")


def test_malformed_data_json():
    failure = validate_data(SCHEMA, "{title:")
    assert failure.code == "INVALID_CONTENT_DATA_JSON"
    assert failure.context["details"]


def test_broken_type_schema_blocks_data_validation():
    failure = validate_data('{"type": 12}', json.dumps({"title": "x"}))
    assert failure.code == "INVALID_CONTENT_SCHEMA_DEFINITION"


def test_type_schema_checks():
    assert validate_type_schema(SCHEMA) is None
    assert validate_type_schema("not json").code == "INVALID_CONTENT_SCHEMA_JSON"
    assert validate_type_schema('"string"').code == "INVALID_CONTENT_SCHEMA_TYPE"


def test_serialize_data_keeps_strings():
    assert serialize_data('{"a": 1}') == '{"a": 1}'
    assert serialize_data({"제목": "값"}) == '{"제목": "값"}'
    assert serialize_data(None) is None
