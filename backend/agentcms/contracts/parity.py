"""세 프로토콜 어댑터가 기능 목록과 어긋나지 않았는지 구조적으로 검사합니다.

요청 경로에서 실행하지 않고 CI 또는 테스트에서 호출한다.
"""

import inspect
import re
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Mapping, Set, Tuple

from fastapi import FastAPI
from graphql import ObjectTypeDefinitionNode, parse

from agentcms.contracts.capability_matrix import CAPABILITIES, DRY_RUN_CAPABILITIES, Capability

REST_DRY_RUN_PARAM = "mode"
GRAPH_DRY_RUN_ARG = "dryRun"
TOOL_DRY_RUN_PARAM = "dryRun"

_PATH_PARAM = re.compile(r"\{[^}]+\}")
_HTTP_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE"}


def normalize_path(path: str) -> str:
    return _PATH_PARAM.sub("{id}", path)


def extract_rest_routes(app: FastAPI) -> Dict[str, Set[str]]:
    """OpenAPI 문서에서 ``METHOD path`` -> 쿼리 파라미터 이름 집합을 만든다.

    include_router로 중첩된 라우트도 문서에는 평탄하게 나타나므로 라우트 객체 대신 문서를 읽는다.
    """
    routes: Dict[str, Set[str]] = {}
    for path, operations in app.openapi().get("paths", {}).items():
        normalized = normalize_path(path)
        for method, operation in operations.items():
            if method.upper() not in _HTTP_METHODS:
                continue
            names = {
                param["name"]
                for param in operation.get("parameters", ())
                if param.get("in") == "query"
            }
            routes.setdefault(f"{method.upper()} {normalized}", set()).update(names)
    return routes


def extract_graph_surface(sdl: str) -> Dict[str, Dict[str, Set[str]]]:
    """``{"Query": {field: {args}}, "Mutation": {...}}`` 형태로 필드와 인자를 반환한다."""
    surface: Dict[str, Dict[str, Set[str]]] = {"Query": {}, "Mutation": {}}
    for definition in parse(sdl).definitions:
        if not isinstance(definition, ObjectTypeDefinitionNode):
            continue
        operation = definition.name.value
        if operation not in surface:
            continue
        for field in definition.fields or ():
            surface[operation][field.name.value] = {arg.name.value for arg in field.arguments or ()}
    return surface


def extract_tool_surface(tools: Mapping[str, Callable[..., Any]]) -> Dict[str, Set[str]]:
    return {name: set(inspect.signature(handler).parameters) for name, handler in tools.items()}


def _duplicates(values: Iterable[str]) -> List[str]:
    return sorted(value for value, count in Counter(values).items() if count > 1)


def check_capability_parity(
    app: FastAPI,
    schema: Any,
    tools: Mapping[str, Callable[..., Any]],
    capabilities: Tuple[Capability, ...] = CAPABILITIES,
    dry_run_capabilities: frozenset = DRY_RUN_CAPABILITIES,
) -> List[str]:
    """위반 사항 목록을 반환한다. 빈 리스트면 세 표면이 일치한다."""
    violations: List[str] = []

    for dup in _duplicates(cap.id for cap in capabilities):
        violations.append(f"duplicate capability id: {dup}")
    known_ids = {cap.id for cap in capabilities}
    for unknown in sorted(dry_run_capabilities - known_ids):
        violations.append(f"dry-run capability not registered: {unknown}")

    rest_routes = extract_rest_routes(app)
    sdl = schema if isinstance(schema, str) else schema.as_str()
    graph = extract_graph_surface(sdl)
    tool_params = extract_tool_surface(tools)

    for cap in capabilities:
        rest_key = f"{cap.rest.method} {normalize_path(cap.rest.path)}"
        if rest_key not in rest_routes:
            violations.append(f"{cap.id}: REST route {rest_key} missing")

        graph_fields = graph.get(cap.graph.operation, {})
        if cap.graph.field not in graph_fields:
            violations.append(f"{cap.id}: GraphQL {cap.graph.operation}.{cap.graph.field} missing")

        if cap.tool not in tool_params:
            violations.append(f"{cap.id}: MCP tool {cap.tool} missing")

        if cap.id not in dry_run_capabilities:
            continue

        if cap.graph.operation != "Mutation":
            violations.append(f"{cap.id}: dry-run capability must be a GraphQL Mutation")
        if rest_key in rest_routes and REST_DRY_RUN_PARAM not in rest_routes[rest_key]:
            violations.append(f"{cap.id}: REST route {rest_key} lacks ?{REST_DRY_RUN_PARAM}=dry_run")
        if cap.graph.field in graph_fields and GRAPH_DRY_RUN_ARG not in graph_fields[cap.graph.field]:
            violations.append(f"{cap.id}: GraphQL {cap.graph.field} lacks {GRAPH_DRY_RUN_ARG} argument")
        if cap.tool in tool_params and TOOL_DRY_RUN_PARAM not in tool_params[cap.tool]:
            violations.append(f"{cap.id}: MCP tool {cap.tool} lacks {TOOL_DRY_RUN_PARAM} parameter")

    mapped_tools = {cap.tool for cap in capabilities}
    for extra in sorted(set(tool_params) - mapped_tools):
        violations.append(f"MCP tool {extra} is not registered as a capability")

    return violations
