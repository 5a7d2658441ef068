"""REST/GraphQL/MCP 표면 간 기능 일치 검사 테스트입니다."""

from dataclasses import replace

from fastapi import APIRouter, FastAPI, Query

from agentcms.contracts.capability_matrix import CAPABILITIES, DRY_RUN_CAPABILITIES, GraphBinding
from agentcms.contracts.parity import (
    check_capability_parity,
    extract_graph_surface,
    extract_rest_routes,
    normalize_path,
)
from agentcms.graph.schema import schema
from agentcms.main import app
from agentcms.tools.server import build_tool_handlers
from tests.conftest import TestingSession


def test_all_surfaces_match_capability_matrix():
    assert check_capability_parity(app, schema, build_tool_handlers(TestingSession)) == []


def test_capability_ids_are_unique_and_dry_run_ids_registered():
    ids = [cap.id for cap in CAPABILITIES]
    assert len(ids) == len(set(ids))
    assert DRY_RUN_CAPABILITIES <= set(ids)


def test_rest_paths_are_normalised():
    assert normalize_path("/api/content-items/{item_id}/rollback") == "/api/content-items/{id}/rollback"
    routes = extract_rest_routes(app)
    assert "POST /api/content-items/{id}/rollback" in routes
    assert "mode" in routes["PUT /api/content-items/{id}"]
    assert {"contentTypeId", "status", "limit", "offset"} <= routes["GET /api/content-items"]


def test_routes_from_included_routers_are_found():
    router = APIRouter(prefix="/api/content-items")

    @router.delete("/{item_id}")
    def delete_item(item_id: int, mode: str = Query(None)):
        return None

    nested = FastAPI()
    nested.include_router(router)
    assert extract_rest_routes(nested) == {"DELETE /api/content-items/{id}": {"mode"}}


def test_missing_rest_route_is_reported():
    bare = FastAPI()
    violations = check_capability_parity(bare, schema, build_tool_handlers(TestingSession))
    assert len([v for v in violations if "REST route" in v]) == len(CAPABILITIES)
    assert "rollback_content_item: REST route POST /api/content-items/{id}/rollback missing" in violations


def test_missing_tool_is_reported():
    tools = build_tool_handlers(TestingSession)
    tools.pop("rollback_content_item")
    violations = check_capability_parity(app, schema, tools)
    assert "rollback_content_item: MCP tool rollback_content_item missing" in violations


def test_tool_without_dry_run_parameter_is_reported():
    tools = build_tool_handlers(TestingSession)

    def delete_content_item(id: int):
        return {}

    tools["delete_content_item"] = delete_content_item
    violations = check_capability_parity(app, schema, tools)
    assert violations == ["delete_content_item: MCP tool delete_content_item lacks dryRun parameter"]


def test_unmapped_tool_is_reported():
    tools = build_tool_handlers(TestingSession)
    tools["purge_everything"] = lambda: None
    violations = check_capability_parity(app, schema, tools)
    assert violations == ["MCP tool purge_everything is not registered as a capability"]


def test_dry_run_capability_moved_to_query_is_reported():
    sdl = (
        schema.as_str()
        .replace("createContentItem(", "legacyCreate(")
        .replace("type Query {", "type Query {\n  createContentItem(contentTypeId: Int!, dryRun: Boolean! = false): Int")
    )
    surface = extract_graph_surface(sdl)
    assert "createContentItem" in surface["Query"]
    assert "createContentItem" not in surface["Mutation"]

    violations = check_capability_parity(app, sdl, build_tool_handlers(TestingSession))
    assert violations == ["create_content_item: GraphQL Mutation.createContentItem missing"]


def test_dry_run_capability_declared_as_query_is_reported():
    capabilities = tuple(
        replace(cap, graph=GraphBinding("Query", cap.graph.field)) if cap.id == "rollback_content_item" else cap
        for cap in CAPABILITIES
    )
    violations = check_capability_parity(app, schema, build_tool_handlers(TestingSession), capabilities)
    assert "rollback_content_item: dry-run capability must be a GraphQL Mutation" in violations


def test_rest_route_without_mode_query_is_reported():
    def with_mode(mode: str = Query(None)):
        return None

    def without_mode():
        return None

    bare = FastAPI()
    for cap in CAPABILITIES:
        endpoint = without_mode if cap.id == "delete_content_item" else with_mode
        bare.add_api_route(cap.rest.path, endpoint, methods=[cap.rest.method])

    violations = check_capability_parity(bare, schema, build_tool_handlers(TestingSession))
    assert violations == [
        "delete_content_item: REST route DELETE /api/content-items/{id} lacks ?mode=dry_run"
    ]
