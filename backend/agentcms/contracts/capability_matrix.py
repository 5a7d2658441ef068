"""REST/GraphQL/MCP 세 표면이 모두 제공해야 하는 기능 목록입니다.

새 기능은 여기 먼저 등록하고, ``check_capability_parity``가 세 어댑터에
바인딩이 존재하는지 확인한다.
"""

from dataclasses import dataclass
from typing import Literal

RestMethod = Literal["GET", "POST", "PUT", "DELETE"]
GraphOperation = Literal["Query", "Mutation"]


@dataclass(frozen=True)
class RestBinding:
    method: RestMethod
    path: str


@dataclass(frozen=True)
class GraphBinding:
    operation: GraphOperation
    field: str


@dataclass(frozen=True)
class Capability:
    id: str
    description: str
    rest: RestBinding
    graph: GraphBinding
    tool: str


CAPABILITIES: tuple[Capability, ...] = (
    Capability(
        "create_content_type",
        "Create content type schema",
        RestBinding("POST", "/api/content-types"),
        GraphBinding("Mutation", "createContentType"),
        "create_content_type",
    ),
    Capability(
        "list_content_types",
        "List content types",
        RestBinding("GET", "/api/content-types"),
        GraphBinding("Query", "contentTypes"),
        "list_content_types",
    ),
    Capability(
        "get_content_type",
        "Get content type by ID",
        RestBinding("GET", "/api/content-types/{id}"),
        GraphBinding("Query", "contentType"),
        "get_content_type",
    ),
    Capability(
        "update_content_type",
        "Update content type",
        RestBinding("PUT", "/api/content-types/{id}"),
        GraphBinding("Mutation", "updateContentType"),
        "update_content_type",
    ),
    Capability(
        "delete_content_type",
        "Delete content type",
        RestBinding("DELETE", "/api/content-types/{id}"),
        GraphBinding("Mutation", "deleteContentType"),
        "delete_content_type",
    ),
    Capability(
        "create_content_item",
        "Create content item",
        RestBinding("POST", "/api/content-items"),
        GraphBinding("Mutation", "createContentItem"),
        "create_content_item",
    ),
    Capability(
        "create_content_items_batch",
        "Create multiple content items",
        RestBinding("POST", "/api/content-items/batch"),
        GraphBinding("Mutation", "createContentItemsBatch"),
        "create_content_items_batch",
    ),
    Capability(
        "list_content_items",
        "List content items",
        RestBinding("GET", "/api/content-items"),
        GraphBinding("Query", "contentItems"),
        "get_content_items",
    ),
    Capability(
        "get_content_item",
        "Get content item by ID",
        RestBinding("GET", "/api/content-items/{id}"),
        GraphBinding("Query", "contentItem"),
        "get_content_item",
    ),
    Capability(
        "update_content_item",
        "Update content item",
        RestBinding("PUT", "/api/content-items/{id}"),
        GraphBinding("Mutation", "updateContentItem"),
        "update_content_item",
    ),
    Capability(
        "update_content_items_batch",
        "Update multiple content items",
        RestBinding("PUT", "/api/content-items/batch"),
        GraphBinding("Mutation", "updateContentItemsBatch"),
        "update_content_items_batch",
    ),
    Capability(
        "delete_content_item",
        "Delete content item",
        RestBinding("DELETE", "/api/content-items/{id}"),
        GraphBinding("Mutation", "deleteContentItem"),
        "delete_content_item",
    ),
    Capability(
        "delete_content_items_batch",
        "Delete multiple content items",
        RestBinding("DELETE", "/api/content-items/batch"),
        GraphBinding("Mutation", "deleteContentItemsBatch"),
        "delete_content_items_batch",
    ),
    Capability(
        "list_content_item_versions",
        "List version history of a content item",
        RestBinding("GET", "/api/content-items/{id}/versions"),
        GraphBinding("Query", "contentItemVersions"),
        "get_content_item_versions",
    ),
    Capability(
        "rollback_content_item",
        "Roll content item back to an earlier version",
        RestBinding("POST", "/api/content-items/{id}/rollback"),
        GraphBinding("Mutation", "rollbackContentItem"),
        "rollback_content_item",
    ),
    Capability(
        "list_audit_logs",
        "List audit log entries",
        RestBinding("GET", "/api/audit-logs"),
        GraphBinding("Query", "auditLogs"),
        "get_audit_logs",
    ),
)

DRY_RUN_CAPABILITIES: frozenset[str] = frozenset(
    {
        "create_content_type",
        "update_content_type",
        "delete_content_type",
        "create_content_item",
        "create_content_items_batch",
        "update_content_item",
        "update_content_items_batch",
        "delete_content_item",
        "delete_content_items_batch",
        "rollback_content_item",
    }
)
