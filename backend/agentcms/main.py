"""FastAPI 애플리케이션 진입점. REST 라우터, GraphQL 엔드포인트, 구조화 오류 핸들러를 등록합니다."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from agentcms.config import settings
from agentcms.database import Base, engine
import agentcms.models  # noqa: F401 - 모델 import로 metadata 등록
from agentcms.graph.schema import create_graphql_router
from agentcms.routers import audit_logs, content_items, content_types
from agentcms.services import errors
from agentcms.services.errors import ContentServiceError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Agent CMS",
    description="에이전트가 REST/GraphQL/MCP로 동일하게 다루는 스키마 검증 콘텐츠 관리 시스템",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ContentServiceError)
def handle_content_service_error(request: Request, exc: ContentServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.envelope())


@app.exception_handler(RequestValidationError)
def handle_request_validation_error(request: Request, exc: RequestValidationError):
    failure = errors.request_validation_failed(exc.errors())
    return JSONResponse(status_code=failure.status_code, content=failure.envelope())


@app.exception_handler(SQLAlchemyError)
def handle_storage_error(request: Request, exc: SQLAlchemyError):
    logger.exception("[api] storage failure on %s %s", request.method, request.url.path)
    failure = errors.internal_error()
    return JSONResponse(status_code=failure.status_code, content=failure.envelope())


# Register all routers
app.include_router(content_types.router)
app.include_router(content_items.router)
app.include_router(audit_logs.router)
app.include_router(create_graphql_router(), prefix="/graphql")


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Agent CMS"}
