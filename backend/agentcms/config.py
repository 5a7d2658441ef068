"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./agentcms.db"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # Batch execution
    BATCH_MAX_ITEMS: int = 100

    # List pagination
    DEFAULT_LIST_LIMIT: int = 50
    MAX_LIST_LIMIT: int = 500

    # Audit
    AUDIT_ENABLED: bool = True
    DEFAULT_AUDIT_LIMIT: int = 50

    # MCP tool server
    MCP_SERVER_NAME: str = "agentcms"
    MCP_SERVER_INSTRUCTIONS: str = (
        "Manage schema-validated content items. Every write tool accepts dryRun=true "
        "to validate without persisting. Errors are JSON objects with code, error, "
        "remediation and optional context."
    )

    def list_limit(self, requested: int | None) -> int:
        # 요청값이 없으면 기본값, 상한은 MAX_LIST_LIMIT
        if requested is None:
            return self.DEFAULT_LIST_LIMIT
        return max(1, min(int(requested), self.MAX_LIST_LIMIT))

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
