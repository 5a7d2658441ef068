"""커밋된 변경 작업마다 한 건씩 남는 감사 로그 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Index
from sqlalchemy.sql import func

from agentcms.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(20), nullable=False)  # create/update/delete/rollback
    entity_type = Column(String(30), nullable=False)  # content_type/content_item
    entity_id = Column(Integer, nullable=False)
    actor = Column(String(100), nullable=True)
    details = Column(Text, nullable=True)  # JSON string
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_audit_logs_entity", "entity_type", "entity_id"),
    )
