"""콘텐츠 항목의 변경 직전 상태를 저장하는 버전 이력 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from agentcms.database import Base


class ContentItemVersion(Base):
    __tablename__ = "content_item_versions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_item_id = Column(
        Integer,
        ForeignKey("content_items.id", ondelete="CASCADE"),
        nullable=False,
    )
    version = Column(Integer, nullable=False)
    data = Column(Text, nullable=False)  # JSON string
    status = Column(String(30), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    item = relationship("ContentItem", back_populates="versions")

    __table_args__ = (
        # 동시 갱신이 같은 버전 번호를 두 번 기록하지 못하도록 한다.
        UniqueConstraint("content_item_id", "version", name="uq_content_item_version"),
    )
