from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from agentcms.database import Base


class ContentItem(Base):
    __tablename__ = "content_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_type_id = Column(Integer, ForeignKey("content_types.id"), nullable=False)
    data = Column(Text, nullable=False)  # JSON string
    status = Column(String(30), nullable=False, default="draft")  # draft/published/archived
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)

    content_type = relationship("ContentType", back_populates="items")
    versions = relationship(
        "ContentItemVersion",
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_content_items_type_status", "content_type_id", "status"),
    )
