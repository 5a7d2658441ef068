"""콘텐츠 타입(JSON Schema 정의) SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from agentcms.database import Base


class ContentType(Base):
    __tablename__ = "content_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    schema = Column(Text, nullable=False)  # JSON Schema string
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)

    items = relationship("ContentItem", back_populates="content_type")
