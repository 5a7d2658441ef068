import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from agentcms.database import Base, get_db
from agentcms.main import app
from agentcms.models.content_type import ContentType
from agentcms.models.content_item import ContentItem

TEST_DB_URL = "sqlite:///./test_agentcms.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ARTICLE_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "body": {"type": "string"},
    },
    "required": ["title", "body"],
}


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_type(db):
    content_type = ContentType(
        name="Article",
        slug="article",
        schema=json.dumps(ARTICLE_SCHEMA),
        description="title/body article",
    )
    db.add(content_type)
    db.commit()
    db.refresh(content_type)
    return content_type


@pytest.fixture
def seed_item(db, seed_type):
    item = ContentItem(
        content_type_id=seed_type.id,
        data=json.dumps({"title": "Hello", "body": "first"}),
        status="draft",
        version=1,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def item_data(row) -> dict:
    return json.loads(row["data"] if isinstance(row, dict) else row.data)
