"""Seed the database with a sample content type and items."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agentcms.database import SessionLocal, engine, Base
import agentcms.models  # noqa: F401

from agentcms.models.content_type import ContentType
from agentcms.services import content_item_service, content_type_service

BLOG_POST_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "body": {"type": "string"},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["title", "body"],
}


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(ContentType).count() > 0:
            print("Database already seeded. Skipping.")
            return

        blog_post = content_type_service.create_content_type(
            db,
            name="Blog Post",
            slug="blog-post",
            schema=BLOG_POST_SCHEMA,
            description="Long-form article with title and body",
            actor="seed",
        )
        posts = [
            ({"title": "첫 번째 글", "body": "에이전트가 작성한 첫 글입니다.", "tags": ["intro"]}, "published"),
            ({"title": "초안", "body": "검토 대기 중인 글입니다."}, "draft"),
        ]
        for data, status in posts:
            content_item_service.create_item(db, blog_post.id, data, status, actor="seed")

        print("Seed data created successfully.")
        print(f"  content type: {blog_post.slug} (id={blog_post.id})")
        print(f"  content items: {len(posts)}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
