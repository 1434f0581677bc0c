# backend/news_api/news/models.py
import uuid
from slugify import slugify
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

news_likes = Table(
    "news_likes",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("news_id", Integer, ForeignKey("news.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


def generate_slug(title: str) -> str:
    """Slugified title plus a short random suffix, e.g. ``hello-world-3f9a1c2b``."""
    return f"{slugify(title, max_length=200)}-{uuid.uuid4().hex[:8]}"


class News(Base):
    __tablename__ = "news"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    # Set once at creation and never rewritten
    slug = Column(String(255), unique=True, nullable=False, index=True)
    body = Column(Text, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User", back_populates="news")
    images = relationship("Image", back_populates="news", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="news", cascade="all, delete-orphan", passive_deletes=True)
    liked_by_users = relationship("User", secondary=news_likes, back_populates="liked_news")

    def __repr__(self) -> str:
        return f"News(id={self.id}, slug={self.slug!r}, author_id={self.author_id}, views={self.views})"
    def __str__(self) -> str:
        return self.title


class Image(Base):
    __tablename__ = "images"

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String(255), nullable=False)
    news_id = Column(Integer, ForeignKey("news.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    news = relationship("News", back_populates="images")

    def __repr__(self) -> str:
        return f"Image(id={self.id}, url={self.url!r}, news_id={self.news_id})"
