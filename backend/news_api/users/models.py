# backend/news_api/users/models.py
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Table,
    Enum as SQLEnum
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

class UserRole(str, PyEnum):
    MEMBER = "member"
    ADMIN = "admin"

class Gender(str, PyEnum):
    UNSELECTED = "Unselected"
    MALE = "Male"
    FEMALE = "Female"

# Directed edge: follower_id follows following_id.
user_followers = Table(
    "user_followers",
    Base.metadata,
    Column("follower_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("following_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_activated = Column(Boolean, default=False, nullable=False)
    role = Column(SQLEnum(UserRole, name="user_role"), default=UserRole.MEMBER, nullable=False)

    first_name = Column(String(50), default="", nullable=False)
    last_name = Column(String(50), default="", nullable=False)
    phone_number = Column(String(30), default="", nullable=False)
    country = Column(String(100), default="", nullable=False)
    city = Column(String(100), default="", nullable=False)
    gender = Column(SQLEnum(Gender, name="user_gender"), default=Gender.UNSELECTED, nullable=False)
    avatar = Column(String(255), default="", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    news = relationship("News", back_populates="author", passive_deletes=True)
    comments = relationship("Comment", back_populates="author", passive_deletes=True)
    followers = relationship(
        "User",
        secondary=user_followers,
        primaryjoin=id == user_followers.c.following_id,
        secondaryjoin=id == user_followers.c.follower_id,
        back_populates="following",
    )
    following = relationship(
        "User",
        secondary=user_followers,
        primaryjoin=id == user_followers.c.follower_id,
        secondaryjoin=id == user_followers.c.following_id,
        back_populates="followers",
    )
    liked_news = relationship("News", secondary="news_likes", back_populates="liked_by_users")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username!r}, email={self.email!r}, role={self.role!r})"
    def __str__(self) -> str:
        return f"{self.username} ({self.email})"
