# backend/news_api/news/schemas.py
from ..models import CustomModel
from ..users.schema import UserBrief
from ..comments.schemas import CommentOut
from pydantic import Field, computed_field
from typing import Optional, List, Literal
from datetime import datetime

class ImageOut(CustomModel):
    id: int
    url: str
    news_id: int
    created_at: datetime

class NewsBrief(CustomModel):
    id: int
    title: str
    slug: str
    body: str
    views: int
    author_id: int
    created_at: datetime
    updated_at: datetime

class NewsOut(NewsBrief):
    author: UserBrief
    images: List[ImageOut] = []
    comments: List[CommentOut] = []
    liked_by_users: List[UserBrief] = []

    @computed_field
    @property
    def likes_count(self) -> int:
        return len(self.liked_by_users)

class NewsUpdate(CustomModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    body: Optional[str] = Field(None, min_length=1)

class NewsSearch(CustomModel):
    title: Optional[str] = Field(None, json_schema_extra={"example": "This is news title"})
    body: Optional[str] = Field(None, json_schema_extra={"example": "This is news body with text"})
    views: Optional[Literal["ASC", "DESC"]] = Field(None, description="Sort by views")
    take: int = Field(10, ge=1, le=100, description="Number of news by page")
    skip: int = Field(0, ge=0, description="Number of news to skip")

class NewsSearchResult(CustomModel):
    items: List[NewsBrief]
    total_count: int
