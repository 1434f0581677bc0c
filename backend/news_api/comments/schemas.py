from datetime import datetime

from pydantic import Field

from ..models import CustomModel
from ..users.schema import UserBrief


class CommentCreate(CustomModel):
    text: str = Field(..., min_length=1, json_schema_extra={"example": "This is comment text"})
    news_slug: str = Field(..., min_length=1, json_schema_extra={"example": "this-is-news-1"})


class CommentUpdate(CustomModel):
    text: str = Field(..., min_length=1, json_schema_extra={"example": "This is comment text"})


class CommentOut(CustomModel):
    id: int
    text: str
    author_id: int
    news_id: int
    created_at: datetime
    updated_at: datetime
    author: UserBrief
