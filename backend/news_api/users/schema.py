from pydantic import Field, computed_field
from typing import List, Optional
from datetime import datetime

from ..models import CustomModel
from .models import UserRole, Gender

class UserBrief(CustomModel):
    id: int = Field(..., json_schema_extra={"example": 1})
    username: str = Field(..., json_schema_extra={"example": "Maks"})
    email: str = Field(..., json_schema_extra={"example": "maks@gmail.com"})
    avatar: str = ""

class UserPublic(UserBrief):
    is_activated: bool
    role: UserRole
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    country: str = ""
    city: str = ""
    gender: Gender
    created_at: datetime
    updated_at: datetime

class NewsSummary(CustomModel):
    """An article as listed on its author's profile."""
    id: int
    title: str
    slug: str
    views: int
    created_at: datetime

class CommentSummary(CustomModel):
    id: int
    text: str
    news_id: int
    created_at: datetime

class UserProfile(UserPublic):
    news: List[NewsSummary] = []
    comments: List[CommentSummary] = []

class UserDetail(UserProfile):
    followers: List[UserBrief] = []
    following: List[UserBrief] = []

    @computed_field
    @property
    def followers_count(self) -> int:
        return len(self.followers)

    @computed_field
    @property
    def following_count(self) -> int:
        return len(self.following)

class UserSearch(CustomModel):
    username: Optional[str] = None
    email: Optional[str] = None

class UserProfileUpdate(CustomModel):
    """Optional-field patch; a field left as None keeps its stored value."""
    first_name: Optional[str] = Field(None, max_length=50, json_schema_extra={"example": "Maks"})
    last_name: Optional[str] = Field(None, max_length=50, json_schema_extra={"example": "Tishchuk"})
    phone_number: Optional[str] = Field(None, max_length=30, json_schema_extra={"example": "0991234567"})
    country: Optional[str] = Field(None, max_length=100, json_schema_extra={"example": "Ukraine"})
    city: Optional[str] = Field(None, max_length=100, json_schema_extra={"example": "Kyiv"})
    # Checked against Gender in the service so the 409 contract holds
    gender: Optional[str] = Field(None, json_schema_extra={"example": "Male"})
