# backend/news_api/news/router.py
from fastapi import APIRouter, File, Form, Query, UploadFile, status
from typing import Annotated, List, Optional

from ..database import SessionDep
from ..models import MessageResponse
from ..storage import FileStoreDep
from ..auth.dependencies import CurrentUser
from ..users.models import User
from .schemas import NewsBrief, NewsOut, NewsSearch, NewsSearchResult, NewsUpdate
from . import service


router = APIRouter(prefix="/news", tags=["news"])

@router.post("/", response_model=NewsOut, status_code=status.HTTP_201_CREATED)
async def create_news(
    db: SessionDep,
    file_store: FileStoreDep,
    title: str = Form(..., min_length=1, max_length=255),
    body: str = Form(..., min_length=1),
    images: Optional[List[UploadFile]] = File(None),
    current_user: User = CurrentUser,
):
    return await service.create_news(
        db, title=title, body=body, author=current_user, file_store=file_store, images=images
    )

@router.get("/", response_model=List[NewsOut])
async def list_news(db: SessionDep):
    return await service.find_all_news(db)

@router.get("/search", response_model=NewsSearchResult)
async def search_news(db: SessionDep, query: Annotated[NewsSearch, Query()]):
    return await service.search_news(db, query)

@router.get("/following-users-news", response_model=List[NewsBrief])
async def following_users_news(db: SessionDep, current_user: User = CurrentUser):
    return await service.following_users_news(db, current_user)

@router.get("/{slug}", response_model=NewsOut)
async def get_news(slug: str, db: SessionDep, current_user: User = CurrentUser):
    return await service.find_one_news(db, slug)

@router.put("/{slug}", response_model=NewsOut)
async def update_news(
    slug: str,
    db: SessionDep,
    file_store: FileStoreDep,
    title: Optional[str] = Form(None, min_length=1, max_length=255),
    body: Optional[str] = Form(None, min_length=1),
    images: Optional[List[UploadFile]] = File(None),
    current_user: User = CurrentUser,
):
    patch = NewsUpdate(title=title, body=body)
    return await service.update_news(db, slug, patch, current_user, file_store, images=images)

@router.delete("/{slug}", response_model=MessageResponse)
async def delete_news(slug: str, db: SessionDep, file_store: FileStoreDep, current_user: User = CurrentUser):
    await service.delete_news(db, slug, current_user, file_store)
    return {"success": True, "message": "News has been deleted!"}

@router.post("/{slug}/like", response_model=NewsOut)
async def like_news(slug: str, db: SessionDep, current_user: User = CurrentUser):
    return await service.like_news(db, slug, current_user)

@router.delete("/{slug}/like", response_model=NewsOut)
async def unlike_news(slug: str, db: SessionDep, current_user: User = CurrentUser):
    return await service.unlike_news(db, slug, current_user)
