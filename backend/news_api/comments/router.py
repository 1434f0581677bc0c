from fastapi import APIRouter, status
from typing import List

from ..auth.dependencies import CurrentUser
from ..database import SessionDep
from ..models import MessageResponse
from ..users.models import User
from . import service
from .schemas import CommentCreate, CommentOut, CommentUpdate

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("/", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def create_comment(body: CommentCreate, db: SessionDep, current_user: User = CurrentUser):
    return await service.create_comment(db, text=body.text, news_slug=body.news_slug, author=current_user)


@router.get("/", response_model=List[CommentOut])
async def list_comments(db: SessionDep):
    return await service.find_all_comments(db)


@router.get("/{comment_id}", response_model=CommentOut)
async def get_comment(comment_id: int, db: SessionDep, current_user: User = CurrentUser):
    return await service.find_one_comment(db, comment_id)


@router.put("/{comment_id}", response_model=CommentOut)
async def update_comment(comment_id: int, body: CommentUpdate, db: SessionDep, current_user: User = CurrentUser):
    return await service.update_comment(db, comment_id, body.text, current_user)


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(comment_id: int, db: SessionDep, current_user: User = CurrentUser):
    await service.delete_comment(db, comment_id, current_user)
    return {"success": True, "message": "Comment has been deleted!"}
