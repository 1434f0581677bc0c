from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import List, Optional

from ..database import SessionDep
from ..models import MessageResponse
from ..storage import FileStoreDep
from ..users.models import User as UserModel

from .schema import UserPublic, UserProfile, UserDetail, UserSearch, UserProfileUpdate
from . import service as user_service
from ..auth.dependencies import CurrentUser, require_admin

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/", response_model=List[UserPublic])
async def list_users(db: SessionDep):
    return await user_service.find_all_users(db)

@router.get("/search", response_model=List[UserPublic])
async def search_users(db: SessionDep, username: Optional[str] = None, email: Optional[str] = None):
    return await user_service.search_users(db, UserSearch(username=username, email=email))

@router.get("/my-profile", response_model=UserProfile)
async def read_my_profile(db: SessionDep, current_user: UserModel = CurrentUser):
    return await user_service.get_user_profile(db, current_user)

@router.put("/my-profile", response_model=UserDetail)
async def update_my_profile(
    db: SessionDep,
    file_store: FileStoreDep,
    current_user: UserModel = CurrentUser,
    first_name: Optional[str] = Form(None, max_length=50),
    last_name: Optional[str] = Form(None, max_length=50),
    phone_number: Optional[str] = Form(None, max_length=30),
    country: Optional[str] = Form(None, max_length=100),
    city: Optional[str] = Form(None, max_length=100),
    gender: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
):
    patch = UserProfileUpdate(
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
        country=country,
        city=city,
        gender=gender,
    )
    return await user_service.update_user_profile(db, current_user, patch, file_store, avatar=avatar)

@router.get("/{user_id}", response_model=UserDetail)
async def get_user(user_id: int, db: SessionDep):
    return await user_service.find_one_user(db, user_id)

@router.post("/{user_id}/follow", response_model=UserDetail)
async def follow_user(user_id: int, db: SessionDep, current_user: UserModel = CurrentUser):
    return await user_service.follow_user(db, current_user, user_id)

@router.delete("/{user_id}/follow", response_model=UserDetail)
async def unfollow_user(user_id: int, db: SessionDep, current_user: UserModel = CurrentUser):
    return await user_service.unfollow_user(db, current_user, user_id)

@router.delete("/{user_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_user(user_id: int, db: SessionDep):
    """(Admin only) Delete a user together with their news and comments."""
    await user_service.delete_user(db, user_id)
    return {"success": True, "message": "User has been deleted!"}
