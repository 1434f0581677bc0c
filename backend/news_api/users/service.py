from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, insert, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool
from typing import List, Optional
import logging

from passlib.context import CryptContext

from .models import User as UserModel, UserRole, Gender, user_followers
from .schema import UserSearch, UserProfileUpdate
from ..storage import FileStore

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "country", "city", "gender")


async def hash_password(password: str) -> str:
    return await run_in_threadpool(pwd_context.hash, password)

async def verify_password(plain_password: str, hashed_password: str) -> bool:
    return await run_in_threadpool(pwd_context.verify, plain_password, hashed_password)


async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()

async def get_user_by_email(email: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.email == email))
    return result.scalar_one_or_none()

async def _load_user(db: AsyncSession, user_id: int, *relations) -> Optional[UserModel]:
    """Fetch a user with the given relationships eagerly (re)loaded."""
    stmt = (
        select(UserModel)
        .where(UserModel.id == user_id)
        .options(*(selectinload(rel) for rel in relations))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    *,
    username: str,
    email: str,
    password: str,
    role: UserRole = UserRole.MEMBER,
    is_activated: bool = False,
) -> UserModel:
    if await get_user_by_email(email, db):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists!")

    db_user = UserModel(
        username=username,
        email=email,
        hashed_password=await hash_password(password),
        role=role,
        is_activated=is_activated,
    )
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists!")
    await db.refresh(db_user)
    return db_user


async def find_all_users(db: AsyncSession) -> List[UserModel]:
    result = await db.execute(select(UserModel).order_by(UserModel.id))
    return result.scalars().all()


async def search_users(db: AsyncSession, query: UserSearch) -> List[UserModel]:
    if not query.username and not query.email:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Search fields should not be empty!")

    conditions = []
    if query.username:
        conditions.append(UserModel.username.ilike(f"%{query.username}%"))
    if query.email:
        conditions.append(UserModel.email.ilike(f"%{query.email}%"))
    result = await db.execute(select(UserModel).where(or_(*conditions)).order_by(UserModel.id))
    return result.scalars().all()


async def find_one_user(db: AsyncSession, user_id: int) -> UserModel:
    user = await _load_user(
        db, user_id, UserModel.news, UserModel.comments, UserModel.followers, UserModel.following
    )
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'User with id "{user_id}" was not found!')
    return user


async def get_user_profile(db: AsyncSession, user: UserModel) -> UserModel:
    profile = await _load_user(db, user.id, UserModel.news, UserModel.comments)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'User with id "{user.id}" was not found!')
    return profile


async def update_user_profile(
    db: AsyncSession,
    user: UserModel,
    patch: UserProfileUpdate,
    file_store: FileStore,
    avatar: Optional[UploadFile] = None,
) -> UserModel:
    db_user = await get_user_by_id(user.id, db)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'User with id "{user.id}" has not been updated!')

    if patch.gender is not None and patch.gender not in {g.value for g in Gender}:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Gender should be only Male, Female and Unselected!",
        )

    old_avatar = new_avatar = None
    if avatar is not None:
        old_avatar = db_user.avatar
        new_avatar = await file_store.store(avatar)
        db_user.avatar = new_avatar

    for field in PROFILE_FIELDS:
        value = getattr(patch, field)
        if value is None:
            continue
        setattr(db_user, field, Gender(value) if field == "gender" else value)

    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(f"Profile update failed for user {user.id}")
        await file_store.remove(new_avatar)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Something went wrong!")

    if old_avatar:
        await file_store.remove(old_avatar)
    return await find_one_user(db, user.id)


async def delete_user(db: AsyncSession, user_id: int) -> None:
    result = await db.execute(
        delete(UserModel).where(UserModel.id == user_id).execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User with id {user_id} was not deleted!")
    await db.commit()
    logger.info(f"User {user_id} deleted")


async def _is_following(db: AsyncSession, follower_id: int, following_id: int) -> bool:
    result = await db.execute(
        select(user_followers.c.follower_id).where(
            user_followers.c.follower_id == follower_id,
            user_followers.c.following_id == following_id,
        )
    )
    return result.first() is not None


async def follow_user(db: AsyncSession, user: UserModel, target_id: int) -> UserModel:
    target = await get_user_by_id(target_id, db)
    if not target:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with this id {target_id} was not found! Follow failed!",
        )
    if target.id == user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A user cannot subscribe to themselves!")

    if not await _is_following(db, user.id, target.id):
        await db.execute(insert(user_followers).values(follower_id=user.id, following_id=target.id))
        await db.commit()
        logger.info(f"User {user.id} follows user {target.id}")
    return await find_one_user(db, target.id)


async def unfollow_user(db: AsyncSession, user: UserModel, target_id: int) -> UserModel:
    target = await get_user_by_id(target_id, db)
    if not target:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with this id {target_id} was not found! Unfollow failed!",
        )

    await db.execute(
        delete(user_followers).where(
            user_followers.c.follower_id == user.id,
            user_followers.c.following_id == target.id,
        )
    )
    await db.commit()
    logger.info(f"User {user.id} unfollowed user {target.id}")
    return await find_one_user(db, target.id)


async def set_role(db: AsyncSession, email: str, role: UserRole) -> UserModel:
    user = await get_user_by_email(email, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User with this email was not found!")
    user.role = role
    await db.commit()
    await db.refresh(user)
    return user
