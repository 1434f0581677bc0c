import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..auth.permissions import ownership_clause
from ..news.models import News
from ..users.models import User
from .models import Comment

logger = logging.getLogger(__name__)


async def create_comment(db: AsyncSession, *, text: str, news_slug: str, author: User) -> Comment:
    news = (await db.execute(select(News).where(News.slug == news_slug))).scalar_one_or_none()
    if not news:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'News with slug "{news_slug}" was not found!')

    comment = Comment(text=text, news_id=news.id, author_id=author.id)
    db.add(comment)
    await db.commit()
    return await find_one_comment(db, comment.id)


async def find_all_comments(db: AsyncSession) -> List[Comment]:
    result = await db.execute(
        select(Comment).options(selectinload(Comment.author)).order_by(Comment.id)
    )
    return result.scalars().all()


async def find_one_comment(db: AsyncSession, comment_id: int) -> Comment:
    result = await db.execute(
        select(Comment)
        .where(Comment.id == comment_id)
        .options(selectinload(Comment.author))
        .execution_options(populate_existing=True)
    )
    comment = result.scalar_one_or_none()
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'Comment with id "{comment_id}" was not found!')
    return comment


async def update_comment(db: AsyncSession, comment_id: int, text: str, actor: User) -> Comment:
    result = await db.execute(
        update(Comment)
        .where(*ownership_clause(Comment, comment_id, actor))
        .values(text=text, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'Comment with id "{comment_id}" was not updated! Access Denied!',
        )
    await db.commit()
    return await find_one_comment(db, comment_id)


async def delete_comment(db: AsyncSession, comment_id: int, actor: User) -> None:
    result = await db.execute(
        delete(Comment)
        .where(*ownership_clause(Comment, comment_id, actor))
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'Comment with id "{comment_id}" was not deleted! Access Denied!',
        )
    await db.commit()
    logger.info(f"User {actor.id} deleted comment {comment_id}")
