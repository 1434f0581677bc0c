import logging
from typing import List, Optional, Sequence

from fastapi import HTTPException, UploadFile, status
from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..auth.permissions import ownership_clause
from ..comments.models import Comment
from ..storage import FileStore
from ..users.models import User
from .models import Image, News, generate_slug, news_likes
from .schemas import NewsSearch, NewsUpdate

logger = logging.getLogger(__name__)


def _hydrated():
    return (
        selectinload(News.author),
        selectinload(News.images),
        selectinload(News.comments).selectinload(Comment.author),
        selectinload(News.liked_by_users),
    )


async def get_news_by_slug(db: AsyncSession, slug: str) -> News:
    """Resolve an article with its relations. Does not touch the view counter."""
    stmt = (
        select(News)
        .where(News.slug == slug)
        .options(*_hydrated())
        .execution_options(populate_existing=True)
    )
    news = (await db.execute(stmt)).scalar_one_or_none()
    if not news:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'News with slug "{slug}" was not found!')
    return news


async def _store_images(db: AsyncSession, file_store: FileStore, news_id: int, images: Sequence[UploadFile]) -> List[str]:
    stored = []
    for upload in images:
        url = await file_store.store(upload)
        db.add(Image(url=url, news_id=news_id))
        stored.append(url)
    return stored


async def create_news(
    db: AsyncSession,
    *,
    title: str,
    body: str,
    author: User,
    file_store: FileStore,
    images: Optional[Sequence[UploadFile]] = None,
) -> News:
    news = News(title=title, body=body, slug=generate_slug(title), author_id=author.id)
    db.add(news)
    await db.flush()

    if images:
        await _store_images(db, file_store, news.id, images)
    await db.commit()

    logger.info(f"User {author.id} created news {news.slug} with {len(images or [])} image(s)")
    return await get_news_by_slug(db, news.slug)


async def find_all_news(db: AsyncSession) -> List[News]:
    stmt = (
        select(News)
        .options(*_hydrated())
        .order_by(News.created_at.desc(), News.id.desc())
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def find_one_news(db: AsyncSession, slug: str) -> News:
    """The reader-facing lookup: every successful call counts one view."""
    news = await get_news_by_slug(db, slug)
    await db.execute(
        update(News)
        .where(News.id == news.id)
        .values(views=News.views + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return await get_news_by_slug(db, slug)


async def search_news(db: AsyncSession, query: NewsSearch) -> dict:
    conditions = []
    if query.title:
        conditions.append(News.title.ilike(f"%{query.title}%"))
    if query.body:
        conditions.append(News.body.ilike(f"%{query.body}%"))

    stmt = select(News)
    if conditions:
        stmt = stmt.where(or_(*conditions))

    total_count = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    if query.views == "ASC":
        stmt = stmt.order_by(News.views.asc(), News.id.asc())
    elif query.views == "DESC":
        stmt = stmt.order_by(News.views.desc(), News.id.desc())
    else:
        stmt = stmt.order_by(News.created_at.desc(), News.id.desc())

    result = await db.execute(
        stmt.offset(query.skip).limit(query.take).execution_options(populate_existing=True)
    )
    return {"items": result.scalars().all(), "total_count": total_count}


async def following_users_news(db: AsyncSession, user: User) -> List[News]:
    stmt = (
        select(User)
        .where(User.id == user.id)
        .options(selectinload(User.following).selectinload(User.news))
        .execution_options(populate_existing=True)
    )
    found = (await db.execute(stmt)).scalar_one_or_none()
    if not found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User with id {user.id} was not found!")

    feed = [news for followed in found.following for news in followed.news]
    return sorted(feed, key=lambda n: (n.created_at, n.id), reverse=True)


async def update_news(
    db: AsyncSession,
    slug: str,
    patch: NewsUpdate,
    actor: User,
    file_store: FileStore,
    images: Optional[Sequence[UploadFile]] = None,
) -> News:
    news = await get_news_by_slug(db, slug)

    values = patch.model_dump(exclude_none=True)
    result = await db.execute(
        update(News)
        .where(*ownership_clause(News, news.id, actor))
        .values(updated_at=func.now(), **values)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'News with slug "{slug}" was not updated! Access denied!',
        )

    old_urls: List[str] = []
    if images:
        old_urls = list((await db.execute(select(Image.url).where(Image.news_id == news.id))).scalars().all())
        await db.execute(
            delete(Image).where(Image.news_id == news.id).execution_options(synchronize_session=False)
        )
        await _store_images(db, file_store, news.id, images)
    await db.commit()

    for url in old_urls:
        await file_store.remove(url)
    return await get_news_by_slug(db, slug)


async def delete_news(db: AsyncSession, slug: str, actor: User, file_store: FileStore) -> None:
    news = await get_news_by_slug(db, slug)
    image_urls = [image.url for image in news.images]

    result = await db.execute(
        delete(News)
        .where(*ownership_clause(News, news.id, actor))
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'News with slug "{slug}" was not deleted! Access denied!',
        )
    await db.commit()
    # Not transactional with the row delete
    for url in image_urls:
        await file_store.remove(url)
    logger.info(f"User {actor.id} deleted news {slug}")


async def like_news(db: AsyncSession, slug: str, user: User) -> News:
    news = await get_news_by_slug(db, slug)
    already = await db.execute(
        select(news_likes.c.user_id).where(news_likes.c.user_id == user.id, news_likes.c.news_id == news.id)
    )
    if already.first() is None:
        await db.execute(insert(news_likes).values(user_id=user.id, news_id=news.id))
        await db.commit()
    return await get_news_by_slug(db, slug)


async def unlike_news(db: AsyncSession, slug: str, user: User) -> News:
    news = await get_news_by_slug(db, slug)
    await db.execute(
        delete(news_likes).where(news_likes.c.user_id == user.id, news_likes.c.news_id == news.id)
    )
    await db.commit()
    return await get_news_by_slug(db, slug)
