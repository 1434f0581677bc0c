from fastapi import HTTPException, status
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Dict
from enum import Enum
import logging

from ..users import service as user_service
from ..users.models import User
from ..mail import Mailer, activation_email, password_reset_email

from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from ..config import settings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "User with this credentials was not found!"


class TokenType(str, Enum):
    ACCESS = "access"
    ACTIVATION = "activation"
    PASSWORD_RESET = "password_reset"


def create_token(user: User, token_type: TokenType = TokenType.ACCESS) -> str:
    """
    Sign a token carrying the user's identity.
    The `type` claim keeps session, activation and reset tokens apart.
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "type": token_type.value,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def decode_token(token: str, token_type: TokenType) -> Optional[Dict]:
    """
    Verify signature and expiry and check the token kind.
    Returns None for anything that does not pass.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type.value or not isinstance(payload.get("id"), int):
        return None
    return payload


async def get_user_from_access_token(token: str, db: AsyncSession) -> Optional[User]:
    payload = decode_token(token, TokenType.ACCESS)
    if payload is None:
        return None
    return await user_service.get_user_by_id(payload["id"], db)


async def register(db: AsyncSession, mailer: Mailer, *, username: str, email: str, password: str) -> Dict:
    user = await user_service.create_user(db, username=username, email=email, password=password)

    token = create_token(user, TokenType.ACTIVATION)
    link = f"{settings.SERVER_HOST}/api/auth/activate/{token}"
    subject, html = activation_email(user.username, link)
    await mailer.send(user.email, subject, html)

    logger.info(f"Registered user {user.id} <{user.email}>, activation pending")
    return {
        "message": "We sent activation link on your email address! Please, confirm your email!",
        "user": user,
    }


async def activate(db: AsyncSession, token: str) -> Dict:
    payload = decode_token(token, TokenType.ACTIVATION)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Activation link is invalid or has expired!",
        )
    user = await user_service.get_user_by_id(payload["id"], db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f'User with activation link token "{token}" was not found!',
        )
    user.is_activated = True
    await db.commit()
    logger.info(f"Activated user {user.id}")
    return {"success": True, "message": f'Account with email "{user.email}" has been activated!'}


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check credentials and activation state.
    Unknown email and wrong password share one message.
    """
    user = await user_service.get_user_by_email(email, db)
    if not user or not await user_service.verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_activated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User with this credentials was not activated by email!",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def login(db: AsyncSession, *, email: str, password: str) -> Dict[str, str]:
    user = await authenticate_user(db, email, password)
    logger.info(f"User {user.id} logged in")
    return {"access_token": create_token(user, TokenType.ACCESS), "token_type": "bearer"}


async def forgot_password(db: AsyncSession, mailer: Mailer, *, email: str) -> Dict[str, str]:
    user = await user_service.get_user_by_email(email, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User with this email was not found!")

    token = create_token(user, TokenType.PASSWORD_RESET)
    link = f"{settings.CLIENT_HOST}/reset-password/{token}"
    subject, html = password_reset_email(user.username, link)
    await mailer.send(user.email, subject, html)
    return {"message": "We sent forgot password link on your email address! Please, check your email!"}


async def change_password(db: AsyncSession, identity_email: str, new_password: str) -> Dict:
    # Re-resolve so a stale identity cannot write
    user = await user_service.get_user_by_email(identity_email, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    hashed = await user_service.hash_password(new_password)
    result = await db.execute(
        update(User)
        .where(User.email == identity_email)
        .values(hashed_password=hashed)
        .execution_options(synchronize_session="fetch")
    )
    if not result.rowcount:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f'Password for user with email "{identity_email}" has not been updated!',
        )
    await db.commit()
    logger.info(f"Password changed for user {user.id}")
    return {"success": True, "message": "User password has been updated!"}


async def reset_password(db: AsyncSession, token: str, new_password: str) -> Dict:
    payload = decode_token(token, TokenType.PASSWORD_RESET)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Password reset link is invalid or has expired!",
        )
    return await change_password(db, payload["email"], new_password)
