from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from ..database import SessionDep

from ..users.models import User, UserRole
from ..auth import service as auth_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

async def get_current_user_from_access_token(
    db: SessionDep,
    token: str = Depends(oauth2_scheme),
) -> User:
    user = await auth_service.get_user_from_access_token(token=token, db=db)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

CurrentUser = Depends(get_current_user_from_access_token)

def require_admin(
    current_user: User = CurrentUser
) -> None:
    """
    Admin-only routes. Raises 403 for anyone else; returns nothing.
    """
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
