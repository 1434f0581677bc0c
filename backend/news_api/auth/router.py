from fastapi import APIRouter, status

from ..database import SessionDep
from ..mail import MailerDep
from ..models import MessageResponse
from ..users.models import User
from . import service as auth_service
from .dependencies import CurrentUser
from .schema import (
    ChangePassword,
    ForgotPassword,
    LoginCredentials,
    MessageOnly,
    RegisterCredentials,
    RegisterResponse,
    TokenResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterCredentials, db: SessionDep, mailer: MailerDep):
    return await auth_service.register(
        db, mailer, username=body.username, email=body.email, password=body.password
    )

@router.get("/activate/{token}", response_model=MessageResponse)
async def activate(token: str, db: SessionDep):
    return await auth_service.activate(db, token)

@router.post("/login", response_model=TokenResponse)
async def login(body: LoginCredentials, db: SessionDep):
    return await auth_service.login(db, email=body.email, password=body.password)

@router.post("/forgot-password", response_model=MessageOnly)
async def forgot_password(body: ForgotPassword, db: SessionDep, mailer: MailerDep):
    return await auth_service.forgot_password(db, mailer, email=body.email)

@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(token: str, body: ChangePassword, db: SessionDep):
    """Set a new password using the link sent by /forgot-password."""
    return await auth_service.reset_password(db, token, body.password)

@router.patch("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePassword,
    db: SessionDep,
    current_user: User = CurrentUser,
):
    return await auth_service.change_password(db, current_user.email, body.password)
