import asyncio
import typer
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

import news_api.db_models # noqa: F401

from news_api.database import async_session_factory
from news_api.users.models import User as UserModel, UserRole
from news_api.users import service as user_service

cli = typer.Typer()

async def create_admin_runner(username: str, email: str, password: str, db: AsyncSession) -> UserModel:
    """Create an activated admin account."""
    return await user_service.create_user(
        db,
        username=username,
        email=email,
        password=password,
        role=UserRole.ADMIN,
        is_activated=True,
    )


@cli.command(name="create-admin")
def create_admin(
    username: str = typer.Option(..., "--username", "-u", help="Admin's username."),
    email: str = typer.Option(..., "--email", "-e", help="Admin's email address."),
    password: str = typer.Option(..., "--password", "-p", help="Admin's secure password."),
):
    """
    Creates a new, already activated user with 'admin' privileges.
    """
    async def main():
        async with async_session_factory() as session:
            return await create_admin_runner(username=username, email=email, password=password, db=session)

    try:
        admin_user = asyncio.run(main())
    except HTTPException as e:
        print(f"❌ {e.detail}")
        raise typer.Exit(code=1)

    print("✅ Admin user created successfully!")
    print(f"   ID: {admin_user.id}")
    print(f"   Email: {admin_user.email}")


@cli.command()
def promote(
    email: str = typer.Option(..., "--email", "-e", help="Email of the user to promote."),
):
    """
    Grants the admin role to an existing user.
    """
    async def main():
        async with async_session_factory() as session:
            return await user_service.set_role(session, email, UserRole.ADMIN)

    try:
        user = asyncio.run(main())
    except HTTPException as e:
        print(f"❌ {e.detail}")
        raise typer.Exit(code=1)
    print(f"✅ {user.email} is now an admin")


if __name__ == "__main__":
    cli()
