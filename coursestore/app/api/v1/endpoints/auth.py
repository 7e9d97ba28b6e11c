"""
Authentication API endpoints.

Provides register, login, logout and user info endpoints. Tokens carry the
``user_id`` claim that the checkout endpoints resolve the caller from.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from coursestore.app.db.session import get_db
from coursestore.app.core.config import settings
from coursestore.app.models.user import User, UserRole
from coursestore.app.schemas.auth import UserRegister, UserLogin, TokenResponse, UserResponse
from coursestore.app.schemas.envelope import ApiResult
from coursestore.app.core.security import get_password_hash, verify_password
from coursestore.app.core.jwt import create_user_token
from coursestore.app.core.dependencies import get_current_user
from coursestore.app.core.token_revocation import revoke_token
from coursestore.app.core.exceptions import (
    AuthenticationError,
    DuplicateEntryError,
    ResourceNotFoundError,
)
from coursestore.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_token(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_user_token(user.id, user.username, user.role.value),
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role
    )


@router.post("/register", response_model=ApiResult[TokenResponse], status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new student account and return a token for it.
    """
    result = await db.execute(
        select(User).where(
            or_(User.username == user_data.username, User.email == user_data.email)
        )
    )
    existing_user = result.scalars().first()

    if existing_user:
        if existing_user.username == user_data.username:
            raise DuplicateEntryError("Username already registered", status_code=status.HTTP_400_BAD_REQUEST)
        raise DuplicateEntryError("Email already registered", status_code=status.HTTP_400_BAD_REQUEST)

    new_user = User(
        email=user_data.email,
        username=user_data.username,
        hashed_password=get_password_hash(user_data.password),
        role=UserRole.STUDENT,
        is_active=True
    )
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)
    token = _issue_token(new_user)

    await log_event(
        db=db,
        action=AuditAction.USER_CREATED,
        actor_id=new_user.id,
        actor_username=new_user.username,
        entity_type="user",
        entity_id=new_user.id
    )

    return ApiResult.success_result(
        token,
        message="Registration successful",
        status_code=status.HTTP_201_CREATED
    )


@router.post("/login", response_model=ApiResult[TokenResponse])
async def login(
    credentials: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Login with username or email and return a JWT token.

    Successful and failed attempts are written to the audit log.
    """
    ip_address = request.client.host if request.client else None
    result = await db.execute(
        select(User).where(
            or_(User.username == credentials.username, User.email == credentials.username)
        )
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_id=user.id if user else None,
            actor_username=credentials.username,
            metadata={"reason": "Invalid password" if user else "User not found"},
            ip_address=ip_address
        )
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_id=user.id,
            actor_username=user.username,
            metadata={"reason": "Account is inactive"},
            ip_address=ip_address
        )
        raise AuthenticationError("Inactive user account")

    token = _issue_token(user)

    await log_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        actor_id=user.id,
        actor_username=user.username,
        ip_address=ip_address
    )

    return ApiResult.success_result(token, message="Login successful")


@router.get("/me", response_model=ApiResult[UserResponse])
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Current authenticated user information."""
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one_or_none()

    if not user:
        raise ResourceNotFoundError("User", current_user["user_id"])

    return ApiResult.success_result(UserResponse.model_validate(user), message="User retrieved")


@router.post("/logout", response_model=ApiResult[None])
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the bearer token used for this request.
    """
    await revoke_token(current_user["token"], current_user["user_id"])

    await log_event(
        db=db,
        action=AuditAction.LOGOUT,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub")
    )

    return ApiResult.success_result(message="Logged out")
