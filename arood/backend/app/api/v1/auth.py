# backend/app/api/v1/auth.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime

from app.api.dependencies import get_current_user
from app.core.config import settings
from app.core.constants import UserRole, FREE_PLAN_NAME, FREE_PLAN_OFFER_LIMIT
from app.core.exceptions import ValidationFailed
from app.core.logging import logger
from app.core.security import verify_password, get_password_hash, create_session_token
from app.db.database import get_db
from app.db.models.user import User as UserModel
from app.db.repositories.user_repository import UserRepository
from app.schemas.auth import LoginRequest, RegisterRequest, SessionResponse
from app.schemas.user import User

router = APIRouter()


def start_session(response: Response, user: UserModel) -> SessionResponse:
    token = create_session_token({"sub": str(user.id), "role": user.role})
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return SessionResponse(user=User.model_validate(user), access_token=token)


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Register a business account and start a session"""
    user_repo = UserRepository(db)

    if await user_repo.exists(payload.username, payload.email):
        raise ValidationFailed(
            "اسم المستخدم أو البريد الإلكتروني مسجل مسبقاً",
            "Username or email already registered",
            field="username",
        )

    user = await user_repo.create({
        "username": payload.username,
        "email": payload.email,
        "hashed_password": get_password_hash(payload.password),
        "business_name": payload.business_name,
        "business_city": payload.business_city,
        "business_phone": payload.business_phone,
        "role": UserRole.BUSINESS.value,
        "subscription_plan": FREE_PLAN_NAME,
        "offer_limit": FREE_PLAN_OFFER_LIMIT,
        "is_active": True,
    })
    await db.commit()

    logger.info(f"Registered merchant {user.username}", extra={"user_id": user.id})
    await request.app.state.email_service.send_welcome_email(user.email, user.business_name or user.username)

    return start_session(response, user)


@router.post("/login", response_model=SessionResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Login with username or email"""
    user_repo = UserRepository(db)
    user = await user_repo.get_by_login(payload.username)

    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    user = await user_repo.update(user, {"last_login": datetime.utcnow()})
    await db.commit()

    return start_session(response, user)


@router.post("/logout")
async def logout(response: Response):
    """End the session"""
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Successfully logged out"}


@router.get("/me", response_model=User)
async def me(current_user: UserModel = Depends(get_current_user)):
    """Current user"""
    return current_user
