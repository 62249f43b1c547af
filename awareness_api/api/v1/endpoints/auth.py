from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from awareness_api.db.session import get_db
from awareness_api.models.user import User
from awareness_api.schemas.user import UserLogin, Token, UserResponse
from awareness_api.services.auth_service import auth_service
from awareness_api.api.dependencies import get_current_user


router = APIRouter(prefix="/auth", tags=["Authentication"])


# Authenticate user and return JWT token
@router.post("/login", response_model=Token)
async def login(
    user_credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
) -> Token:
    """
    Authenticate user and return JWT token.
    """
    user = await auth_service.authenticate_user(
        db, user_credentials.email, user_credentials.password
    )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(
        access_token=auth_service.create_user_token(user),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the signed-in user."""
    return UserResponse.model_validate(current_user)
