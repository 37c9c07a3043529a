"""
Authentication endpoints: register, login and token verification.
"""

from fastapi import APIRouter, Depends, status

from tickettango.core.security import CurrentUser, get_current_user
from tickettango.db.session import get_db
from tickettango.infrastructure.query import QueryService
from tickettango.schemas.user import AuthResponse, TokenVerification, UserCreate, UserLogin
from tickettango.services.auth_service import authenticate_user, register_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: QueryService = Depends(get_db)):
    """Register a new user account and receive a token."""
    return await register_user(db, user_data)


@router.post("/login", response_model=AuthResponse)
async def login(login_data: UserLogin, db: QueryService = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    return await authenticate_user(db, login_data)


@router.get("/verify", response_model=TokenVerification)
async def verify(user: CurrentUser = Depends(get_current_user)):
    return TokenVerification(valid=True, user={"id": user.id, "username": user.username})
