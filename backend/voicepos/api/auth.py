"""Authentication endpoints: login + current user."""

from fastapi import APIRouter, Depends, HTTPException, status

from voicepos.core.deps import get_current_user, get_users
from voicepos.core.security import create_access_token
from voicepos.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from voicepos.services.users import UserDirectory

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, users: UserDirectory = Depends(get_users)):
    """Authenticate via username + password, return JWT."""
    user = users.authenticate(body.username, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    token = create_access_token(user)
    return TokenResponse(access_token=token, user_id=user.id, role=user.role)


@router.get("/me", response_model=CurrentUser)
async def me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user
