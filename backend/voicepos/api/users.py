"""User administration (admin feature ``users``)."""

from fastapi import APIRouter, Depends, HTTPException, status

from voicepos.core.deps import get_users, http_error, require_permission
from voicepos.core.exceptions import POSError
from voicepos.models.role import Feature
from voicepos.schemas.auth import CurrentUser, User, UserCreate, UserUpdate
from voicepos.services.users import UserDirectory

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[User])
async def list_users(
    current_user: CurrentUser = Depends(require_permission(Feature.USERS)),
    users: UserDirectory = Depends(get_users),
):
    return users.list_users()


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    current_user: CurrentUser = Depends(require_permission(Feature.USERS)),
    users: UserDirectory = Depends(get_users),
):
    try:
        return users.create(body)
    except POSError as exc:
        raise http_error(exc)


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    body: UserUpdate,
    current_user: CurrentUser = Depends(require_permission(Feature.USERS)),
    users: UserDirectory = Depends(get_users),
):
    try:
        user = users.update(user_id, body)
    except POSError as exc:
        raise http_error(exc)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_permission(Feature.USERS)),
    users: UserDirectory = Depends(get_users),
):
    try:
        deleted = users.delete(user_id)
    except POSError as exc:
        raise http_error(exc)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
