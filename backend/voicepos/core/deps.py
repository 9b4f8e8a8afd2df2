"""Dependency injection: auth, feature permissions and app services."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from voicepos.core.config import Settings
from voicepos.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    POSError,
    ValidationError,
)
from voicepos.core.permissions import can_access
from voicepos.core.security import decode_access_token
from voicepos.models.role import Feature
from voicepos.pos.cart import TaxTable
from voicepos.pos.session import PosSession, SessionRegistry
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.common import PaymentMethod
from voicepos.services.documents import DocumentSink
from voicepos.services.users import UserDirectory
from voicepos.store.base import CatalogStore
from voicepos.voice.context import VoiceContext

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# ── App services ───────────────────────────────────
def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_users(request: Request) -> UserDirectory:
    return request.app.state.users


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_documents(request: Request) -> DocumentSink:
    return request.app.state.documents


def get_tax_table(request: Request) -> TaxTable:
    return request.app.state.tax_table


def get_payment_methods(request: Request) -> list[PaymentMethod]:
    return request.app.state.payment_methods


def get_config(request: Request) -> Settings:
    return request.app.state.config


def get_voice_contexts(request: Request) -> dict[str, VoiceContext]:
    return request.app.state.voice_contexts


# ── Auth ───────────────────────────────────────────
async def get_current_user(
    token: str = Depends(oauth2_scheme),
    users: UserDirectory = Depends(get_users),
) -> CurrentUser:
    """Decode JWT and load the user. Raises 401 on invalid/expired token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception
    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception
    # Permissions come from the directory so admin edits apply immediately
    user = users.get(user_id)
    if user is None:
        raise credentials_exception
    return CurrentUser(**user.model_dump(), is_active=True)


def require_permission(*required: Feature):
    """Dependency factory: checks the user has ALL required features."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        missing = [f.value for f in required if not can_access(user, f)]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing)}",
            )
        return user

    return checker


# ── POS sessions ───────────────────────────────────
def get_pos_session(
    session_id: str,
    sessions: SessionRegistry = Depends(get_sessions),
) -> PosSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="POS session not found")
    return session


# ── Error mapping ──────────────────────────────────
def http_error(exc: POSError) -> HTTPException:
    """Translate a domain error into the HTTP response routers raise."""
    if isinstance(exc, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ExternalServiceError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        # State errors and rolled-back checkouts
        code = status.HTTP_409_CONFLICT
    return HTTPException(status_code=code, detail=exc.message)
