"""Auth and user administration schemas."""

from pydantic import BaseModel, Field

from voicepos.models.role import Feature, RoleType


# ── Login ──────────────────────────────────────────
class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: RoleType


# ── Users ──────────────────────────────────────────
class User(BaseModel):
    id: str
    username: str
    name: str
    role: RoleType
    permissions: dict[Feature, bool]

    def can(self, feature: Feature | str) -> bool:
        return bool(self.permissions.get(Feature(feature), False))


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=4)
    role: RoleType = RoleType.CASHIER
    # Omitted → role defaults
    permissions: dict[Feature, bool] | None = None


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    password: str | None = Field(None, min_length=4)
    role: RoleType | None = None
    permissions: dict[Feature, bool] | None = None


# ── Current User ───────────────────────────────────
class CurrentUser(User):
    is_active: bool = True
