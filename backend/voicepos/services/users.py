"""User directory: accounts, login and admin CRUD."""

import logging
from dataclasses import dataclass

from voicepos.core.exceptions import InvalidTransitionError, ValidationError
from voicepos.core.permissions import default_permissions
from voicepos.core.security import hash_password, verify_password
from voicepos.models.role import Feature, RoleType
from voicepos.schemas.auth import User, UserCreate, UserUpdate
from voicepos.store.base import new_id

logger = logging.getLogger(__name__)

DEFAULT_USERS: list[UserCreate] = [
    UserCreate(username="admin", name="Admin User", password="admin", role=RoleType.ADMIN),
    UserCreate(username="cashier", name="Cashier User", password="cashier", role=RoleType.CASHIER),
]


@dataclass
class _Account:
    user: User
    password_hash: str


def _normalize_permissions(role: RoleType, permissions: dict[Feature, bool] | None) -> dict[Feature, bool]:
    if role == RoleType.ADMIN or permissions is None:
        return default_permissions(role)
    # Features left out are denied
    return {feature: bool(permissions.get(feature, False)) for feature in Feature}


class UserDirectory:
    def __init__(self, seed_defaults: bool = True):
        self._accounts: dict[str, _Account] = {}
        if seed_defaults:
            for index, data in enumerate(DEFAULT_USERS, start=1):
                self.create(data, user_id=f"user-{index}")

    def list_users(self) -> list[User]:
        return [a.user.model_copy(deep=True) for a in self._accounts.values()]

    def get(self, user_id: str) -> User | None:
        account = self._accounts.get(user_id)
        return account.user.model_copy(deep=True) if account else None

    def find_by_username(self, username: str) -> User | None:
        for account in self._accounts.values():
            if account.user.username == username:
                return account.user.model_copy(deep=True)
        return None

    def authenticate(self, username: str, password: str) -> User | None:
        for account in self._accounts.values():
            if account.user.username == username:
                if verify_password(password, account.password_hash):
                    return account.user.model_copy(deep=True)
                break
        logger.info("Failed login for %s", username)
        return None

    def create(self, data: UserCreate, user_id: str | None = None) -> User:
        if self.find_by_username(data.username) is not None:
            raise ValidationError(f"Username '{data.username}' is already taken")
        user = User(
            id=user_id or new_id("user"),
            username=data.username,
            name=data.name,
            role=data.role,
            permissions=_normalize_permissions(data.role, data.permissions),
        )
        self._accounts[user.id] = _Account(user, hash_password(data.password))
        logger.info("User %s created (%s)", user.username, user.role.value)
        return user.model_copy(deep=True)

    def update(self, user_id: str, changes: UserUpdate) -> User | None:
        account = self._accounts.get(user_id)
        if account is None:
            return None
        data = changes.model_dump(exclude_unset=True)
        role = data.get("role") or account.user.role
        if (
            account.user.role == RoleType.ADMIN
            and role != RoleType.ADMIN
            and self._admin_count() == 1
        ):
            raise InvalidTransitionError("Cannot remove the last admin")

        permissions = data.get("permissions")
        if permissions is None and "role" in data:
            permissions = default_permissions(role)
        user = account.user.model_copy(update={
            "name": data.get("name") or account.user.name,
            "role": role,
            "permissions": _normalize_permissions(role, permissions or account.user.permissions),
        })
        account.user = user
        if data.get("password"):
            account.password_hash = hash_password(data["password"])
        return user.model_copy(deep=True)

    def delete(self, user_id: str) -> bool:
        account = self._accounts.get(user_id)
        if account is None:
            return False
        if account.user.role == RoleType.ADMIN and self._admin_count() == 1:
            raise InvalidTransitionError("Cannot delete the last admin")
        del self._accounts[user_id]
        logger.info("User %s deleted", account.user.username)
        return True

    def _admin_count(self) -> int:
        return sum(1 for a in self._accounts.values() if a.user.role == RoleType.ADMIN)
