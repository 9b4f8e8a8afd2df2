"""Unit tests for auth: security utils, permissions and the user directory."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from jose import JWTError

from voicepos.core.deps import get_current_user, http_error, require_permission
from voicepos.core.exceptions import (
    CheckoutFailedError,
    DocumentGenerationError,
    EmptyCartError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from voicepos.core.permissions import (
    ROLE_PERMISSIONS,
    default_permissions,
    resolve_route,
    route_feature,
)
from voicepos.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from voicepos.models.role import Feature, RoleType
from voicepos.schemas.auth import UserCreate, UserUpdate
from voicepos.services.users import UserDirectory


# ── Password hashing ──────────────────────────────

def test_hash_and_verify():
    plain = "SecurePass123!"
    hashed = hash_password(plain)
    assert hashed != plain
    assert verify_password(plain, hashed)
    assert not verify_password("wrong", hashed)


# ── JWT ────────────────────────────────────────────

def test_create_and_decode_token():
    admin = UserDirectory().get("user-1")
    payload = decode_access_token(create_access_token(admin))
    assert payload["sub"] == "user-1"
    assert payload["username"] == "admin"
    assert payload["role"] == "admin"
    assert set(payload["permissions"]) == {f.value for f in Feature}


def test_cashier_token_lists_granted_features_only():
    cashier = UserDirectory().get("user-2")
    payload = decode_access_token(create_access_token(cashier))
    assert payload["permissions"] == ["products", "orders", "customers"]


def test_expired_token():
    cashier = UserDirectory().get("user-2")
    token = create_access_token(cashier, expires_delta=timedelta(seconds=-1))
    with pytest.raises(JWTError):
        decode_access_token(token)


# ── Permission matrix sanity ──────────────────────

def test_role_matrix():
    assert set(ROLE_PERMISSIONS[RoleType.ADMIN]) == set(Feature)

    manager = default_permissions(RoleType.MANAGER)
    assert manager[Feature.REPORTS]
    assert not manager[Feature.SETTINGS]
    assert not manager[Feature.USERS]

    cashier = default_permissions(RoleType.CASHIER)
    assert [f for f, ok in cashier.items() if ok] == [Feature.PRODUCTS, Feature.ORDERS, Feature.CUSTOMERS]


def test_route_features():
    assert route_feature("/reports") == Feature.REPORTS
    assert route_feature("/products/product-1?tab=stock") == Feature.PRODUCTS
    assert route_feature("/pos-shop") == Feature.ORDERS
    assert route_feature("/") is None
    assert route_feature("/login") is None


def test_denied_route_resolves_home():
    users = UserDirectory()
    cashier = users.find_by_username("cashier")
    admin = users.find_by_username("admin")

    assert resolve_route(cashier, "/reports") == "/"
    assert resolve_route(cashier, "/users") == "/"
    assert resolve_route(cashier, "/pos-session") == "/pos-session"
    assert resolve_route(admin, "/reports") == "/reports"


# ── User directory ─────────────────────────────────

def test_default_users_and_authenticate():
    users = UserDirectory()
    assert [u.username for u in users.list_users()] == ["admin", "cashier"]
    assert users.authenticate("admin", "admin").id == "user-1"
    assert users.authenticate("admin", "nope") is None
    assert users.authenticate("ghost", "admin") is None


def test_create_rejects_duplicate_username():
    users = UserDirectory()
    with pytest.raises(ValidationError):
        users.create(UserCreate(username="cashier", name="Again", password="secret"))


def test_custom_permissions_override_role_defaults():
    users = UserDirectory()
    user = users.create(UserCreate(
        username="sam", name="Sam", password="secret", role=RoleType.CASHIER,
        permissions={Feature.PRODUCTS: True, Feature.REPORTS: True},
    ))
    assert user.can(Feature.REPORTS)
    assert not user.can(Feature.ORDERS)

    promoted = users.update(user.id, UserUpdate(role=RoleType.MANAGER))
    assert promoted.permissions == default_permissions(RoleType.MANAGER)


def test_admin_always_has_everything():
    users = UserDirectory()
    admin = users.create(UserCreate(
        username="root", name="Root", password="secret", role=RoleType.ADMIN,
        permissions={Feature.USERS: False},
    ))
    assert all(admin.permissions.values())


def test_last_admin_is_protected():
    users = UserDirectory()
    with pytest.raises(InvalidTransitionError):
        users.delete("user-1")
    with pytest.raises(InvalidTransitionError):
        users.update("user-1", UserUpdate(role=RoleType.CASHIER))

    users.create(UserCreate(username="second", name="Second", password="secret", role=RoleType.ADMIN))
    assert users.delete("user-1") is True
    assert users.delete("user-1") is False


def test_password_change():
    users = UserDirectory()
    users.update("user-2", UserUpdate(password="newpass"))
    assert users.authenticate("cashier", "cashier") is None
    assert users.authenticate("cashier", "newpass") is not None


# ── Dependencies ───────────────────────────────────

@pytest.mark.asyncio
async def test_get_current_user_from_token():
    users = UserDirectory()
    token = create_access_token(users.get("user-2"))

    user = await get_current_user(token=token, users=users)

    assert user.username == "cashier"
    assert user.is_active


@pytest.mark.asyncio
async def test_get_current_user_rejects_bad_tokens():
    users = UserDirectory()
    with pytest.raises(HTTPException) as exc:
        await get_current_user(token="garbage", users=users)
    assert exc.value.status_code == 401

    ghost = users.create(UserCreate(username="ghost", name="Ghost", password="secret"))
    orphan = create_access_token(ghost)
    users.delete(ghost.id)
    with pytest.raises(HTTPException):
        await get_current_user(token=orphan, users=users)


@pytest.mark.asyncio
async def test_require_permission_forbids_missing_feature():
    users = UserDirectory()
    token = create_access_token(users.get("user-2"))
    cashier = await get_current_user(token=token, users=users)

    checker = require_permission(Feature.REPORTS)
    with pytest.raises(HTTPException) as exc:
        await checker(user=cashier)
    assert exc.value.status_code == 403

    assert await require_permission(Feature.ORDERS)(user=cashier) is cashier


@pytest.mark.parametrize(
    "error,code",
    [
        (ValidationError("bad"), 400),
        (NotFoundError("missing"), 404),
        (DocumentGenerationError("pdf"), 502),
        (EmptyCartError(), 409),
        (CheckoutFailedError("declined"), 409),
    ],
)
def test_http_error_mapping(error, code):
    exc = http_error(error)
    assert exc.status_code == code
    assert exc.detail == error.message
