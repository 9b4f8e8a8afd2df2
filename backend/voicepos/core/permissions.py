"""Feature permissions per role and route guarding.

Role defaults:
┌───────────┬───────┬─────────┬─────────┐
│ Feature   │ Admin │ Manager │ Cashier │
├───────────┼───────┼─────────┼─────────┤
│ products  │  ✓    │   ✓     │   ✓     │
│ orders    │  ✓    │   ✓     │   ✓     │
│ customers │  ✓    │   ✓     │   ✓     │
│ reports   │  ✓    │   ✓     │         │
│ settings  │  ✓    │         │         │
│ users     │  ✓    │         │         │
└───────────┴───────┴─────────┴─────────┘
Individual users may be granted or denied features on top of these.
"""

import logging

from voicepos.models.role import Feature, RoleType
from voicepos.schemas.auth import User

logger = logging.getLogger(__name__)

HOME_ROUTE = "/"

ROLE_PERMISSIONS: dict[RoleType, list[Feature]] = {
    RoleType.ADMIN: list(Feature),  # All features
    RoleType.MANAGER: [
        Feature.PRODUCTS,
        Feature.ORDERS,
        Feature.CUSTOMERS,
        Feature.REPORTS,
    ],
    RoleType.CASHIER: [
        Feature.PRODUCTS,
        Feature.ORDERS,
        Feature.CUSTOMERS,
    ],
}

ROUTE_FEATURES: dict[str, Feature] = {
    "/products": Feature.PRODUCTS,
    "/orders": Feature.ORDERS,
    "/customers": Feature.CUSTOMERS,
    "/reports": Feature.REPORTS,
    "/settings": Feature.SETTINGS,
    "/users": Feature.USERS,
    "/pos-session": Feature.ORDERS,
    "/pos-shop": Feature.ORDERS,
}


def default_permissions(role: RoleType) -> dict[Feature, bool]:
    granted = ROLE_PERMISSIONS[RoleType(role)]
    return {feature: feature in granted for feature in Feature}


def can_access(user: User, feature: Feature | str) -> bool:
    return user.can(feature)


def route_feature(route: str) -> Feature | None:
    path = route.split("?", 1)[0].rstrip("/") or HOME_ROUTE
    for prefix, feature in ROUTE_FEATURES.items():
        if path == prefix or path.startswith(prefix + "/"):
            return feature
    return None


def resolve_route(user: User, route: str) -> str:
    """Return ``route`` if the user may open it, otherwise the home route."""
    feature = route_feature(route)
    if feature is None or can_access(user, feature):
        return route
    logger.info("User %s lacks %s; redirecting %s to %s", user.username, feature.value, route, HOME_ROUTE)
    return HOME_ROUTE
