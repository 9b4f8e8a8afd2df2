"""Permission-checked route changes."""

import logging

from voicepos.core.permissions import HOME_ROUTE, resolve_route
from voicepos.schemas.auth import User

logger = logging.getLogger(__name__)


class Navigator:
    """Current route of one client; denied routes land on the home route."""

    def __init__(self, user: User, route: str = HOME_ROUTE):
        self.user = user
        self.route = resolve_route(user, route)

    def navigate(self, route: str) -> str:
        target = resolve_route(self.user, route)
        if target != self.route:
            logger.debug("Navigate %s -> %s", self.route, target)
        self.route = target
        return target
