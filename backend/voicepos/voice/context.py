"""Per-user voice context: route, command sets and pending client events."""

from __future__ import annotations

import logging
from typing import Any, Callable

from voicepos.pos.session import PosSession
from voicepos.schemas.auth import User
from voicepos.store.base import CatalogStore
from voicepos.voice.commands import PageHandlers, global_commands, is_pos_page, page_commands
from voicepos.voice.dispatcher import VoiceCommandDispatcher
from voicepos.voice.listener import SpeechPlatform, VoiceListener
from voicepos.voice.matcher import CommandMatch
from voicepos.voice.navigation import Navigator

logger = logging.getLogger(__name__)


class VoiceContext:
    def __init__(
        self,
        user: User,
        store: CatalogStore,
        threshold: float = 0.7,
        session: PosSession | None = None,
        restart_delay: float = 0.3,
    ):
        self.user = user
        self.store = store
        self.session = session
        self.navigator = Navigator(user)
        self.dispatcher = VoiceCommandDispatcher(threshold)
        self.dispatcher.set_global_commands(global_commands(self.go_to, self.logout))
        self.restart_delay = restart_delay
        self.logged_out = False
        self._events: list[dict[str, Any]] = []

    @property
    def route(self) -> str:
        return self.navigator.route

    def set_user(self, user: User) -> None:
        """Pick up permission changes made since the context was created."""
        self.user = user
        self.navigator.user = user

    def notify(self, message: str) -> None:
        self._events.append({"type": "notify", "message": message})

    def open_dialog(self, dialog: str) -> None:
        self._events.append({"type": "open-dialog", "dialog": dialog})

    def logout(self) -> None:
        self.logged_out = True
        self.dispatcher.clear_page_commands()
        self._events.append({"type": "logout"})

    def drain_events(self) -> list[dict[str, Any]]:
        events, self._events = self._events, []
        return events

    async def load_page(self, route: str) -> None:
        """Swap in the command set of ``route``."""
        if self.session is not None and self.session.closed:
            self.session = None
        products = []
        if is_pos_page(route) and self.session is not None:
            products = await self.store.list_products()
        self.dispatcher.set_page_commands(route, page_commands(route, PageHandlers(
            navigate=self.go_to,
            notify=self.notify,
            open_dialog=self.open_dialog,
            session=self.session,
            products=products,
        )))

    async def go_to(self, route: str) -> str:
        target = self.navigator.navigate(route)
        await self.load_page(target)
        self._events.append({"type": "navigate", "route": target})
        return target

    async def attach_session(self, session: PosSession | None) -> None:
        self.session = session
        await self.load_page(self.route)

    async def detach_session(self, session_id: str) -> bool:
        """Drop the POS commands of a session that was closed elsewhere."""
        if self.session is None or self.session.id != session_id:
            return False
        logger.info("Voice context of %s detached from closed session %s", self.user.username, session_id)
        await self.attach_session(None)
        return True

    def listener(
        self,
        platform: SpeechPlatform,
        on_transcript: Callable[[str], None] | None = None,
    ) -> VoiceListener:
        """A continuous listener that feeds final transcripts to this context."""
        return VoiceListener(
            platform,
            self.dispatcher,
            on_transcript=on_transcript,
            restart_delay=self.restart_delay,
        )

    async def dispatch(self, transcript: str) -> CommandMatch | None:
        if self.session is not None and self.session.closed:
            await self.detach_session(self.session.id)
        return await self.dispatcher.dispatch(transcript)
