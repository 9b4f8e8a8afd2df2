"""Global and page-scoped voice command sets."""

import inspect
import logging

from voicepos.voice.matcher import CommandMatch, VoiceCommand, resolve_command

logger = logging.getLogger(__name__)


class VoiceCommandDispatcher:
    def __init__(self, threshold: float = 0.7):
        self.threshold = threshold
        self.page: str | None = None
        self._global: list[VoiceCommand] = []
        self._page: list[VoiceCommand] = []

    @property
    def global_commands(self) -> list[VoiceCommand]:
        return list(self._global)

    @property
    def page_commands(self) -> list[VoiceCommand]:
        return list(self._page)

    def set_global_commands(self, commands: list[VoiceCommand]) -> None:
        self._global = list(commands)

    def set_page_commands(self, page: str, commands: list[VoiceCommand]) -> None:
        """Replace the page-scoped set wholesale."""
        self.page = page
        self._page = list(commands)

    def clear_page_commands(self) -> None:
        self.page = None
        self._page = []

    def resolve(self, transcript: str) -> CommandMatch | None:
        return resolve_command(transcript, self._page, self._global, self.threshold)

    async def dispatch(self, transcript: str) -> CommandMatch | None:
        """Resolve and run a command; action failures are reported on the match."""
        match = self.resolve(transcript)
        if match is None:
            logger.debug("No voice command matched %r", transcript)
            return None

        logger.info(
            "Voice command %r matched %r (%s, %.2f)",
            match.command.command, transcript, match.kind, match.score,
        )
        try:
            result = match.command.action()
            if inspect.isawaitable(result):
                result = await result
            match.result = result
        except Exception as exc:
            match.error = getattr(exc, "message", None) or str(exc)
            logger.warning("Voice command %r failed: %s", match.command.command, match.error)
        return match
