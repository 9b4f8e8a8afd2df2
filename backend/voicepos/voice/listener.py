"""Continuous listening on top of a platform speech recognizer."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from voicepos.core.exceptions import SpeechRecognitionError
from voicepos.voice.dispatcher import VoiceCommandDispatcher
from voicepos.voice.matcher import CommandMatch

logger = logging.getLogger(__name__)

UNSUPPORTED = "unsupported"
IDLE = "idle"
LISTENING = "listening"
ERROR = "error"


@dataclass(frozen=True)
class SpeechResult:
    transcript: str
    is_final: bool


class SpeechPlatform(ABC):
    """A recognizer that hears one utterance per ``start()``.

    ``results()`` yields partial results and then the final one, and ends
    when the utterance ends. Failures raise ``SpeechRecognitionError``.
    """

    @abstractmethod
    def is_supported(self) -> bool: ...

    @abstractmethod
    async def start(self) -> None: ...

    @abstractmethod
    async def stop(self) -> None: ...

    @abstractmethod
    def results(self) -> AsyncIterator[SpeechResult]: ...


class VoiceListener:
    def __init__(
        self,
        platform: SpeechPlatform,
        dispatcher: VoiceCommandDispatcher,
        on_transcript: Callable[[str], None] | None = None,
        continuous: bool = True,
        restart_delay: float = 0.3,
    ):
        self.platform = platform
        self.dispatcher = dispatcher
        self.on_transcript = on_transcript
        self.continuous = continuous
        self.restart_delay = restart_delay

        self.status = IDLE if platform.is_supported() else UNSUPPORTED
        self.last_error: str | None = None
        self.last_match: CommandMatch | None = None
        self._task: asyncio.Task | None = None
        self._stopping = False

    @property
    def is_supported(self) -> bool:
        return self.status != UNSUPPORTED

    @property
    def is_listening(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        """Begin listening; returns False when speech is unsupported."""
        if not self.is_supported:
            logger.warning("Speech recognition is not supported on this platform")
            return False
        if self.is_listening:
            return True
        self._stopping = False
        self.last_error = None
        self.status = LISTENING
        self._task = asyncio.create_task(self._run())
        return True

    async def stop(self) -> None:
        if not self.is_listening:
            return
        self._stopping = True
        task = self._task
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        await self.platform.stop()
        self._task = None
        if self.status == LISTENING:
            self.status = IDLE

    def _emit_transcript(self, transcript: str) -> None:
        if self.on_transcript is not None:
            self.on_transcript(transcript)

    async def _run(self) -> None:
        try:
            while not self._stopping:
                await self.platform.start()
                async for result in self.platform.results():
                    self._emit_transcript(result.transcript)
                    if result.is_final:
                        self.last_match = await self.dispatcher.dispatch(result.transcript)
                if not self.continuous or self._stopping:
                    break
                await asyncio.sleep(self.restart_delay)
        except SpeechRecognitionError as exc:
            self.last_error = exc.code
            self.status = ERROR
            logger.error("Speech recognition error (%s): %s", exc.code, exc.message)
            return
        if self.status == LISTENING:
            self.status = IDLE
