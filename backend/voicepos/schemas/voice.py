from typing import Any

from pydantic import BaseModel, Field


class VoicePageRequest(BaseModel):
    route: str = Field(..., min_length=1)
    session_id: str | None = None


class VoiceDispatchRequest(BaseModel):
    transcript: str
    session_id: str | None = None


class VoiceCommandInfo(BaseModel):
    command: str
    phrases: list[str]


class VoiceState(BaseModel):
    route: str
    page_commands: list[VoiceCommandInfo]
    global_commands: list[VoiceCommandInfo]
    events: list[dict[str, Any]] = Field(default_factory=list)


class VoiceDispatchResponse(BaseModel):
    transcript: str
    matched: bool
    command: str | None = None
    kind: str | None = None
    scope: str | None = None
    score: float | None = None
    error: str | None = None
    route: str
    events: list[dict[str, Any]] = Field(default_factory=list)
