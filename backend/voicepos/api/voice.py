"""Voice command endpoints for the client's speech recognizer."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from voicepos.core.config import Settings
from voicepos.core.deps import get_config, get_current_user, get_sessions, get_store
from voicepos.pos.session import SessionRegistry
from voicepos.schemas.auth import CurrentUser
from voicepos.schemas.voice import (
    VoiceCommandInfo,
    VoiceDispatchRequest,
    VoiceDispatchResponse,
    VoicePageRequest,
    VoiceState,
)
from voicepos.store.base import CatalogStore
from voicepos.voice.context import VoiceContext
from voicepos.voice.matcher import VoiceCommand

router = APIRouter(prefix="/voice", tags=["voice"])


def _info(commands: list[VoiceCommand]) -> list[VoiceCommandInfo]:
    return [VoiceCommandInfo(command=c.command, phrases=c.phrases) for c in commands]


def _state(context: VoiceContext) -> VoiceState:
    return VoiceState(
        route=context.route,
        page_commands=_info(context.dispatcher.page_commands),
        global_commands=_info(context.dispatcher.global_commands),
        events=context.drain_events(),
    )


async def _context(
    request: Request,
    user: CurrentUser,
    store: CatalogStore,
    sessions: SessionRegistry,
    session_id: str | None,
) -> VoiceContext:
    config: Settings = get_config(request)
    contexts: dict[str, VoiceContext] = request.app.state.voice_contexts
    context = contexts.get(user.id)
    if context is None:
        context = VoiceContext(
            user,
            store,
            threshold=config.VOICE_MATCH_THRESHOLD,
            restart_delay=config.VOICE_RESTART_DELAY,
        )
        await context.load_page(context.route)
        contexts[user.id] = context
    context.set_user(user)

    if session_id is not None:
        session = sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="POS session not found")
        if session is not context.session:
            await context.attach_session(session)
    return context


@router.get("/commands", response_model=VoiceState)
async def get_commands(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    store: CatalogStore = Depends(get_store),
    sessions: SessionRegistry = Depends(get_sessions),
):
    return _state(await _context(request, current_user, store, sessions, None))


@router.post("/page", response_model=VoiceState)
async def set_page(
    body: VoicePageRequest,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    store: CatalogStore = Depends(get_store),
    sessions: SessionRegistry = Depends(get_sessions),
):
    """Tell the dispatcher which page the client shows; denied pages land on home."""
    context = await _context(request, current_user, store, sessions, body.session_id)
    await context.go_to(body.route)
    return _state(context)


@router.post("/dispatch", response_model=VoiceDispatchResponse)
async def dispatch(
    body: VoiceDispatchRequest,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    store: CatalogStore = Depends(get_store),
    sessions: SessionRegistry = Depends(get_sessions),
):
    """Resolve a final transcript and run the matching command."""
    context = await _context(request, current_user, store, sessions, body.session_id)
    match = await context.dispatch(body.transcript)
    response = VoiceDispatchResponse(
        transcript=body.transcript,
        matched=match is not None,
        command=match.command.command if match else None,
        kind=match.kind if match else None,
        scope=match.scope if match else None,
        score=match.score if match else None,
        error=match.error if match else None,
        route=context.route,
        events=context.drain_events(),
    )
    if context.logged_out:
        request.app.state.voice_contexts.pop(current_user.id, None)
    return response
