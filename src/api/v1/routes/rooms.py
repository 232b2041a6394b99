"""Chat room, message and live view routes."""

from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import orjson
import structlog
from fastapi import (
    APIRouter,
    Depends,
    Query,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from pydantic import ValidationError as PydanticValidationError

from api.dependencies.auth import CurrentUser, authenticate_websocket, get_auth_provider
from api.v1.dependencies import get_chat_service, get_synchronizer_factory
from api.v1.schemas.chat import (
    ErrorFrame,
    MessageCreate,
    MessageFrame,
    MessageListResponse,
    MessageResponse,
    RoomCreate,
    RoomDetailResponse,
    RoomListResponse,
    RoomResponse,
    SelectRoomAction,
    SentMessageDetailResponse,
    SentMessageResponse,
    SnapshotFrame,
)
from core.config import settings
from core.exceptions import AppException, ErrorCode, ValidationError
from core.rate_limit import limiter
from domain.entities.chat import DEFAULT_ROOM_IDS
from domain.services.chat_service import ChatService
from domain.services.day_separators import with_day_separators
from domain.services.message_sync import RoomMessageSynchronizer, ViewChange, ViewChangeKind
from infrastructure.auth.jwt_provider import JWTAuthProvider

logger = structlog.get_logger()

router = APIRouter(prefix="/rooms", tags=["rooms"])


def _resolve_timezone(name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.display_timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown time zone: {name}", field="tz") from exc


@router.get(
    "",
    response_model=RoomListResponse,
    summary="List chat rooms",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_rooms(
    request: Request,
    service: ChatService = Depends(get_chat_service),
) -> RoomListResponse:
    """Default rooms first, then user-created rooms."""
    rooms = await service.list_rooms()
    return RoomListResponse(
        data=[RoomResponse.from_entity(room, room.id in DEFAULT_ROOM_IDS) for room in rooms]
    )


@router.post(
    "",
    response_model=RoomDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a chat room",
    responses={409: {"description": "Room slug already in use"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_room(
    request: Request,
    body: RoomCreate,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> RoomDetailResponse:
    room = await service.create_room(
        identity=user,
        room_id=body.id,
        name=body.name,
        description=body.description,
    )
    return RoomDetailResponse(data=RoomResponse.from_entity(room))


@router.post(
    "/{room_id}/join",
    response_model=RoomDetailResponse,
    summary="Join a chat room",
    responses={404: {"description": "Room not found"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def join_room(
    request: Request,
    room_id: str,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> RoomDetailResponse:
    """Resolve the room and provision the caller's profile."""
    room = await service.join_room(user, room_id)
    return RoomDetailResponse(data=RoomResponse.from_entity(room, room.id in DEFAULT_ROOM_IDS))


@router.get(
    "/{room_id}/messages",
    response_model=MessageListResponse,
    summary="Recent messages of a room",
    responses={404: {"description": "Room not found"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_messages(
    request: Request,
    room_id: str,
    user: CurrentUser,
    tz: Optional[str] = Query(None, description="IANA time zone for day separators"),
    service: ChatService = Depends(get_chat_service),
) -> MessageListResponse:
    """Most recent messages in ascending order, labelled with day separators."""
    zone = _resolve_timezone(tz)
    messages = await service.get_recent_messages(room_id)
    return MessageListResponse(
        data=[
            MessageResponse.from_entity(message, label)
            for label, message in with_day_separators(messages, zone)
        ]
    )


@router.post(
    "/{room_id}/messages",
    response_model=SentMessageDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
    responses={
        400: {"description": "Message is empty or too long"},
        404: {"description": "Room not found"},
        502: {"description": "Insert failed; details carry the draft"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def send_message(
    request: Request,
    room_id: str,
    body: MessageCreate,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> SentMessageDetailResponse:
    """Insert a message. Open views receive it through the live feed."""
    message = await service.send_message(user, room_id, body.content)
    return SentMessageDetailResponse(data=SentMessageResponse.from_entity(message))


@router.websocket("/ws")
async def room_feed(
    websocket: WebSocket,
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
    service: ChatService = Depends(get_chat_service),
    synchronizer_factory: Callable[[], RoomMessageSynchronizer] = Depends(
        get_synchronizer_factory
    ),
) -> None:
    """Live view of one room at a time.

    Client frames: ``{"action": "select_room", "room_id": "general"}``.
    Server frames: ``snapshot`` after every room switch, ``message`` per new
    row, ``error`` for rejected client frames.
    """
    identity = await authenticate_websocket(websocket, auth_provider)
    if identity is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    zone = _resolve_timezone(websocket.query_params.get("tz"))
    synchronizer = synchronizer_factory()

    async def push(change: ViewChange) -> None:
        if change.kind is ViewChangeKind.RESET:
            frame = SnapshotFrame(
                room_id=change.room_id,
                messages=[
                    MessageResponse.from_entity(message, label)
                    for label, message in with_day_separators(change.messages, zone)
                ],
            )
        else:
            # Appends are delivered under the view lock, so the row before the
            # new one is still second to last.
            view = synchronizer.view
            window = list(view[-2:]) if len(view) > 1 else list(change.messages)
            label, message = with_day_separators(window, zone)[-1]
            frame = MessageFrame(
                room_id=change.room_id,
                message=MessageResponse.from_entity(message, label),
            )
        await websocket.send_text(frame.model_dump_json())

    async def reject(error_code: str, message: str) -> None:
        await websocket.send_text(
            ErrorFrame(error_code=error_code, message=message).model_dump_json()
        )

    synchronizer.add_listener(push)
    structlog.contextvars.bind_contextvars(user_id=str(identity.id))
    logger.info("room_feed_connected")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                action = SelectRoomAction.model_validate(orjson.loads(raw))
            except (orjson.JSONDecodeError, PydanticValidationError):
                await reject(ErrorCode.VALIDATION_ERROR.value, "Unsupported frame")
                continue

            try:
                await service.join_room(identity, action.room_id)
            except AppException as exc:
                await reject(exc.error_code.value, exc.message)
                continue
            except Exception:
                logger.exception("room_join_failed", room_id=action.room_id)
                await reject(
                    ErrorCode.INTERNAL_ERROR.value, "Could not open the room, please retry"
                )
                continue

            await synchronizer.select_room(action.room_id)
    except WebSocketDisconnect:
        logger.info("room_feed_disconnected", room_id=synchronizer.room_id)
    finally:
        synchronizer.teardown()
