from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from loguru import logger

from app.database import SessionDep
from app.exception import ForbiddenException, InvalidInputException, UserNotFoundException
from app.messages.dao import MessageDAO
from app.messages.push import PushRegistry, get_push_registry
from app.messages.schemas import MessageCreate, MessageOut
from app.users.auth import decode_access_token
from app.users.dao import UserDAO
from app.users.dependencies import CurrentUser, extract_bearer

router = APIRouter(prefix="/messages", tags=["Messages"])
ws_router = APIRouter(tags=["Push"])

PushDep = Annotated[PushRegistry, Depends(get_push_registry)]


@router.get("/{user_id}", response_model=list[MessageOut])
async def get_conversation(user_id: int, current_user: CurrentUser, session: SessionDep):
    return await MessageDAO.get_conversation(session, current_user.id, user_id)


@router.post("", response_model=MessageOut)
async def send_message(message: MessageCreate, current_user: CurrentUser, session: SessionDep, push: PushDep):
    if not message.body.strip():
        raise InvalidInputException("Message cannot be empty")

    receiver = await UserDAO.find_one_or_none_by_id(session, message.receiver_id)
    if not receiver:
        raise UserNotFoundException
    sender = await UserDAO.find_one_or_none_by_id(session, current_user.id)
    if not sender:
        raise UserNotFoundException

    # add() коммитит, поэтому событие уходит только для уже сохранённого сообщения
    created = await MessageDAO.add(
        session, sender_id=current_user.id, receiver_id=message.receiver_id, body=message.body
    )
    out = MessageOut(
        id=created.id,
        sender_id=created.sender_id,
        receiver_id=created.receiver_id,
        body=created.body,
        sender_name=sender.username,
        created_at=created.created_at,
    )

    logger.info(f"[MESSAGES] {out.sender_id} -> {out.receiver_id}: message {out.id} stored")
    await push.publish_message(out.model_dump())
    return out


@ws_router.websocket("/ws")
async def push_channel(websocket: WebSocket, push: PushDep):
    token = websocket.query_params.get("token") or extract_bearer(websocket.headers.get("Authorization"))
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    try:
        user = decode_access_token(token)
    except ForbiddenException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await push.connect(websocket, user.id)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            # бинарные и прочие кадры игнорируются
            if message.get("text") == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        push.disconnect(websocket, user.id)
