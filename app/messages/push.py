import asyncio
from collections import defaultdict
from typing import Any, Iterable, Optional

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from loguru import logger

from app.config import settings

NEW_MESSAGE_EVENT = "new_message"


class PushRegistry:
    """
    Реестр подключённых websocket-подписчиков.

    Подписчики сгруппированы по id пользователя, один пользователь может держать
    несколько соединений. Повторной доставки и догрузки истории нет: после
    переподключения клиент сам запрашивает переписку.
    """

    def __init__(self, fanout: Optional[str] = None):
        self._connections: dict[int, set[WebSocket]] = defaultdict(set)
        self.fanout = fanout or settings.PUSH_FANOUT

    @property
    def count(self) -> int:
        return sum(len(sockets) for sockets in self._connections.values())

    def is_online(self, user_id: int) -> bool:
        return bool(self._connections.get(user_id))

    async def connect(self, websocket: WebSocket, user_id: int) -> None:
        await websocket.accept()
        self._connections[user_id].add(websocket)
        logger.info(f"[PUSH] user {user_id} connected, active={self.count}")

    def disconnect(self, websocket: WebSocket, user_id: int) -> None:
        sockets = self._connections.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._connections[user_id]
        logger.info(f"[PUSH] user {user_id} disconnected, active={self.count}")

    def _targets(self, user_ids: Optional[Iterable[int]] = None) -> list[tuple[int, WebSocket]]:
        if user_ids is None:
            user_ids = list(self._connections)
        return [(uid, ws) for uid in set(user_ids) for ws in list(self._connections.get(uid, ()))]

    async def _send(self, targets: list[tuple[int, WebSocket]], event: str, payload: dict[str, Any]) -> int:
        """Отправляет событие выбранным соединениям. Возвращает число успешных доставок."""
        if not targets:
            return 0
        message = jsonable_encoder({"event": event, "payload": payload})
        results = await asyncio.gather(
            *(ws.send_json(message) for _, ws in targets), return_exceptions=True
        )

        delivered = 0
        for (uid, ws), result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.warning(f"[PUSH] dropping dead connection of user {uid}: {result!r}")
                self.disconnect(ws, uid)
            else:
                delivered += 1
        logger.info(f"[PUSH] event={event} delivered={delivered}/{len(targets)}")
        return delivered

    async def broadcast(self, event: str, payload: dict[str, Any]) -> int:
        return await self._send(self._targets(), event, payload)

    async def send_to_users(self, user_ids: Iterable[int], event: str, payload: dict[str, Any]) -> int:
        return await self._send(self._targets(user_ids), event, payload)

    async def publish_message(self, payload: dict[str, Any]) -> int:
        """Публикует новое сообщение согласно политике рассылки (fanout)."""
        if not self.is_online(payload["receiver_id"]):
            logger.info(f"[PUSH] user {payload['receiver_id']} is offline, message {payload['id']} "
                        f"stays in history only")
        if self.fanout == "broadcast":
            return await self.broadcast(NEW_MESSAGE_EVENT, payload)
        return await self.send_to_users(
            (payload["sender_id"], payload["receiver_id"]), NEW_MESSAGE_EVENT, payload
        )

    async def close(self) -> None:
        for uid, ws in self._targets():
            try:
                await ws.close()
            except RuntimeError:
                # соединение уже закрыто клиентом
                pass
            self.disconnect(ws, uid)


push_registry = PushRegistry()


def get_push_registry() -> PushRegistry:
    return push_registry
