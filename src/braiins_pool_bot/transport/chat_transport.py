from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class RoomMembership(Enum):
    INVITED = "invite"
    JOINED = "join"
    LEFT = "leave"


@dataclass(frozen=True)
class InboundMessage:
    sender: str
    room_id: str
    body: str
    event_id: str
    is_text: bool = True
    membership: RoomMembership = RoomMembership.JOINED


@dataclass(frozen=True)
class LoginResult:
    user_id: str
    access_token: str | None
    device_id: str | None


MessageHandler = Callable[[InboundMessage], None]
InviteHandler = Callable[[str, str], Awaitable[None]]


@runtime_checkable
class ChatTransport(Protocol):
    """What the bot needs from a chat protocol client.

    Failures raise ``AuthError`` (rejected credentials) or ``TransportError``.
    """

    async def login(self, user_id: str, password: str, device_name: str) -> LoginResult: ...

    async def resume(self, access_token: str, device_id: str, user_id: str) -> None: ...

    async def set_display_name(self, name: str) -> None: ...

    async def send_text(self, room_id: str, text: str) -> None: ...

    async def redact(self, room_id: str, event_id: str) -> None: ...

    async def join_room(self, room_id: str) -> None: ...

    async def run(self, on_message: MessageHandler, on_invite: InviteHandler) -> None:
        """Sync until stopped, calling ``on_message`` for each room message
        and ``on_invite(room_id, inviter)`` for each invitation."""
        ...

    async def close(self) -> None: ...
