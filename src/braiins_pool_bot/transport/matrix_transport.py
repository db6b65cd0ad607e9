from __future__ import annotations

import aiohttp
from aiohttp_socks import ProxyConnector
from loguru import logger
from mautrix.client import Client, InternalEventType
from mautrix.client.dispatcher import MembershipEventDispatcher
from mautrix.client.state_store import MemoryStateStore, MemorySyncStore
from mautrix.errors import MatrixConnectionError, MatrixError, MUnknownToken
from mautrix.types import DeviceID, EventID, EventType, Membership, MessageType, RoomID, UserID
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from braiins_pool_bot.errors import AuthError, TransportError
from braiins_pool_bot.transport.chat_transport import (
    InboundMessage,
    InviteHandler,
    LoginResult,
    MessageHandler,
    RoomMembership,
)

_SEND_ATTEMPTS = 3

_MEMBERSHIP_MAP = {
    Membership.JOIN: RoomMembership.JOINED,
    Membership.INVITE: RoomMembership.INVITED,
}


def _on_send_retry(retry_state) -> None:
    attempt = retry_state.attempt_number
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(f"Matrix send failed. Retrying in {wait:.0f}s (attempt {attempt}/{_SEND_ATTEMPTS})...")


def localpart(user_id: str) -> str:
    """Return the localpart of a Matrix user id: "@bot:example.org" -> "bot"."""
    return user_id.lstrip("@").split(":", 1)[0]


class MatrixTransport:
    def __init__(self, homeserver_url: str, user_id: str, *, proxy: str | None = None):
        self._homeserver_url = homeserver_url
        self._user_id = user_id
        self._proxy = proxy
        self._client: Client | None = None
        self._http: aiohttp.ClientSession | None = None

    @property
    def client(self) -> Client:
        if self._client is None:
            raise TransportError("Matrix client is not connected")
        return self._client

    async def login(self, user_id: str, password: str, device_name: str) -> LoginResult:
        client = self._build_client(user_id)
        try:
            response = await client.login(
                identifier=localpart(user_id),
                password=password,
                device_name=device_name,
            )
        except MatrixError as ex:
            raise AuthError(f"Login rejected for {user_id}") from ex
        self._client = client
        return LoginResult(
            user_id=str(response.user_id),
            access_token=response.access_token or None,
            device_id=str(response.device_id) if response.device_id else None,
        )

    async def resume(self, access_token: str, device_id: str, user_id: str) -> None:
        client = self._build_client(user_id, access_token=access_token, device_id=device_id)
        try:
            whoami = await client.whoami()
        except MUnknownToken as ex:
            raise AuthError(f"Stored access token for {user_id} is no longer valid") from ex
        except MatrixError as ex:
            raise TransportError("Cannot restore Matrix session") from ex
        if str(whoami.user_id) != user_id:
            raise AuthError(f"Stored session belongs to {whoami.user_id}, not {user_id}")
        self._client = client

    async def set_display_name(self, name: str) -> None:
        try:
            await self.client.set_displayname(name)
        except MatrixError as ex:
            raise TransportError("Cannot set display name") from ex

    async def send_text(self, room_id: str, text: str) -> None:
        try:
            await self._send_with_retry(room_id, text)
        except MatrixError as ex:
            raise TransportError(f"Cannot send message to {room_id}") from ex

    @retry(
        retry=retry_if_exception_type(MatrixConnectionError),
        stop=stop_after_attempt(_SEND_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        before_sleep=_on_send_retry,
        reraise=True,
    )
    async def _send_with_retry(self, room_id: str, text: str) -> None:
        await self.client.send_text(RoomID(room_id), text)

    async def redact(self, room_id: str, event_id: str) -> None:
        try:
            await self.client.redact(RoomID(room_id), EventID(event_id))
        except MatrixError as ex:
            raise TransportError(f"Cannot redact {event_id}") from ex

    async def join_room(self, room_id: str) -> None:
        try:
            await self.client.join_room_by_id(RoomID(room_id))
        except MatrixError as ex:
            raise TransportError(f"Cannot join {room_id}") from ex

    async def run(self, on_message: MessageHandler, on_invite: InviteHandler) -> None:
        """Dispatch live room events until the sync loop stops.

        Timeline history from the initial sync is never dispatched. That sync
        only seeds room membership and picks up invites that arrived while the
        bot was offline. A sync loop that dies on an error raises instead of
        returning.
        """
        client = self.client
        stopped: dict[str, Exception | None] = {"error": None}

        async def _message_handler(evt) -> None:
            try:
                membership = await self._membership(str(evt.room_id))
            except TransportError as ex:
                logger.error(f"Dropping {evt.event_id}: {ex.describe()}")
                return
            on_message(
                InboundMessage(
                    sender=str(evt.sender),
                    room_id=str(evt.room_id),
                    body=getattr(evt.content, "body", "") or "",
                    event_id=str(evt.event_id),
                    is_text=getattr(evt.content, "msgtype", None) == MessageType.TEXT,
                    membership=membership,
                )
            )

        async def _invite_handler(evt) -> None:
            if str(evt.state_key) != self._user_id:
                return
            await on_invite(str(evt.room_id), str(evt.sender))

        async def _sync_handler(evt: dict) -> None:
            data = evt.get("data") or {}
            if data.get("net.maunium.mautrix", {}).get("is_initial"):
                await self._seed_from_initial_sync(data, on_invite)

        async def _stopped_handler(evt: dict) -> None:
            stopped["error"] = evt.get("error")

        client.add_dispatcher(MembershipEventDispatcher)
        client.add_event_handler(EventType.ROOM_MESSAGE, _message_handler, wait_sync=True)
        client.add_event_handler(InternalEventType.INVITE, _invite_handler)
        client.add_event_handler(InternalEventType.SYNC_SUCCESSFUL, _sync_handler, wait_sync=True)
        client.add_event_handler(InternalEventType.SYNC_STOPPED, _stopped_handler, wait_sync=True)

        client.ignore_initial_sync = True
        logger.debug("Starting Matrix sync loop")
        await client.start(filter_data=None)

        error = stopped["error"]
        if isinstance(error, MUnknownToken):
            raise AuthError("Matrix access token is no longer valid") from error
        if error is not None:
            raise TransportError("Matrix sync loop stopped") from error
        logger.debug("Matrix sync loop stopped")

    async def close(self) -> None:
        if self._client is not None:
            self._client.stop()
            await self._client.api.session.close()
            self._client = None
        if self._http is not None:
            await self._http.close()
            self._http = None

    async def _membership(self, room_id: str) -> RoomMembership:
        member = await self.client.state_store.get_member(RoomID(room_id), UserID(self._user_id))
        if member is None:
            # State store has not seen this room yet; ask the server
            try:
                joined = await self.client.get_joined_rooms()
            except MatrixError as ex:
                raise TransportError(f"Cannot resolve membership in {room_id}") from ex
            return RoomMembership.JOINED if RoomID(room_id) in joined else RoomMembership.LEFT
        return _MEMBERSHIP_MAP.get(member.membership, RoomMembership.LEFT)

    async def _seed_from_initial_sync(self, data: dict, on_invite: InviteHandler) -> None:
        rooms = data.get("rooms", {})
        joined = rooms.get("join", {})
        for room_id in joined:
            await self.client.state_store.set_membership(RoomID(room_id), UserID(self._user_id), Membership.JOIN)
        logger.debug(f"Initial sync: {len(joined)} joined rooms")

        for room_id, room_data in rooms.get("invite", {}).items():
            inviter = next(
                (
                    evt.get("sender", "")
                    for evt in room_data.get("invite_state", {}).get("events", [])
                    if evt.get("type") == "m.room.member" and evt.get("state_key") == self._user_id
                ),
                None,
            )
            if inviter is not None:
                await on_invite(room_id, inviter)

    def _build_client(
        self,
        user_id: str,
        *,
        access_token: str = "",
        device_id: str = "",
    ) -> Client:
        if self._http is None and self._proxy:
            self._http = aiohttp.ClientSession(connector=ProxyConnector.from_url(self._proxy))
        return Client(
            mxid=UserID(user_id),
            device_id=DeviceID(device_id),
            base_url=self._homeserver_url,
            token=access_token,
            client_session=self._http,
            state_store=MemoryStateStore(),
            sync_store=MemorySyncStore(),
        )
