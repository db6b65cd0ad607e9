from __future__ import annotations

import asyncio

from loguru import logger

from braiins_pool_bot.commands.dispatcher import CommandDispatcher
from braiins_pool_bot.errors import render_error
from braiins_pool_bot.session_manager import ActiveSession, SessionManager
from braiins_pool_bot.transport.chat_transport import ChatTransport, InboundMessage

DEFAULT_DISPLAY_NAME = "BraiinsPool Bot"


class PoolBot:
    def __init__(
        self,
        *,
        user_id: str,
        password: str,
        transport: ChatTransport,
        session_manager: SessionManager,
        dispatcher: CommandDispatcher,
        display_name: str = DEFAULT_DISPLAY_NAME,
    ) -> None:
        self._user_id = user_id
        self._password = password
        self._transport = transport
        self._session_manager = session_manager
        self._dispatcher = dispatcher
        self._display_name = display_name
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def start(self) -> ActiveSession:
        session = await self._session_manager.resume_or_login(self._user_id, self._password)
        await self._transport.set_display_name(self._display_name)
        logger.info(f"Matrix Bot started as {session.user_id} (device {session.device_id})")
        return session

    async def run(self) -> None:
        await self.start()
        await self._transport.run(on_message=self.on_message, on_invite=self.on_invite)

    def on_message(self, message: InboundMessage) -> None:
        task = asyncio.create_task(self.handle_message(message), name=f"dispatch-{message.event_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def handle_message(self, message: InboundMessage) -> None:
        try:
            reply = await self._dispatcher.dispatch(message)
            if reply is not None:
                await self._transport.send_text(message.room_id, reply)
        except Exception as ex:
            logger.error(f"Failed to handle {message.event_id} in {message.room_id}: {ex}")
            await self._report_error(message.room_id, ex)

    async def on_invite(self, room_id: str, inviter: str) -> None:
        logger.info(f"Accepting invite from {inviter} to {room_id}")
        try:
            await self._transport.join_room(room_id)
        except Exception as ex:
            logger.error(f"Failed to join room {room_id}: {ex}")

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._dispatcher.drain()

    async def _report_error(self, room_id: str, error: Exception) -> None:
        try:
            await self._transport.send_text(room_id, render_error(error))
        except Exception as ex:
            logger.error(f"Could not report error into {room_id}: {ex}")
