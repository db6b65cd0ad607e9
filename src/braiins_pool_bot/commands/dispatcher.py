from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from loguru import logger

from braiins_pool_bot.commands import replies
from braiins_pool_bot.commands.parser import ParsedCommand, parse_command
from braiins_pool_bot.pool.pool_api import PoolApi, PoolClientFactory
from braiins_pool_bot.store import BotStore, SubscriptionRecord
from braiins_pool_bot.transport.chat_transport import ChatTransport, InboundMessage, RoomMembership

CommandHandler = Callable[[InboundMessage, ParsedCommand], Awaitable[str]]
AccountQuery = Callable[[PoolApi], Awaitable[str]]


class CommandDispatcher:
    """Turns one inbound room message into at most one reply.

    ``dispatch`` returns ``None`` when the message is not for the bot. Pool
    and store failures propagate as ``BotError`` subclasses; the caller owns
    reporting them.
    """

    def __init__(
        self,
        *,
        bot_user_id: str,
        store: BotStore,
        pool_client_factory: PoolClientFactory,
        transport: ChatTransport,
        tor_check_token: str = "",
    ) -> None:
        self._bot_user_id = bot_user_id
        self._store = store
        self._pool_client_factory = pool_client_factory
        self._transport = transport
        self._tor_check_token = tor_check_token
        self._redactions: set[asyncio.Task] = set()
        self._handlers: dict[str, CommandHandler] = {
            "!userstatus": self._account_query(self._user_status),
            "!workers": self._account_query(self._workers),
            "!dailyrewards": self._account_query(self._daily_rewards),
            "!poolstatus": self._account_query(self._pool_status),
            "!subscribe": self._subscribe,
            "!unlink": self._unlink,
            "!checktor": self._check_tor,
            "!help": self._help,
        }

    def accepts(self, message: InboundMessage) -> bool:
        if message.sender == self._bot_user_id:
            return False
        if message.membership is not RoomMembership.JOINED:
            return False
        return message.is_text

    async def dispatch(self, message: InboundMessage) -> str | None:
        if not self.accepts(message):
            return None

        start = time.perf_counter()
        command = parse_command(message.body)
        logger.debug(f"Command {command.name!r} received from {message.sender} in {message.room_id}")

        handler = self._handlers.get(command.name, self._unknown)
        reply = await handler(message, command)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.trace(f"{command.name} command processed in {elapsed_ms:.0f} ms")
        return reply

    async def drain(self) -> None:
        """Wait for redactions still in flight."""
        if self._redactions:
            await asyncio.gather(*self._redactions, return_exceptions=True)

    # -- account queries --

    def _account_query(self, query: AccountQuery) -> CommandHandler:
        async def _handler(message: InboundMessage, _: ParsedCommand) -> str:
            subscription = self._subscription_for(message.sender)
            if subscription is None:
                return replies.NOT_SUBSCRIBED
            return await query(self._pool_client_factory(subscription.api_token))

        return _handler

    async def _user_status(self, client: PoolApi) -> str:
        return replies.format_user_status(await client.fetch_profile())

    async def _workers(self, client: PoolApi) -> str:
        return replies.format_workers(await client.fetch_workers())

    async def _daily_rewards(self, client: PoolApi) -> str:
        return replies.format_daily_rewards(await client.fetch_daily_rewards())

    async def _pool_status(self, client: PoolApi) -> str:
        return replies.format_pool_status(await client.fetch_pool_stats())

    # -- subscription lifecycle --

    async def _subscribe(self, message: InboundMessage, command: ParsedCommand) -> str:
        # One subscription per user, whichever room it was created in
        if self._subscription_for(message.sender) is not None:
            return replies.ALREADY_SUBSCRIBED

        args = command.args
        if not args:
            return replies.MISSING_TOKEN

        self._store.create_subscription(message.sender, message.room_id, args[0])
        logger.info(f"{message.sender} subscribed from {message.room_id}")
        self._schedule_redaction(message)
        return replies.SUBSCRIBED

    async def _unlink(self, message: InboundMessage, _: ParsedCommand) -> str:
        if self._subscription_for(message.sender) is None:
            return replies.NO_TOKEN_LINKED
        self._store.delete_subscription(message.sender)
        logger.info(f"{message.sender} unlinked")
        return replies.UNLINKED

    def _schedule_redaction(self, message: InboundMessage) -> None:
        """Scrub the token from the room history without holding up the reply."""
        task = asyncio.create_task(self._redact_quietly(message), name=f"redact-{message.event_id}")
        self._redactions.add(task)
        task.add_done_callback(self._redactions.discard)

    async def _redact_quietly(self, message: InboundMessage) -> None:
        try:
            await self._transport.redact(message.room_id, message.event_id)
        except Exception as ex:
            logger.debug(f"Could not redact {message.event_id}: {ex}")

    # -- stateless commands --

    async def _check_tor(self, _: InboundMessage, __: ParsedCommand) -> str:
        client = self._pool_client_factory(self._tor_check_token)
        if await client.check_tor_connection():
            return replies.TOR_CONNECTED
        return replies.TOR_NOT_CONNECTED

    async def _help(self, _: InboundMessage, __: ParsedCommand) -> str:
        return replies.HELP_TEXT

    async def _unknown(self, _: InboundMessage, __: ParsedCommand) -> str:
        return replies.INVALID_COMMAND

    def _subscription_for(self, user_id: str) -> SubscriptionRecord | None:
        return self._store.get_subscription(user_id)
