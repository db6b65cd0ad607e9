from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from braiins_pool_bot.store import BotStore
from braiins_pool_bot.transport.chat_transport import ChatTransport

DEFAULT_DEVICE_NAME = "SlushPool Bot"


@dataclass(frozen=True)
class ActiveSession:
    user_id: str
    device_id: str | None
    resumed: bool
    persisted: bool


class SessionManager:
    """Resumes the bot's chat session from the store or logs in fresh.

    A fresh login is persisted once. Sessions are never rewritten; the only
    way to drop one is ``forget_session``.
    """

    def __init__(self, store: BotStore, transport: ChatTransport, *, device_name: str = DEFAULT_DEVICE_NAME):
        self._store = store
        self._transport = transport
        self._device_name = device_name

    async def resume_or_login(self, user_id: str, password: str) -> ActiveSession:
        logger.debug("Checking session...")
        stored = self._store.get_session(user_id)

        if stored is not None:
            await self._transport.resume(stored.access_token, stored.device_id, user_id)
            logger.debug("Session restored from database")
            return ActiveSession(user_id=user_id, device_id=stored.device_id, resumed=True, persisted=True)

        logger.debug("Session not found in database")
        logger.debug("Login with credentials...")
        result = await self._transport.login(user_id, password, self._device_name)

        if not result.access_token or not result.device_id:
            logger.error("Impossible to get and save session")
            logger.warning(
                "The bot can continue to work without saving the session but on the next restart "
                "it will log in again and will not be able to read messages in encrypted rooms"
            )
            return ActiveSession(user_id=user_id, device_id=result.device_id, resumed=False, persisted=False)

        logger.debug("Saving session data into database...")
        self._store.create_session(user_id, result.access_token, result.device_id)
        logger.debug("Session saved to database")
        return ActiveSession(user_id=user_id, device_id=result.device_id, resumed=False, persisted=True)

    def forget_session(self, user_id: str) -> bool:
        removed = self._store.delete_session(user_id)
        if removed:
            logger.info(f"Deleted stored session for {user_id}")
        else:
            logger.info(f"No stored session for {user_id}")
        return removed
