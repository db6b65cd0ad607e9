from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from braiins_pool_bot.app_config import AppConfig, RuntimeEnv
from braiins_pool_bot.bot import PoolBot
from braiins_pool_bot.commands.dispatcher import CommandDispatcher
from braiins_pool_bot.logging_config import setup_logging
from braiins_pool_bot.pool.braiins_client import client_factory
from braiins_pool_bot.pool.pool_api import PoolClientFactory
from braiins_pool_bot.session_manager import SessionManager
from braiins_pool_bot.store import BotStore
from braiins_pool_bot.transport.chat_transport import ChatTransport
from braiins_pool_bot.transport.matrix_transport import MatrixTransport


@dataclass
class AppRuntime:
    bot: PoolBot
    store: BotStore
    transport: ChatTransport
    session_manager: SessionManager
    log_descriptions: list[str]

    async def close(self) -> None:
        await self.transport.close()
        self.store.close()


def bootstrap_runtime(
    app: AppConfig,
    env: RuntimeEnv,
    *,
    transport: ChatTransport | None = None,
    pool_client_factory: PoolClientFactory | None = None,
) -> AppRuntime:
    log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers, data_dir=app.data_dir)
    logger.debug(f"Config: {app.describe()}")

    store = BotStore.open(app.db_path)
    if transport is None:
        transport = MatrixTransport(app.homeserver_url, app.user_id, proxy=app.matrix_proxy)

    session_manager = SessionManager(store, transport, device_name=app.device_name)
    if app.forget_session:
        session_manager.forget_session(app.user_id)

    dispatcher = CommandDispatcher(
        bot_user_id=app.user_id,
        store=store,
        pool_client_factory=pool_client_factory or client_factory(app.proxy),
        transport=transport,
    )

    bot = PoolBot(
        user_id=app.user_id,
        password=env.matrix_password,
        transport=transport,
        session_manager=session_manager,
        dispatcher=dispatcher,
        display_name=app.display_name,
    )

    return AppRuntime(
        bot=bot,
        store=store,
        transport=transport,
        session_manager=session_manager,
        log_descriptions=log_descriptions,
    )
