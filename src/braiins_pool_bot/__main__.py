import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from braiins_pool_bot.app_config import load_json_config, parse_app_config, resolve_runtime_env
from braiins_pool_bot.bootstrap import AppRuntime, bootstrap_runtime
from braiins_pool_bot.errors import BotError


async def main() -> int:
    load_dotenv()

    try:
        config = load_json_config()
        app = parse_app_config(config)
        env = resolve_runtime_env(config)
        runtime: AppRuntime = bootstrap_runtime(app, env)
    except BotError as ex:
        logger.error(ex.describe())
        return 1

    if runtime.log_descriptions:
        logger.info(f"Logging: {', '.join(runtime.log_descriptions)}")

    try:
        await runtime.bot.run()
    except BotError as ex:
        logger.error(f"Fatal: {ex.describe()}")
        return 1
    finally:
        await runtime.close()
    return 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
