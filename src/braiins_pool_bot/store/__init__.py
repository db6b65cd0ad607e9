from braiins_pool_bot.store.bot_store import BotStore
from braiins_pool_bot.store.kv_store import KeyValueStore
from braiins_pool_bot.store.models import SessionRecord, SubscriptionRecord

__all__ = [
    "BotStore",
    "KeyValueStore",
    "SessionRecord",
    "SubscriptionRecord",
]
