from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Profile:
    confirmed_reward: float
    unconfirmed_reward: float
    estimated_reward: float
    hash_rate_5m: float
    hash_rate_60m: float
    hash_rate_24h: float
    hash_rate_scoring: float
    hash_rate_yesterday: float
    ok_workers: int
    low_workers: int
    off_workers: int
    dis_workers: int


@dataclass(frozen=True)
class Worker:
    state: str
    last_share: int
    hash_rate_scoring: float
    hash_rate_5m: float
    hash_rate_60m: float
    hash_rate_24h: float


@dataclass(frozen=True)
class DailyReward:
    date: int
    total_reward: float


@dataclass(frozen=True)
class PoolStats:
    luck_b10: float
    luck_b50: float
    luck_b250: float
    pool_scoring_hash_rate: float
    pool_active_workers: int
    round_probability: float


@runtime_checkable
class PoolApi(Protocol):
    """Account and pool statistics for one API token.

    Every method raises ``RemoteApiError`` on network, HTTP or decode failure.
    Hash rates are in GH/s, rewards in BTC, timestamps in Unix seconds.
    """

    async def fetch_profile(self) -> Profile: ...

    async def fetch_workers(self) -> dict[str, Worker]: ...

    async def fetch_daily_rewards(self) -> list[DailyReward]: ...

    async def fetch_pool_stats(self) -> PoolStats: ...

    async def check_tor_connection(self) -> bool: ...


PoolClientFactory = Callable[[str], PoolApi]
