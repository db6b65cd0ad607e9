from __future__ import annotations

import math
from typing import Any

import httpx
from loguru import logger

from braiins_pool_bot.errors import RemoteApiError
from braiins_pool_bot.pool.pool_api import DailyReward, PoolApi, PoolClientFactory, PoolStats, Profile, Worker

_BASE_URL = "https://pool.braiins.com"
_TOR_CHECK_URL = "https://check.torproject.org/api/ip"
_AUTH_HEADER = "SlushPool-Auth-Token"
_TIMEOUT_SECONDS = 30


class BraiinsPoolClient:
    def __init__(
        self,
        token: str,
        proxy: str | None = None,
        *,
        base_url: str = _BASE_URL,
        timeout: float = _TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._proxy = proxy
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def fetch_profile(self) -> Profile:
        data = _section(await self._get_json(f"{self._base_url}/accounts/profile/json/btc/"))
        return Profile(
            confirmed_reward=_float(data, "confirmed_reward"),
            unconfirmed_reward=_float(data, "unconfirmed_reward"),
            estimated_reward=_float(data, "estimated_reward"),
            hash_rate_5m=_float(data, "hash_rate_5m"),
            hash_rate_60m=_float(data, "hash_rate_60m"),
            hash_rate_24h=_float(data, "hash_rate_24h"),
            hash_rate_scoring=_float(data, "hash_rate_scoring"),
            hash_rate_yesterday=_float(data, "hash_rate_yesterday"),
            ok_workers=_int(data, "ok_workers"),
            low_workers=_int(data, "low_workers"),
            off_workers=_int(data, "off_workers"),
            dis_workers=_int(data, "dis_workers"),
        )

    async def fetch_workers(self) -> dict[str, Worker]:
        data = _section(await self._get_json(f"{self._base_url}/accounts/workers/json/btc/"))
        raw_workers = data.get("workers", {})
        if not isinstance(raw_workers, dict):
            raise RemoteApiError("Unexpected workers payload")
        return {
            str(name): Worker(
                state=str(w.get("state", "")),
                last_share=_int(w, "last_share"),
                hash_rate_scoring=_float(w, "hash_rate_scoring"),
                hash_rate_5m=_float(w, "hash_rate_5m"),
                hash_rate_60m=_float(w, "hash_rate_60m"),
                hash_rate_24h=_float(w, "hash_rate_24h"),
            )
            for name, w in raw_workers.items()
            if isinstance(w, dict)
        }

    async def fetch_daily_rewards(self) -> list[DailyReward]:
        data = _section(await self._get_json(f"{self._base_url}/accounts/rewards/json/btc/"))
        raw_rewards = data.get("daily_rewards", [])
        if not isinstance(raw_rewards, list):
            raise RemoteApiError("Unexpected daily rewards payload")
        return [
            DailyReward(date=_int(r, "date"), total_reward=_float(r, "total_reward"))
            for r in raw_rewards
            if isinstance(r, dict)
        ]

    async def fetch_pool_stats(self) -> PoolStats:
        data = _section(await self._get_json(f"{self._base_url}/stats/json/btc/"))
        return PoolStats(
            luck_b10=_float(data, "luck_b10"),
            luck_b50=_float(data, "luck_b50"),
            luck_b250=_float(data, "luck_b250"),
            pool_scoring_hash_rate=_float(data, "pool_scoring_hash_rate"),
            pool_active_workers=_int(data, "pool_active_workers"),
            round_probability=_float(data, "round_probability"),
        )

    async def check_tor_connection(self) -> bool:
        data = await self._get_json(_TOR_CHECK_URL, authenticated=False)
        return bool(data.get("IsTor", False))

    async def _get_json(self, url: str, *, authenticated: bool = True) -> dict[str, Any]:
        headers = {"Accept": "application/json"}
        if authenticated:
            headers[_AUTH_HEADER] = self._token

        logger.debug(f"GET {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                proxy=self._proxy,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.TimeoutException as ex:
            raise RemoteApiError(f"Timed out after {self._timeout:g}s requesting {url}") from ex
        except httpx.HTTPError as ex:
            raise RemoteApiError(f"Request to {url} failed") from ex

        if response.status_code >= 400:
            raise RemoteApiError(f"HTTP {response.status_code} from {url}")

        try:
            data = response.json()
        except ValueError as ex:
            raise RemoteApiError(f"Invalid JSON from {url}") from ex
        if not isinstance(data, dict):
            raise RemoteApiError(f"Unexpected payload from {url}")
        return data


def client_factory(proxy: str | None = None) -> PoolClientFactory:
    def _create(token: str) -> PoolApi:
        return BraiinsPoolClient(token, proxy)

    return _create


def _section(data: dict[str, Any]) -> dict[str, Any]:
    section = data.get("btc")
    if not isinstance(section, dict):
        raise RemoteApiError("Response has no 'btc' section")
    return section


def _float(data: dict[str, Any], key: str) -> float:
    # The pool API sends most decimals as strings
    value = data.get(key)
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as ex:
        raise RemoteApiError(f"Field {key!r} is not a number: {value!r}") from ex


def _int(data: dict[str, Any], key: str) -> int:
    value = _float(data, key)
    if not math.isfinite(value):
        raise RemoteApiError(f"Field {key!r} is not a finite number")
    return int(value)
