from __future__ import annotations

from braiins_pool_bot.formatting import (
    format_btc_to_sats,
    format_date,
    format_decimal,
    format_gh_to_th,
    format_number,
)
from braiins_pool_bot.pool.pool_api import DailyReward, PoolStats, Profile, Worker

NOT_SUBSCRIBED = "This account in not subscribed."
ALREADY_SUBSCRIBED = "This account is already subscribed"
MISSING_TOKEN = "Please provide a token.\nTo subscribe send: !subscribe <token>"
SUBSCRIBED = "Subscribed"
UNLINKED = "Unlinked"
NO_TOKEN_LINKED = "No token linked to this account"
TOR_CONNECTED = "Connected to Tor Network"
TOR_NOT_CONNECTED = "NOT connected to Tor Network"
INVALID_COMMAND = "Invalid command"

HELP_TEXT = "\n".join(
    [
        "!userstatus - Get user status",
        "!workers - Get workers",
        "!dailyrewards - Get daily rewards",
        "!poolstatus - Get pool status",
        "!subscribe <token> - Subscribe with token",
        "!unlink - Unlink account from token",
        "!checktor - Check Tor connection",
        "!help - Help",
    ]
)

_LAST_SHARE_FORMAT = "%Y-%m-%d %H:%M:%S"
_REWARD_DATE_FORMAT = "%Y-%m-%d"


def format_user_status(profile: Profile) -> str:
    lines = [
        "User Status",
        "",
        f"Reward: {format_btc_to_sats(profile.confirmed_reward)}",
        f"Unconfirmed reward: {format_btc_to_sats(profile.unconfirmed_reward)}",
        f"Estimate reward (block): {format_btc_to_sats(profile.estimated_reward)}",
        "",
        f"Hashrate 5m: {format_gh_to_th(profile.hash_rate_5m)}",
        f"Hashrate 60m: {format_gh_to_th(profile.hash_rate_60m)}",
        f"Hashrate 24h: {format_gh_to_th(profile.hash_rate_24h)}",
        f"Hashrate scoring: {format_gh_to_th(profile.hash_rate_scoring)}",
        f"Hashrate yesterday: {format_gh_to_th(profile.hash_rate_yesterday)}",
        "",
        f"Ok workers: {profile.ok_workers}",
        f"Low workers: {profile.low_workers}",
        f"Off workers: {profile.off_workers}",
        f"Disabled workers: {profile.dis_workers}",
    ]
    return "\n".join(lines)


def worker_display_name(qualified_name: str) -> str | None:
    """Strip the account prefix: "account.rig01" -> "rig01". Without a dot there is no display name."""
    _, dot, name = qualified_name.partition(".")
    return name if dot else None


def format_workers(workers: dict[str, Worker]) -> str:
    blocks = ["Workers"]
    for qualified_name in sorted(workers):
        worker = workers[qualified_name]
        lines: list[str] = []
        name = worker_display_name(qualified_name)
        if name is not None:
            lines.append(f"Worker: {name}")
        lines.extend(
            [
                f"Status: {worker.state}",
                f"Last share: {format_date(worker.last_share, _LAST_SHARE_FORMAT)}",
                f"Hashrate scoring: {format_gh_to_th(worker.hash_rate_scoring)}",
                f"Hashrate 5m: {format_gh_to_th(worker.hash_rate_5m)}",
                f"Hashrate 60m: {format_gh_to_th(worker.hash_rate_60m)}",
                f"Hashrate 24h: {format_gh_to_th(worker.hash_rate_24h)}",
            ]
        )
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def format_daily_rewards(rewards: list[DailyReward]) -> str:
    lines = [
        f"{format_date(r.date, _REWARD_DATE_FORMAT)}: {format_btc_to_sats(r.total_reward)}"
        for r in rewards
    ]
    return "\n\n".join(["Daily Rewards", "\n".join(lines)]) if lines else "Daily Rewards"


def format_pool_status(stats: PoolStats) -> str:
    lines = [
        "Pool Status",
        "",
        f"Luck 10 blocks: {format_decimal(stats.luck_b10)}",
        f"Luck 50 blocks: {format_decimal(stats.luck_b50)}",
        f"Luck 250 blocks: {format_decimal(stats.luck_b250)}",
        f"Hashrate scoring: {format_gh_to_th(stats.pool_scoring_hash_rate)}",
        f"Active workers: {format_number(stats.pool_active_workers)}",
        f"Round probability: {format_decimal(stats.round_probability)}",
    ]
    return "\n".join(lines)
