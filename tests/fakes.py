from __future__ import annotations

from braiins_pool_bot.pool.pool_api import DailyReward, PoolStats, Profile, Worker
from braiins_pool_bot.transport.chat_transport import InboundMessage, LoginResult, RoomMembership

BOT_USER = "@bot:example.org"
ALICE = "@alice:example.org"
ROOM_A = "!roomA:example.org"
ROOM_B = "!roomB:example.org"


def make_message(
    body: str,
    *,
    sender: str = ALICE,
    room_id: str = ROOM_A,
    event_id: str = "$event1",
    is_text: bool = True,
    membership: RoomMembership = RoomMembership.JOINED,
) -> InboundMessage:
    return InboundMessage(
        sender=sender,
        room_id=room_id,
        body=body,
        event_id=event_id,
        is_text=is_text,
        membership=membership,
    )


def sample_profile() -> Profile:
    return Profile(
        confirmed_reward=0.0123,
        unconfirmed_reward=0.00000001,
        estimated_reward=0.001,
        hash_rate_5m=110_000.0,
        hash_rate_60m=105_500.0,
        hash_rate_24h=100_000.0,
        hash_rate_scoring=99_999.0,
        hash_rate_yesterday=1_000_000.0,
        ok_workers=2,
        low_workers=0,
        off_workers=1,
        dis_workers=0,
    )


def sample_workers() -> dict[str, Worker]:
    return {
        "alice.rig02": Worker(
            state="off",
            last_share=1646649012,
            hash_rate_scoring=0.0,
            hash_rate_5m=0.0,
            hash_rate_60m=0.0,
            hash_rate_24h=2_000.0,
        ),
        "alice.rig01": Worker(
            state="ok",
            last_share=0,
            hash_rate_scoring=55_000.0,
            hash_rate_5m=56_000.0,
            hash_rate_60m=54_000.0,
            hash_rate_24h=53_000.0,
        ),
    }


def sample_rewards() -> list[DailyReward]:
    return [
        DailyReward(date=1646611200, total_reward=0.00012345),
        DailyReward(date=1646524800, total_reward=0.0),
    ]


def sample_pool_stats() -> PoolStats:
    return PoolStats(
        luck_b10=0.83,
        luck_b50=1.02,
        luck_b250=0.97,
        pool_scoring_hash_rate=5_820_970_883.3011,
        pool_active_workers=180_000,
        round_probability=0.42,
    )


class FakePoolClient:
    def __init__(self, *, error: Exception | None = None, is_tor: bool = True) -> None:
        self.calls: list[str] = []
        self._error = error
        self._is_tor = is_tor

    async def fetch_profile(self) -> Profile:
        return self._call("fetch_profile", sample_profile())

    async def fetch_workers(self) -> dict[str, Worker]:
        return self._call("fetch_workers", sample_workers())

    async def fetch_daily_rewards(self) -> list[DailyReward]:
        return self._call("fetch_daily_rewards", sample_rewards())

    async def fetch_pool_stats(self) -> PoolStats:
        return self._call("fetch_pool_stats", sample_pool_stats())

    async def check_tor_connection(self) -> bool:
        return self._call("check_tor_connection", self._is_tor)

    def _call(self, name: str, result):
        self.calls.append(name)
        if self._error is not None:
            raise self._error
        return result


class FakePoolClientFactory:
    def __init__(self, client: FakePoolClient | None = None) -> None:
        self.client = client or FakePoolClient()
        self.tokens: list[str] = []

    def __call__(self, token: str) -> FakePoolClient:
        self.tokens.append(token)
        return self.client


class FakeTransport:
    def __init__(
        self,
        *,
        login_result: LoginResult | None = None,
        login_error: Exception | None = None,
        resume_error: Exception | None = None,
        send_error: Exception | None = None,
        redact_error: Exception | None = None,
        join_error: Exception | None = None,
    ) -> None:
        self.login_result = login_result
        self.login_error = login_error
        self.resume_error = resume_error
        self.send_error = send_error
        self.redact_error = redact_error
        self.join_error = join_error
        self.login_calls: list[tuple[str, str, str]] = []
        self.resume_calls: list[tuple[str, str, str]] = []
        self.sent: list[tuple[str, str]] = []
        self.redactions: list[tuple[str, str]] = []
        self.joined: list[str] = []
        self.display_names: list[str] = []
        self.handlers = None
        self.closed = False

    async def login(self, user_id: str, password: str, device_name: str) -> LoginResult:
        self.login_calls.append((user_id, password, device_name))
        if self.login_error is not None:
            raise self.login_error
        return self.login_result or LoginResult(user_id=user_id, access_token="syt_token", device_id="DEVICE1")

    async def resume(self, access_token: str, device_id: str, user_id: str) -> None:
        self.resume_calls.append((access_token, device_id, user_id))
        if self.resume_error is not None:
            raise self.resume_error

    async def set_display_name(self, name: str) -> None:
        self.display_names.append(name)

    async def send_text(self, room_id: str, text: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((room_id, text))

    async def redact(self, room_id: str, event_id: str) -> None:
        if self.redact_error is not None:
            raise self.redact_error
        self.redactions.append((room_id, event_id))

    async def join_room(self, room_id: str) -> None:
        if self.join_error is not None:
            raise self.join_error
        self.joined.append(room_id)

    async def run(self, on_message, on_invite) -> None:
        self.handlers = (on_message, on_invite)

    async def close(self) -> None:
        self.closed = True
