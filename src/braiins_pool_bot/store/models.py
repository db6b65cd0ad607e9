from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionRecord:
    owner_user_id: str
    access_token: str
    device_id: str

    def __repr__(self) -> str:
        return f"SessionRecord(owner_user_id={self.owner_user_id!r}, device_id={self.device_id!r})"


@dataclass(frozen=True)
class SubscriptionRecord:
    user_id: str
    room_id: str
    api_token: str

    def __repr__(self) -> str:
        return f"SubscriptionRecord(user_id={self.user_id!r}, room_id={self.room_id!r})"
