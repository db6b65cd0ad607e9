from __future__ import annotations

import json

from braiins_pool_bot.errors import StoreError
from braiins_pool_bot.store.kv_store import KeyValueStore
from braiins_pool_bot.store.models import SessionRecord, SubscriptionRecord

SESSION_PARTITION = "session"
SUBSCRIPTION_PARTITION = "subscription"

PARTITIONS = (SESSION_PARTITION, SUBSCRIPTION_PARTITION)


class BotStore:
    """Typed access to the session and subscription partitions.

    Lookups return ``None`` when no record exists. Any other failure,
    including a record that no longer decodes, raises ``StoreError``.
    """

    def __init__(self, kv: KeyValueStore):
        self._kv = kv

    @classmethod
    def open(cls, db_path: str) -> BotStore:
        return cls(KeyValueStore(db_path, PARTITIONS))

    def close(self) -> None:
        self._kv.close()

    # -- sessions --

    def create_session(self, user_id: str, access_token: str, device_id: str) -> SessionRecord:
        record = SessionRecord(owner_user_id=user_id, access_token=access_token, device_id=device_id)
        self._kv.put(
            SESSION_PARTITION,
            user_id,
            _dump({"access_token": access_token, "device_id": device_id}),
        )
        return record

    def get_session(self, user_id: str) -> SessionRecord | None:
        data = self._load(SESSION_PARTITION, user_id)
        if data is None:
            return None
        return SessionRecord(
            owner_user_id=user_id,
            access_token=_field(data, "access_token"),
            device_id=_field(data, "device_id"),
        )

    def delete_session(self, user_id: str) -> bool:
        return self._kv.delete(SESSION_PARTITION, user_id)

    # -- subscriptions --

    def create_subscription(self, user_id: str, room_id: str, api_token: str) -> SubscriptionRecord:
        record = SubscriptionRecord(user_id=user_id, room_id=room_id, api_token=api_token)
        self._kv.put(
            SUBSCRIPTION_PARTITION,
            user_id,
            _dump({"room_id": room_id, "token": api_token}),
        )
        return record

    def get_subscription(self, user_id: str) -> SubscriptionRecord | None:
        data = self._load(SUBSCRIPTION_PARTITION, user_id)
        if data is None:
            return None
        return SubscriptionRecord(
            user_id=user_id,
            room_id=_field(data, "room_id"),
            api_token=_field(data, "token"),
        )

    def delete_subscription(self, user_id: str) -> bool:
        return self._kv.delete(SUBSCRIPTION_PARTITION, user_id)

    def _load(self, partition: str, key: str) -> dict | None:
        raw = self._kv.get(partition, key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as ex:
            raise StoreError(f"Corrupt {partition} record for {key}") from ex
        if not isinstance(data, dict):
            raise StoreError(f"Corrupt {partition} record for {key}")
        return data


def _dump(data: dict) -> str:
    return json.dumps(data, ensure_ascii=True)


def _field(data: dict, name: str) -> str:
    value = data.get(name)
    if not isinstance(value, str):
        raise StoreError(f"Record is missing field {name!r}")
    return value
