import unittest

from braiins_pool_bot.errors import StoreError
from braiins_pool_bot.store import KeyValueStore


class KeyValueStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._kv = KeyValueStore(":memory:", ("users", "sessions"))

    def tearDown(self) -> None:
        self._kv.close()

    def test_get_missing_key_returns_none(self) -> None:
        self.assertIsNone(self._kv.get("users", "nobody"))

    def test_put_then_get(self) -> None:
        self._kv.put("users", "k", "v1")
        self.assertEqual("v1", self._kv.get("users", "k"))

    def test_put_replaces_existing_value(self) -> None:
        self._kv.put("users", "k", "v1")
        self._kv.put("users", "k", "v2")
        self.assertEqual("v2", self._kv.get("users", "k"))

    def test_same_key_in_other_partition_is_separate(self) -> None:
        self._kv.put("users", "k", "user-value")
        self._kv.put("sessions", "k", "session-value")
        self.assertEqual("user-value", self._kv.get("users", "k"))
        self.assertEqual("session-value", self._kv.get("sessions", "k"))

    def test_delete(self) -> None:
        self._kv.put("users", "k", "v")
        self.assertTrue(self._kv.delete("users", "k"))
        self.assertFalse(self._kv.delete("users", "k"))
        self.assertIsNone(self._kv.get("users", "k"))

    def test_unknown_partition_rejected(self) -> None:
        with self.assertRaises(StoreError):
            self._kv.put("other", "k", "v")

    def test_closed_store_raises_store_error(self) -> None:
        self._kv.close()
        with self.assertRaises(StoreError):
            self._kv.get("users", "k")
        self._kv = KeyValueStore(":memory:")

    def test_unopenable_path_raises_store_error(self) -> None:
        with self.assertRaises(StoreError):
            KeyValueStore("/dev/null/not-a-dir/db.sqlite3")


if __name__ == "__main__":
    unittest.main()
