"""Tests for the Redis-backed key-value store."""

import unittest
from unittest.mock import Mock, patch

import redis

from keepup._store.redis_store import DEFAULT_SOCKET_TIMEOUT, RedisStore
from keepup.exceptions import StoreReadError, StoreWriteError


class TestRedisStore(unittest.TestCase):
    """Test RedisStore against a mocked client."""

    def setUp(self):
        self.client = Mock()
        self.store = RedisStore(self.client)

    def test_set_uses_expiry(self):
        self.store.set("key", "value", 604800)
        self.client.set.assert_called_once_with("key", "value", ex=604800)

    def test_set_failure_raises_store_write_error(self):
        self.client.set.side_effect = redis.ConnectionError("refused")
        with self.assertRaises(StoreWriteError):
            self.store.set("key", "value", 10)

    def test_get_missing_returns_none(self):
        self.client.get.return_value = None
        self.assertIsNone(self.store.get("missing"))

    def test_get_decodes_bytes(self):
        self.client.get.return_value = b'{"a": 1}'
        self.assertEqual(self.store.get("key"), '{"a": 1}')

    def test_get_failure_raises_store_read_error(self):
        self.client.get.side_effect = redis.TimeoutError("slow")
        with self.assertRaises(StoreReadError):
            self.store.get("key")

    def test_scan_keys(self):
        self.client.scan_iter.return_value = iter(["a", b"b"])
        self.assertEqual(list(self.store.scan_keys()), ["a", "b"])
        self.client.scan_iter.assert_called_once_with(match="*")

    def test_scan_failure_raises_store_read_error(self):
        self.client.scan_iter.side_effect = redis.ConnectionError("refused")
        with self.assertRaises(StoreReadError):
            list(self.store.scan_keys())

    def test_ping(self):
        self.client.ping.return_value = True
        self.assertTrue(self.store.ping())
        self.client.ping.side_effect = redis.ConnectionError("refused")
        self.assertFalse(self.store.ping())

    @patch("keepup._store.redis_store.redis.Redis")
    def test_from_config(self, mock_redis):
        RedisStore.from_config("redis.local", 6380, db=2)
        mock_redis.assert_called_once_with(
            host="redis.local",
            port=6380,
            db=2,
            socket_timeout=DEFAULT_SOCKET_TIMEOUT,
            socket_connect_timeout=DEFAULT_SOCKET_TIMEOUT,
            decode_responses=True,
        )


if __name__ == "__main__":
    unittest.main()
