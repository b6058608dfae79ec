import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from fetchproxy.app.settings import Settings


class SettingsTests(unittest.TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            s = Settings(_env_file=None)
        self.assertEqual(s.rate_limit, 30)
        self.assertEqual(s.rate_window_ms, 60_000)
        self.assertEqual(s.max_size_bytes, 5 * 1024 * 1024)
        self.assertEqual(s.fetch_timeout_ms, 8_000)
        self.assertEqual(s.cache_ttl_ms, 300_000)
        self.assertEqual(s.sweep_interval_ms, 60_000)
        self.assertFalse(s.stream_size_cap)

    def test_environment_overrides(self):
        env = {"FETCH_PROXY_RATE_LIMIT": "5", "FETCH_PROXY_FETCH_TIMEOUT_MS": "2500", "FETCH_PROXY_STREAM_SIZE_CAP": "true"}
        with patch.dict(os.environ, env, clear=True):
            s = Settings(_env_file=None)
        self.assertEqual(s.rate_limit, 5)
        self.assertEqual(s.fetch_timeout_ms, 2500)
        self.assertTrue(s.stream_size_cap)

    def test_rejects_non_positive_limits(self):
        with patch.dict(os.environ, {"FETCH_PROXY_CACHE_TTL_MS": "0"}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)


if __name__ == "__main__":
    unittest.main()
