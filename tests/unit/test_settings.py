from __future__ import annotations

import unittest

from tests.unit._bootstrap import ensure_project_on_path


ensure_project_on_path()


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        from services.settings import Settings

        settings = Settings.from_env({})
        self.assertEqual(settings.api_base_url, "http://localhost:8080")
        self.assertEqual(settings.max_samples, 3)
        self.assertEqual(settings.lookback_years, 6)
        self.assertIsNone(settings.current_year)

    def test_env_overrides(self) -> None:
        from services.settings import Settings

        settings = Settings.from_env(
            {
                "ZIPSCOPE_API_BASE_URL": "http://income.internal:9000",
                "ZIPSCOPE_MAX_SAMPLES": "5",
                "ZIPSCOPE_LOOKBACK_YEARS": "10",
                "ZIPSCOPE_CURRENT_YEAR": "2023",
                "ZIPSCOPE_HTTP_TIMEOUT_S": "2.5",
            }
        )
        config = settings.fetch_config()
        self.assertEqual((config.max_samples, config.lookback_years, config.current_year), (5, 10, 2023))
        self.assertEqual(settings.http_timeout_s, 2.5)
        self.assertEqual(settings.api_base_url, "http://income.internal:9000")

    def test_walk_caps_reach_fetch_config(self) -> None:
        from services.settings import Settings

        defaults = Settings.from_env({}).fetch_config()
        self.assertEqual((defaults.max_samples_limit, defaults.max_lookback_years), (10, 10))

        config = Settings.from_env(
            {"ZIPSCOPE_MAX_SAMPLES_LIMIT": "4", "ZIPSCOPE_MAX_LOOKBACK_YEARS": "20"}
        ).fetch_config()
        self.assertEqual((config.max_samples_limit, config.max_lookback_years), (4, 20))

    def test_invalid_integer(self) -> None:
        from services.settings import Settings

        with self.assertRaises(ValueError) as ctx:
            Settings.from_env({"ZIPSCOPE_MAX_SAMPLES": "three"})
        self.assertIn("ZIPSCOPE_MAX_SAMPLES", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
