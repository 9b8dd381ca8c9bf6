from __future__ import annotations

import unittest

from tests.unit._bootstrap import ensure_project_on_path


ensure_project_on_path()


class TestCache(unittest.TestCase):
    def test_inmemory_cache_set_get(self) -> None:
        from services.cache import InMemoryCache

        c = InMemoryCache(max_items=2)
        c.set("a", 1)
        self.assertEqual(c.get("a"), 1)
        self.assertIsNone(c.get("missing"))
        stats = c.stats()
        self.assertEqual((stats.hits, stats.misses, stats.size), (1, 1, 1))

    def test_lru_eviction(self) -> None:
        from services.cache import InMemoryCache

        c = InMemoryCache(max_items=2)
        c.set("a", 1)
        c.set("b", 2)
        c.get("a")
        c.set("c", 3)
        self.assertIsNone(c.get("b"))
        self.assertEqual(c.get("a"), 1)
        self.assertEqual(len(c), 2)

    def test_make_cache_key_is_stable(self) -> None:
        from services.cache import make_cache_key

        k1 = make_cache_key(namespace="x", version="v1", payload={"a": 1, "b": 2})
        k2 = make_cache_key(namespace="x", version="v1", payload={"b": 2, "a": 1})
        self.assertEqual(k1, k2)
        self.assertTrue(k1.startswith("x:"))

    def test_inmemory_cache_ttl_expires(self) -> None:
        from services.cache import InMemoryCache

        c = InMemoryCache(max_items=2)
        c.set("a", 1, ttl_s=0)
        self.assertIsNone(c.get("a"))

        d = InMemoryCache(max_items=2, default_ttl_s=0)
        d.set("a", 1)
        self.assertIsNone(d.get("a"))

    def test_namespaced_keys(self) -> None:
        from services.cache import crime_grade_key, income_latest_key

        self.assertEqual(income_latest_key("75201"), "income:latest:75201")
        self.assertEqual(crime_grade_key("75201"), "crime:grade:75201")


if __name__ == "__main__":
    unittest.main()
