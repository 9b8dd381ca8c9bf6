from __future__ import annotations

import unittest

from tests.unit._bootstrap import ensure_project_on_path


ensure_project_on_path()


def _transport(handler):
    import httpx

    from services.transport import HttpxTransport

    return HttpxTransport("http://data.test/", timeout_s=1.0, transport=httpx.MockTransport(handler))


class TestHttpxTransport(unittest.TestCase):
    def test_outcome_classification(self) -> None:
        import httpx

        from services.transport import Failure, NotFound, QuotaExceeded, Success

        routes = {
            "/ok": httpx.Response(200, json={"data": {"totalHouseholdMedianIncome": 71000}}),
            "/flagged": httpx.Response(200, json={"status": "not_found"}),
            "/missing": httpx.Response(404, json={"detail": "nope"}),
            "/forbidden": httpx.Response(403),
            "/throttled": httpx.Response(429),
            "/boom": httpx.Response(500, text="oops"),
            "/garbage": httpx.Response(200, text="<html>not json</html>"),
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return routes[request.url.path]

        with _transport(handler) as transport:
            self.assertEqual(
                transport.get("/ok"),
                Success(payload={"data": {"totalHouseholdMedianIncome": 71000}}),
            )
            self.assertIsInstance(transport.get("/flagged"), NotFound)
            self.assertIsInstance(transport.get("/missing"), NotFound)
            self.assertEqual(transport.get("/forbidden"), QuotaExceeded(status_code=403))
            self.assertEqual(transport.get("/throttled"), QuotaExceeded(status_code=429))
            self.assertIsInstance(transport.get("/boom"), Failure)
            self.assertIsInstance(transport.get("/garbage"), Failure)

    def test_timeout_and_network_errors_are_failures(self) -> None:
        import httpx

        from services.transport import Failure

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/slow":
                raise httpx.ReadTimeout("timed out", request=request)
            raise httpx.ConnectError("connection refused", request=request)

        with _transport(handler) as transport:
            slow = transport.get("/slow")
            self.assertIsInstance(slow, Failure)
            self.assertIn("timeout", slow.error)
            self.assertIsInstance(transport.get("/down"), Failure)

    def test_walk_over_http(self) -> None:
        import httpx

        from services.income_fetcher import HistoricalSeriesFetcher

        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            year = int(request.url.path.split("/")[2])
            if year == 2023:
                return httpx.Response(200, json={"status": "not_found"})
            if year == 2021:
                return httpx.Response(403)
            return httpx.Response(200, json={"data": {"totalHouseholdMedianIncome": 50000 + year}})

        with _transport(handler) as transport:
            result = HistoricalSeriesFetcher(transport).fetch("75201", current_year=2023, max_samples=3, min_year=2017)

        self.assertEqual(seen, ["/median-income/2023/75201", "/median-income/2022/75201", "/median-income/2021/75201"])
        self.assertEqual([(r.year, r.value) for r in result], [(2022, 52022.0)])
        self.assertTrue(result.stopped_on_quota)


if __name__ == "__main__":
    unittest.main()
