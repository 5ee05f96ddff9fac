import unittest
from datetime import date

from fastapi.testclient import TestClient

from networth.api.routes import get_performance_service
from networth.main import create_app
from networth.pipeline.orchestrator import PerformanceService

from fakes import FakePrices, FakeStores, history

USER = "user-1"
P1 = "11111111-1111-1111-1111-111111111111"
P2 = "22222222-2222-2222-2222-222222222222"
FOREIGN = "33333333-3333-3333-3333-333333333333"


class DashboardPerformanceApiTests(unittest.TestCase):
    def setUp(self):
        self.stores = FakeStores()
        self.stores.add_portfolio(USER, P1, "ISA", holdings=[("AAA", 10)])
        self.stores.add_portfolio(USER, P2, "Savings", cash=[250.0])
        self.stores.add_portfolio("someone-else", FOREIGN, "Theirs", cash=[1.0])
        self.prices = FakePrices({"AAA": history(("2024-01-01", 100.0), ("2024-01-03", 110.0))})
        self.time_budget = 10.0
        self.app = create_app(price_provider=self.prices)
        self.app.dependency_overrides[get_performance_service] = lambda: PerformanceService(
            self.stores,
            self.stores,
            self.stores,
            self.app.state.price_provider,
            time_budget=self.time_budget,
            today=lambda: date(2024, 1, 3),
        )
        # No context manager: the lifespan (DB migration) is not needed with fake stores.
        self.client = TestClient(self.app)

    def _get(self, headers=None, **params):
        headers = {"X-User-Id": USER} if headers is None else headers
        return self.client.get("/dashboard/performance", params=params, headers=headers)

    def test_full_response_shape(self):
        resp = self._get(period="daily", start_date="2024-01-01", end_date="2024-01-03")
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["period"], "daily")
        self.assertEqual(
            body["data_points"],
            [
                {"date": "2024-01-01", "value": 1250.0},
                {"date": "2024-01-02", "value": 1250.0},
                {"date": "2024-01-03", "value": 1350.0},
            ],
        )
        self.assertEqual(body["start_value"], 1250.0)
        self.assertEqual(body["end_value"], 1350.0)
        self.assertEqual(body["change"], 100.0)
        self.assertAlmostEqual(body["change_pct"], 8.0)
        self.assertEqual([p["name"] for p in body["portfolios"]], ["ISA", "Savings"])
        self.assertEqual(
            set(body["portfolios"][0]),
            {"id", "name", "data_points", "start_value", "end_value", "change", "change_pct"},
        )

    def test_period_defaults_to_daily(self):
        resp = self._get()
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["period"], "daily")

    def test_filtered_request_omits_portfolios_key(self):
        resp = self._get(portfolio_id=P2, period="monthly", start_date="2024-01-01", end_date="2024-01-03")
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertNotIn("portfolios", body)
        self.assertEqual(body["data_points"], [{"date": "2024-01", "value": 250.0}])

    def test_validation_errors_are_400(self):
        for params in (
            {"period": "fortnightly"},
            {"start_date": "01-01-2024"},
            {"end_date": "2024-13-01"},
            {"portfolio_id": "abc"},
            {"start_date": "2024-02-01", "end_date": "2024-01-01"},
        ):
            resp = self._get(**params)
            self.assertEqual(resp.status_code, 400, params)
            self.assertIn("detail", resp.json())
        self.assertEqual(self.prices.calls, [])

    def test_invalid_period_message(self):
        resp = self._get(period="hourly")
        self.assertEqual(resp.json()["detail"], "Invalid period. Use: daily, weekly, monthly, yearly")

    def test_foreign_portfolio_is_403(self):
        resp = self._get(portfolio_id=FOREIGN)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Access denied")

    def test_missing_user_is_401(self):
        resp = self._get(headers={})
        self.assertEqual(resp.status_code, 401)

    def test_time_budget_exceeded_is_504(self):
        self.prices.slow.add("AAA")
        self.prices.delay = 1.0
        self.time_budget = 0.2
        resp = self._get(period="daily")
        self.assertEqual(resp.status_code, 504)


if __name__ == "__main__":
    unittest.main()
