"""
Tests for calculation and history API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from fincalc.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAmortizationAPI:
    """Test /api/calculate/amortization."""

    def test_amortization(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 200000, "annual_rate": 0.055, "term_years": 30},
        )
        assert response.status_code == 200
        data = response.json()
        assert abs(data["payment"] - 1135.58) < 0.01
        assert len(data["schedule"]) == 360
        assert data["schedule"][-1]["ending_balance"] == 0

    def test_amortization_with_dates(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 1200,
                "annual_rate": 0,
                "term_years": 1,
                "start_date": "2025-03-01",
            },
        )
        data = response.json()
        assert data["schedule"][0]["payment_date"] == "2025-03-01"
        assert data["schedule"][11]["payment_date"] == "2026-02-01"

    def test_invalid_loan_returns_400(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": -5, "annual_rate": 0.05, "term_years": 30},
        )
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["kind"] == "invalid_input"
        assert detail["field"] == "principal"


class TestPayoffAPI:
    """Test /api/calculate/payoff."""

    def test_payoff_plan(self, client):
        response = client.post(
            "/api/calculate/payoff",
            json={
                "debts": [
                    {"name": "A", "balance": 1000, "apr": 0.20, "minimum_payment": 50},
                    {"name": "B", "balance": 500, "apr": 0.10, "minimum_payment": 30},
                ],
                "extra_monthly_budget": 100,
                "strategy": "avalanche",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert [event["name"] for event in data["payoff_order"]] == ["A", "B"]
        assert data["total_periods"] == data["payoff_order"][-1]["period"]

    def test_divergent_payoff_returns_422(self, client):
        response = client.post(
            "/api/calculate/payoff",
            json={
                "debts": [
                    {"name": "Card", "balance": 1000, "apr": 0.24, "minimum_payment": 10},
                ],
                "extra_monthly_budget": 0,
            },
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["kind"] == "divergent"
        assert "Card" in detail["message"]

    def test_unknown_strategy_rejected(self, client):
        response = client.post(
            "/api/calculate/payoff",
            json={
                "debts": [{"name": "A", "balance": 100, "apr": 0.1, "minimum_payment": 10}],
                "strategy": "random",
            },
        )
        assert response.status_code == 422


class TestBondAPI:
    """Test /api/calculate/bond/*."""

    def test_bond_yield(self, client):
        response = client.post(
            "/api/calculate/bond/yield",
            json={
                "price": 950,
                "face_value": 1000,
                "annual_coupon_rate": 0.05,
                "years_to_maturity": 10,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert 5.6 < data["yield_percent"] < 5.7
        assert data["approximate"] is False

    def test_unbracketed_yield_reports_estimate(self, client):
        response = client.post(
            "/api/calculate/bond/yield",
            json={
                "price": 1100,
                "face_value": 1000,
                "annual_coupon_rate": 0.02,
                "years_to_maturity": 2,
                "payments_per_year": 1,
            },
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["kind"] == "non_convergent"
        assert detail["approximate_yield_percent"] < 0
        assert "estimate only" in detail["message"]

    def test_bond_price(self, client):
        response = client.post(
            "/api/calculate/bond/price",
            json={
                "annual_yield": 0.05,
                "face_value": 1000,
                "annual_coupon_rate": 0.05,
                "years_to_maturity": 10,
            },
        )
        assert response.status_code == 200
        assert response.json()["price"] == pytest.approx(1000)


class TestSavingsGoalAPI:
    """Test /api/calculate/savings-goal."""

    def test_savings_goal(self, client):
        response = client.post(
            "/api/calculate/savings-goal",
            json={"target_amount": 10000, "periodic_contribution": 200, "annual_rate": 0.05},
        )
        assert response.status_code == 200
        data = response.json()
        assert 44 <= data["periods"] <= 46
        assert data["years"] * 12 + data["months"] == data["periods"]
        assert data["final_balance"] >= 10000

    def test_unreachable_goal(self, client):
        response = client.post(
            "/api/calculate/savings-goal",
            json={"target_amount": 10000, "periodic_contribution": 0, "annual_rate": 0},
        )
        assert response.status_code == 422
        assert response.json()["detail"]["kind"] == "unreachable"


class TestHistoryAPI:
    """Test calculation history recording."""

    def test_successful_calculations_are_recorded(self, client):
        client.post(
            "/api/calculate/amortization",
            json={"principal": 1200, "annual_rate": 0, "term_years": 1},
        )
        client.post(
            "/api/calculate/savings-goal",
            json={"target_amount": 1000, "periodic_contribution": 100, "annual_rate": 0},
        )

        response = client.get("/api/history")
        assert response.status_code == 200
        entries = response.json()
        assert [entry["calculator"] for entry in entries] == ["savings-goal", "amortization"]
        assert "Loan Amount: $1,200.00" in entries[1]["input"]
        assert "Payment: $100.00" in entries[1]["result"]
        assert "10 months" in entries[0]["result"]

    def test_failed_calculations_are_not_recorded(self, client):
        client.post(
            "/api/calculate/amortization",
            json={"principal": 0, "annual_rate": 0.05, "term_years": 30},
        )
        assert client.get("/api/history").json() == []

    def test_clear_history(self, client):
        client.post(
            "/api/calculate/amortization",
            json={"principal": 1200, "annual_rate": 0, "term_years": 1},
        )
        assert client.delete("/api/history").status_code == 204
        assert client.get("/api/history").json() == []
