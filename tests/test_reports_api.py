"""
Tests for GET /reports/financial.

The client fixture pins "now" to 15 March 2025, so:
  ytd  = 1 Jul 2024 - 15 Mar 2025
  fy-1 = 1 Jul 2023 - 30 Jun 2024 (FY 2024)
  fy-2 = 1 Jul 2022 - 30 Jun 2023 (FY 2023)
"""

import pytest_asyncio

STATEMENT = (
    "01/06/2024,-40.00,Trophy shop\n"
    "02/06/2024,100.00,Sponsorship ABC\n"
    "01/08/2024,250.00,TidyHQ payout\n"
    "03/08/2024,-30.00,Flowers\n"
)


@pytest_asyncio.fixture
async def imported(client):
    response = await client.post(
        "/ledger/import",
        params={"type": "BANK", "currentBalance": "380.00"},
        content=STATEMENT,
    )
    assert response.status_code == 200
    return response.json()


class TestFinancialReport:
    """Tests for the report endpoint."""

    async def test_last_financial_year(self, client, imported):
        response = await client.get("/reports/financial", params={"period": "fy-1"})
        assert response.status_code == 200
        report = response.json()

        assert report["period"] == "fy-1"
        assert report["label"] == "FY 2024"
        assert report["range"] == "1 Jul 2023 - 30 Jun 2024"
        assert report["asAt"] == "As at 30 Jun 2024"

        statement = report["statement"]
        assert statement["income"] == [{"label": "Sponsorship", "amount": 100.0}]
        assert statement["expenditure"] == [{"label": "Equipment", "amount": 40.0}]
        assert statement["totalIncome"] == 100.0
        assert statement["totalExpenditure"] == 40.0
        assert statement["netResult"] == 60.0

        sheet = report["balanceSheet"]
        assert sheet["assets"] == [{"label": "Bank account", "amount": 160.0}]
        assert sheet["liabilities"] == []
        assert sheet["totalAssets"] == 160.0
        assert sheet["equity"] == 160.0
        assert sheet["equityLabel"] == "Accumulated funds"

        assert [note["title"] for note in report["notes"]] == [
            "Bank accounts", "Grants", "Loans", "Trust money",
        ]
        assert report["notes"][0]["details"][0] == "Bank account: $160.00"

    async def test_year_to_date_is_default(self, client, imported):
        response = await client.get("/reports/financial")
        report = response.json()

        assert report["period"] == "ytd"
        assert report["label"] == "Current YTD"
        assert report["range"] == "1 Jul 2024 - 15 Mar 2025"
        assert report["statement"]["income"] == [{"label": "Membership", "amount": 250.0}]
        assert report["statement"]["expenditure"] == [{"label": "Equipment", "amount": 30.0}]
        assert report["balanceSheet"]["totalAssets"] == 380.0

    async def test_year_before_any_data(self, client, imported):
        report = (await client.get("/reports/financial", params={"period": "fy-2"})).json()

        assert report["label"] == "FY 2023"
        assert report["statement"]["totalIncome"] == 0.0
        assert report["balanceSheet"]["assets"] == []
        assert report["notes"][0]["details"] == ["No ledger balances available for the period."]

    async def test_empty_store(self, client):
        response = await client.get("/reports/financial", params={"period": "fy-1"})
        assert response.status_code == 200
        assert response.json()["balanceSheet"]["equity"] == 0.0

    async def test_unknown_period(self, client):
        response = await client.get("/reports/financial", params={"period": "fy-5"})
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_period"
