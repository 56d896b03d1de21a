"""End-to-end walk through the API against a throwaway database.

Prints the interesting responses as JSON; exits non-zero on the first
unexpected status code.
"""

from cashbook.main import create_app
from cashbook.core.config import Settings
from fastapi.testclient import TestClient
from pathlib import Path
import tempfile
import json
import sys


def _check(resp, expected: int, label: str):
    if resp.status_code != expected:
        print(f"{label}: expected {expected}, got {resp.status_code}: {resp.text}")
        sys.exit(1)
    return resp.json() if resp.content and "json" in resp.headers.get("content-type", "") else None


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(data_dir=Path(d), db_path=Path(d) / "smoke.sqlite3", debug=False)
        settings.init_post_load()
        client = TestClient(create_app(settings_override=settings))

        session = _check(
            client.post("/auth/signup", json={"email": "smoke@example.com", "password": "smoke123"}),
            201,
            "signup",
        )
        h = {"Authorization": f"Bearer {session['access_token']}"}
        month = {"month": 5, "year": 2024}

        results = {}
        for amount, category, day in ((100, "food", "2024-05-01"), (200, "transport", "2024-05-02")):
            _check(
                client.post(
                    "/expenses",
                    json={"amount": amount, "category": category, "expense_date": day},
                    headers=h,
                ),
                201,
                "add expense",
            )
        _check(
            client.post("/budgets", json={"amount": 1000, "budget_date": "2024-05-01"}, headers=h),
            201,
            "add budget",
        )
        wallet = _check(
            client.post(
                "/wallets",
                json={"wallet_type": "bkash", "wallet_name": "Pocket", "initial_balance": 300},
                headers=h,
            ),
            201,
            "add wallet",
        )
        _check(
            client.post(
                "/wallets/transactions",
                json={
                    "wallet_id": wallet["id"],
                    "transaction_type": "withdraw",
                    "amount": 450,
                    "transaction_date": "2024-05-03",
                },
                headers=h,
            ),
            201,
            "add transaction",
        )
        _check(client.put("/preferences", json={"budget_limit": 250}, headers=h), 200, "prefs")

        results["summary"] = _check(client.get("/analytics/summary", params=month, headers=h), 200, "summary")
        results["breakdown"] = _check(
            client.get("/analytics/category-breakdown", params=month, headers=h), 200, "breakdown"
        )
        results["wallets"] = _check(client.get("/wallets/summary", headers=h), 200, "wallets")
        results["alert"] = _check(client.get("/preferences/alert", params=month, headers=h), 200, "alert")
        results["expense_report"] = _check(
            client.get("/reports/expenses", params=month, headers=h), 200, "report"
        )
        printable = client.get("/reports/wallets/print", headers=h)
        results["wallet_print_bytes"] = len(printable.content)
        print(json.dumps(results, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    run()
