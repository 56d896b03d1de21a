from __future__ import annotations

MAY = {"month": 5, "year": 2024}


def _seed(client, headers) -> str:
    for amount, category, day in (
        (100, "food", "2024-05-01"),
        (50, "food", "2024-05-02"),
        (200, "transport", "2024-05-02"),
    ):
        client.post(
            "/expenses",
            json={"amount": amount, "category": category, "expense_date": day},
            headers=headers,
        )
    client.post(
        "/budgets",
        json={"amount": 1000, "budget_date": "2024-05-01", "description": "salary"},
        headers=headers,
    )
    wallet = client.post(
        "/wallets",
        json={"wallet_type": "nagad", "wallet_name": "Daily", "initial_balance": 500},
        headers=headers,
    ).json()
    client.post(
        "/wallets/transactions",
        json={
            "wallet_id": wallet["id"],
            "transaction_type": "withdraw",
            "amount": 120,
            "transaction_date": "2024-05-02",
            "description": "groceries",
        },
        headers=headers,
    )
    return wallet["id"]


def test_expense_report(client, auth_headers) -> None:
    _seed(client, auth_headers)
    report = client.get("/reports/expenses", params=MAY, headers=auth_headers).json()
    assert report["total"] == 350
    assert report["count"] == 3
    assert report["category_totals"] == {"food": 150, "transport": 200}
    assert report["title"] == "Expense report May 2024"
    assert {r["category_label"] for r in report["rows"]} == {"Food", "Transport"}

    one_day = client.get(
        "/reports/expenses", params={**MAY, "date": "2024-05-02"}, headers=auth_headers
    ).json()
    assert one_day["total"] == 250
    assert one_day["filter_date"] == "2024-05-02"


def test_budget_report(client, auth_headers) -> None:
    _seed(client, auth_headers)
    report = client.get("/reports/budget", params=MAY, headers=auth_headers).json()
    assert report["total_budget"] == 1000
    assert report["total_expense"] == 350
    assert report["remaining"] == 650
    assert report["rows"][0]["description"] == "salary"


def test_wallet_report(client, auth_headers) -> None:
    wallet_id = _seed(client, auth_headers)
    report = client.get("/reports/wallets", headers=auth_headers).json()
    assert report["total_deposit"] == 500
    assert report["total_withdraw"] == 120
    assert report["net"] == 380
    assert {r["wallet_name"] for r in report["rows"]} == {"Daily"}

    only = client.get(
        "/reports/wallets",
        params={"wallet_id": wallet_id, "transaction_type": "withdraw"},
        headers=auth_headers,
    ).json()
    assert [r["description"] for r in only["rows"]] == ["groceries"]
    assert only["net"] == -120


def test_printable_reports_render_html(client, auth_headers) -> None:
    _seed(client, auth_headers)
    r = client.get("/reports/expenses/print", params=MAY, headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "Expense report May 2024" in r.text
    assert "৳350" in r.text

    budget = client.get("/reports/budget/print", params=MAY, headers=auth_headers).text
    assert "৳650" in budget

    wallets = client.get("/reports/wallets/print", headers=auth_headers).text
    assert "Daily (Nagad)" in wallets
    assert "groceries" in wallets


def test_printable_report_escapes_descriptions(client, auth_headers) -> None:
    client.post(
        "/expenses",
        json={
            "amount": 5,
            "category": "other",
            "expense_date": "2024-05-01",
            "description": "<script>x</script>",
        },
        headers=auth_headers,
    )
    html = client.get("/reports/expenses/print", params=MAY, headers=auth_headers).text
    assert "<script>x</script>" not in html
    assert "&lt;script&gt;" in html
