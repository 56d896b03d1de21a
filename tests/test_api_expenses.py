from __future__ import annotations

from cashbook.models.constants import MAX_AMOUNT

MAY = {"month": 5, "year": 2024}


def _add(client, headers, amount, category="food", day="2024-05-01", description=None):
    r = client.post(
        "/expenses",
        json={
            "amount": amount,
            "category": category,
            "expense_date": day,
            "description": description,
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_create_and_list_month(client, auth_headers) -> None:
    _add(client, auth_headers, 100)
    _add(client, auth_headers, 50, day="2024-05-02")
    _add(client, auth_headers, 200, "transport", day="2024-06-01")

    r = client.get("/expenses", params=MAY, headers=auth_headers)
    assert r.status_code == 200
    rows = r.json()
    assert [e["amount"] for e in rows] == [50, 100]  # newest first
    assert rows[0]["expense_date"] == "2024-05-02"

    r = client.get("/expenses", params={**MAY, "date": "2024-05-01"}, headers=auth_headers)
    assert [e["amount"] for e in r.json()] == [100]


def test_expense_validation(client, auth_headers) -> None:
    bad_amount = {"amount": 0, "category": "food", "expense_date": "2024-05-01"}
    assert client.post("/expenses", json=bad_amount, headers=auth_headers).status_code == 422
    bad_category = {"amount": 5, "category": "travel", "expense_date": "2024-05-01"}
    assert client.post("/expenses", json=bad_category, headers=auth_headers).status_code == 422
    r = client.get("/expenses", params={"month": 13}, headers=auth_headers)
    assert r.status_code == 422


def test_blank_description_is_stored_as_null(client, auth_headers) -> None:
    created = _add(client, auth_headers, 10, description="   ")
    assert created["description"] is None


def test_edit_moves_expense_between_months(client, auth_headers) -> None:
    created = _add(client, auth_headers, 100)
    # warm the cache for both months
    assert len(client.get("/expenses", params=MAY, headers=auth_headers).json()) == 1
    assert client.get("/expenses", params={"month": 6, "year": 2024}, headers=auth_headers).json() == []

    r = client.patch(
        f"/expenses/{created['id']}",
        json={"expense_date": "2024-06-03", "amount": 120},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json()["amount"] == 120
    assert client.get("/expenses", params=MAY, headers=auth_headers).json() == []
    june = client.get("/expenses", params={"month": 6, "year": 2024}, headers=auth_headers).json()
    assert [e["id"] for e in june] == [created["id"]]


def test_patch_requires_a_field_and_ignores_null_amount(client, auth_headers) -> None:
    created = _add(client, auth_headers, 100, description="lunch")
    r = client.patch(f"/expenses/{created['id']}", json={}, headers=auth_headers)
    assert r.status_code == 422
    r = client.patch(
        f"/expenses/{created['id']}",
        json={"amount": None, "description": None},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json()["amount"] == 100
    assert r.json()["description"] is None


def test_delete_and_missing_expense(client, auth_headers) -> None:
    created = _add(client, auth_headers, 100)
    assert client.delete(f"/expenses/{created['id']}", headers=auth_headers).status_code == 204
    assert client.get("/expenses", params=MAY, headers=auth_headers).json() == []
    r = client.delete(f"/expenses/{created['id']}", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["notification"]["description"] == "expense not found"


def test_expenses_are_private_to_their_owner(client, auth_headers, other_headers) -> None:
    created = _add(client, auth_headers, 100)
    assert client.get("/expenses", params=MAY, headers=other_headers).json() == []
    r = client.patch(f"/expenses/{created['id']}", json={"amount": 1}, headers=other_headers)
    assert r.status_code == 404
    assert client.delete(f"/expenses/{created['id']}", headers=other_headers).status_code == 404


def test_budget_history_and_summary(client, auth_headers) -> None:
    for amount, day in ((600, "2024-05-01"), (400, "2024-05-15"), (999, "2024-04-30")):
        r = client.post(
            "/budgets", json={"amount": amount, "budget_date": day}, headers=auth_headers
        )
        assert r.status_code == 201
    _add(client, auth_headers, 1500)

    entries = client.get("/budgets", params=MAY, headers=auth_headers).json()
    assert sorted(e["amount"] for e in entries) == [400, 600]
    assert all((e["month"], e["year"]) == (5, 2024) for e in entries)

    summary = client.get("/budgets/summary", params=MAY, headers=auth_headers).json()
    assert summary["total_budget"] == 1000
    assert summary["total_expense"] == 1500
    assert summary["remaining"] == -500
    assert summary["percent_used"] == 150
    assert summary["level"] == "over"


def test_budget_month_follows_date_on_update(client, auth_headers) -> None:
    r = client.post(
        "/budgets", json={"amount": 300, "budget_date": "2024-05-20"}, headers=auth_headers
    )
    entry = r.json()
    assert (entry["month"], entry["year"]) == (5, 2024)
    client.get("/budgets", params=MAY, headers=auth_headers)

    r = client.patch(
        f"/budgets/{entry['id']}", json={"budget_date": "2025-01-02"}, headers=auth_headers
    )
    assert r.status_code == 200
    assert (r.json()["month"], r.json()["year"]) == (1, 2025)
    assert client.get("/budgets", params=MAY, headers=auth_headers).json() == []

    r = client.patch(f"/budgets/{entry['id']}", json={"amount": 350}, headers=auth_headers)
    assert (r.json()["amount"], r.json()["month"]) == (350, 1)

    assert client.delete(f"/budgets/{entry['id']}", headers=auth_headers).status_code == 204
    assert client.patch(
        f"/budgets/{entry['id']}", json={"amount": 1}, headers=auth_headers
    ).status_code == 404


def test_analytics_endpoints(client, auth_headers) -> None:
    _add(client, auth_headers, 100, day="2024-05-01")
    _add(client, auth_headers, 50, day="2024-05-01")
    _add(client, auth_headers, 200, "transport", day="2024-05-02")
    client.post("/budgets", json={"amount": 1000, "budget_date": "2024-05-01"}, headers=auth_headers)
    client.post("/budgets", json={"amount": 700, "budget_date": "2024-03-01"}, headers=auth_headers)

    summary = client.get("/analytics/summary", params=MAY, headers=auth_headers).json()
    assert summary["total_expense"] == 350
    assert summary["remaining"] == 650
    assert summary["expense_count"] == 3
    assert summary["level"] == "ok"

    breakdown = client.get("/analytics/category-breakdown", params=MAY, headers=auth_headers).json()
    assert [(b["category"], b["amount"], b["percent"]) for b in breakdown] == [
        ("transport", 200, 57.1),
        ("food", 150, 42.9),
    ]
    assert breakdown[0]["label"] == "Transport"

    daily = client.get("/analytics/daily", params=MAY, headers=auth_headers).json()
    assert len(daily) == 31
    assert daily[0] == {
        "date": "2024-05-01",
        "total": 150,
        "count": 2,
        "categories": {"food": 150},
    }

    custom = client.get(
        "/analytics/series",
        params={"view": "custom", "start_date": "2024-05-01", "end_date": "2024-05-02"},
        headers=auth_headers,
    ).json()
    assert [d["total"] for d in custom] == [150, 200]
    incomplete = client.get(
        "/analytics/series", params={"view": "custom", "start_date": "2024-05-01"}, headers=auth_headers
    )
    assert incomplete.json() == []

    months = client.get(
        "/analytics/budget-months", params={**MAY, "count": 3}, headers=auth_headers
    ).json()
    assert [(m["month"], m["total_budget"]) for m in months] == [(3, 700), (4, 0), (5, 1000)]
    assert months[-1]["label"] == "May 2024"


def test_recent_days_defaults_to_configured_window(client, auth_headers, settings) -> None:
    days = client.get("/analytics/recent-days", headers=auth_headers).json()
    assert len(days) == settings.recent_days
    assert days[0]["date"] > days[-1]["date"]


def test_preferences_and_limit_alert(client, auth_headers) -> None:
    prefs = client.get("/preferences", headers=auth_headers).json()
    assert prefs == {"budget_limit": 0, "warning_threshold": 80, "alert_dismissed": False}

    _add(client, auth_headers, 850)
    assert client.get("/preferences/alert", params=MAY, headers=auth_headers).json()["level"] == "none"

    r = client.put(
        "/preferences", json={"budget_limit": 1000, "warning_threshold": 80}, headers=auth_headers
    )
    assert r.json()["budget_limit"] == 1000
    alert = client.get("/preferences/alert", params=MAY, headers=auth_headers).json()
    assert alert["level"] == "warning"
    assert alert["percent_used"] == 85

    _add(client, auth_headers, 150)
    alert = client.get("/preferences/alert", params=MAY, headers=auth_headers).json()
    assert alert["level"] == "exceeded"

    assert client.post("/preferences/dismiss", headers=auth_headers).json()["alert_dismissed"]
    alert = client.get("/preferences/alert", params=MAY, headers=auth_headers).json()
    assert alert["level"] == "none"

    cleared = client.delete("/preferences/limit", headers=auth_headers).json()
    assert cleared["budget_limit"] == 0


def test_amounts_must_be_finite_and_bounded(client, auth_headers) -> None:
    huge = {"amount": 1e308, "category": "food", "expense_date": "2024-05-01"}
    assert client.post("/expenses", json=huge, headers=auth_headers).status_code == 422

    # httpx refuses to encode inf, so send the JSON text directly
    r = client.post(
        "/expenses",
        content='{"amount": Infinity, "category": "food", "expense_date": "2024-05-01"}',
        headers={**auth_headers, "content-type": "application/json"},
    )
    assert r.status_code == 422
    r = client.post(
        "/budgets",
        content='{"amount": NaN, "budget_date": "2024-05-01"}',
        headers={**auth_headers, "content-type": "application/json"},
    )
    assert r.status_code == 422

    over = {"budget_limit": MAX_AMOUNT * 10, "warning_threshold": 80}
    assert client.put("/preferences", json=over, headers=auth_headers).status_code == 422
    assert client.get("/analytics/summary", params=MAY, headers=auth_headers).status_code == 200


def test_custom_windows_are_bounded(client, auth_headers, settings) -> None:
    year = {"start_date": "2024-01-01", "end_date": "2024-12-31"}
    assert len(client.get("/analytics/daily", params=year, headers=auth_headers).json()) == 366

    too_long = {"start_date": "1900-01-01", "end_date": "2024-12-31"}
    r = client.get("/analytics/daily", params=too_long, headers=auth_headers)
    assert r.status_code == 400
    assert str(settings.max_window_days) in r.text
    r = client.get(
        "/analytics/series", params={"view": "custom", **too_long}, headers=auth_headers
    )
    assert r.status_code == 400


def test_warning_threshold_accepts_fractions(client, auth_headers) -> None:
    r = client.put(
        "/preferences", json={"budget_limit": 1000, "warning_threshold": 85.5}, headers=auth_headers
    )
    assert r.status_code == 200
    assert r.json()["warning_threshold"] == 85.5

    _add(client, auth_headers, 850)
    assert client.get("/preferences/alert", params=MAY, headers=auth_headers).json()["level"] == "none"
    _add(client, auth_headers, 10)
    alert = client.get("/preferences/alert", params=MAY, headers=auth_headers).json()
    assert alert["level"] == "warning"
    assert alert["warning_threshold"] == 85.5
