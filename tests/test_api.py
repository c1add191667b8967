import uuid

import pytest
from fastapi.testclient import TestClient

from nuacha.main import app
from nuacha.services.order_reference import is_valid_order_reference

API = "/api/v1"

@pytest.fixture(scope="module")
def client():
    with TestClient(app) as client:
        yield client

@pytest.fixture
def user(client):
    response = client.post(f"{API}/users/", json={"email": f"{uuid.uuid4().hex}@example.com"})
    assert response.status_code == 200
    return response.json()

@pytest.fixture
def family(client, user):
    response = client.post(f"{API}/families/", params={"user_id": user["id"]}, json={"name": "Home"})
    assert response.status_code == 200
    return response.json()

def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}

def test_unknown_user_is_rejected(client):
    response = client.get(f"{API}/budget/rules", params={"user_id": "nobody"})
    assert response.status_code == 401

def test_duplicate_email(client, user):
    response = client.post(f"{API}/users/", json={"email": user["email"]})
    assert response.status_code == 400

def test_rules_flow(client, user):
    params = {"user_id": user["id"]}
    first = client.post(f"{API}/budget/rules", params=params, json={
        "rule_name": "50/30/20", "needs_pct": 50, "wants_pct": 30, "savings_pct": 20, "is_default": True
    }).json()
    second = client.post(f"{API}/budget/rules", params=params, json={
        "rule_name": "70/20/10", "needs_pct": 70, "wants_pct": 20, "savings_pct": 10, "is_default": True
    }).json()

    rules = client.get(f"{API}/budget/rules", params=params).json()
    assert [rule["id"] for rule in rules if rule["is_default"]] == [second["id"]]
    assert client.get(f"{API}/budget/rules/active", params=params).json()["id"] == second["id"]

    response = client.patch(f"{API}/budget/rules/{first['id']}", params=params, json={"is_default": True})
    assert response.status_code == 200
    rules = client.get(f"{API}/budget/rules", params=params).json()
    assert [rule["id"] for rule in rules if rule["is_default"]] == [first["id"]]

    response = client.delete(f"{API}/budget/rules/{second['id']}", params=params)
    assert response.status_code == 200
    assert client.delete(f"{API}/budget/rules/{second['id']}", params=params).status_code == 404

def test_rule_split_must_add_up(client, user):
    params = {"user_id": user["id"]}
    response = client.post(f"{API}/budget/rules", params=params, json={
        "rule_name": "Too much", "needs_pct": 60, "wants_pct": 30, "savings_pct": 20
    })
    assert response.status_code == 422

    rule = client.post(f"{API}/budget/rules", params=params, json={
        "rule_name": "Standard", "needs_pct": 50, "wants_pct": 30, "savings_pct": 20
    }).json()
    response = client.patch(f"{API}/budget/rules/{rule['id']}", params=params, json={"needs_pct": 55})
    assert response.status_code == 400

def test_sync_and_summary(client, user, family):
    params = {"user_id": user["id"]}
    client.post(f"{API}/budget/income", params=params, json={
        "name": "Salary", "frequency": "monthly", "amount_ttd": 10000
    })
    expense = client.post(f"{API}/expenses/", params=params, json={
        "family_id": family["id"], "amount": 2500, "date": "2024-05-03", "category": "Groceries"
    }).json()

    client.post(f"{API}/families/{family['id']}/categories", params=params, json={"name": "Food"})
    status = client.get(f"{API}/categories/sync-status", params={**params, "family_id": family["id"]}).json()
    assert status["needs_sync"] == True

    result = client.post(f"{API}/categories/sync", params=params, json={"family_id": family["id"]}).json()
    assert result["success"] == True
    assert result["expenses_mapped"] == 1

    match = client.get(f"{API}/expenses/{expense['id']}/match", params=params).json()
    assert match["matched"] == True
    assert match["budget_category_name"] == "Groceries"
    assert match["group_type"] == "needs"

    summary = client.get(f"{API}/budget/summary", params={**params, "month": "2024-05-01"}).json()
    assert summary["total_income"] == 10000
    assert summary["by_group"]["needs"]["total"] == 2500
    assert summary["rule_comparison"]["needs"]["variance"] == -25.0

def test_sync_foreign_family(client, user, family):
    other = client.post(f"{API}/users/", json={"email": f"{uuid.uuid4().hex}@example.com"}).json()
    response = client.post(f"{API}/categories/sync", params={"user_id": other["id"]}, json={"family_id": family["id"]})
    assert response.status_code == 200
    assert response.json()["success"] == False
    assert response.json()["description"] == "You do not have permission to sync categories for this family."

def test_sync_all_defaults_to_every_family(client, user, family):
    params = {"user_id": user["id"]}
    client.post(f"{API}/families/", params=params, json={"name": "Parents"})
    result = client.post(f"{API}/categories/sync-all", params=params).json()
    assert result["success_count"] == 2
    assert result["error_count"] == 0

def test_comprehensive_cleanup(client, user, family):
    params = {"user_id": user["id"]}
    for _ in range(2):
        client.post(f"{API}/families/{family['id']}/categories", params=params, json={"name": "Fuel"})

    report = client.post(f"{API}/categories/validate", params=params).json()
    assert len(report["issues"]) == 1

    result = client.post(f"{API}/categories/cleanup/comprehensive", params=params).json()
    assert result["success"] == True
    assert result["duplicates_removed"] == 1
    assert client.post(f"{API}/categories/validate", params=params).json()["issues"] == []

def test_variance_without_template(client, user):
    response = client.get(f"{API}/budget/variance", params={"user_id": user["id"], "start": "2024-05-01"})
    assert response.status_code == 404

def test_unpaid_labor(client):
    body = client.get(f"{API}/budget/unpaid-labor", params={"family_type": "elderly-care"}).json()
    assert body["categories"]
    assert body["total_formatted"].startswith("TT$")
    assert body["total_value"] == sum(category["default_value"] for category in body["categories"])

def test_receipt_date_and_order_reference(client):
    body = client.post(f"{API}/receipts/validate-date", json={"date": None}).json()
    assert body["fallback_used"] == True
    assert body["confidence"] == 0.3

    reference = client.post(f"{API}/orders/reference").json()["reference"]
    assert is_valid_order_reference(reference)

def test_null_update_fields_are_rejected(client, user):
    params = {"user_id": user["id"]}
    rule = client.post(f"{API}/budget/rules", params=params, json={
        "rule_name": "Standard", "needs_pct": 50, "wants_pct": 30, "savings_pct": 20, "is_default": True
    }).json()
    for body in ({"needs_pct": None}, {"rule_name": None}, {"is_default": None}):
        response = client.patch(f"{API}/budget/rules/{rule['id']}", params=params, json=body)
        assert response.status_code == 422

    template = client.post(f"{API}/budget/templates", params=params, json={"name": "Plan"}).json()
    response = client.patch(f"{API}/budget/templates/{template['id']}", params=params, json={"name": None})
    assert response.status_code == 422

    source = client.post(f"{API}/budget/income", params=params, json={"name": "Salary", "amount_ttd": 5000}).json()
    response = client.patch(f"{API}/budget/income/{source['id']}", params=params, json={"amount_ttd": None})
    assert response.status_code == 422

    category = client.post(f"{API}/budget/categories", params=params, json={
        "name": "Rent", "group_type": "needs"
    }).json()
    response = client.patch(f"{API}/budget/categories/{category['id']}", params=params, json={"name": None})
    assert response.status_code == 422

    # Nothing was changed
    assert client.get(f"{API}/budget/rules/active", params=params).json()["rule_name"] == "Standard"

def test_income_round_trip(client, user, family):
    params = {"user_id": user["id"]}
    source = client.post(f"{API}/budget/income", params=params, json={
        "name": "Salary", "amount_ttd": 5000, "family_id": family["id"], "notes": "Main job"
    }).json()
    assert source["family_id"] == family["id"]

    response = client.patch(f"{API}/budget/income/{source['id']}", params=params, json={
        "amount_ttd": 5500, "frequency": "fortnightly", "notes": None
    })
    assert response.status_code == 200
    assert response.json()["amount_ttd"] == 5500
    assert response.json()["notes"] is None

    assert client.delete(f"{API}/budget/income/{source['id']}", params=params).status_code == 200
    assert client.get(f"{API}/budget/income", params=params).json() == []

def test_income_family_must_be_owned(client, user, family):
    other = client.post(f"{API}/users/", json={"email": f"{uuid.uuid4().hex}@example.com"}).json()
    params = {"user_id": other["id"]}

    response = client.post(f"{API}/budget/income", params=params, json={
        "name": "Salary", "amount_ttd": 5000, "family_id": family["id"]
    })
    assert response.status_code == 403

    response = client.post(f"{API}/budget/income", params=params, json={
        "name": "Salary", "amount_ttd": 5000, "family_id": "no-such-family"
    })
    assert response.status_code == 404
    assert client.get(f"{API}/budget/income", params=params).json() == []

def test_template_round_trip(client, user, family):
    params = {"user_id": user["id"]}
    template = client.post(f"{API}/budget/templates", params=params, json={
        "name": "May plan",
        "family_id": family["id"],
        "total_monthly_income": 9000,
        "template_data": {"needs": {"groceries": 2500}}
    }).json()

    response = client.patch(f"{API}/budget/templates/{template['id']}", params=params, json={
        "name": "June plan", "is_default": True
    })
    assert response.status_code == 200
    assert response.json()["name"] == "June plan"
    assert response.json()["is_default"] == True

    assert client.delete(f"{API}/budget/templates/{template['id']}", params=params).status_code == 200
    assert client.get(f"{API}/budget/templates", params=params).json() == []
    assert client.patch(
        f"{API}/budget/templates/{template['id']}", params=params, json={"name": "Again"}
    ).status_code == 404

def test_template_family_must_be_owned(client, user, family):
    other = client.post(f"{API}/users/", json={"email": f"{uuid.uuid4().hex}@example.com"}).json()
    response = client.post(f"{API}/budget/templates", params={"user_id": other["id"]}, json={
        "name": "Plan", "family_id": family["id"]
    })
    assert response.status_code == 403

def test_category_parent_must_be_in_family(client, user, family):
    params = {"user_id": user["id"]}
    second = client.post(f"{API}/families/", params=params, json={"name": "Parents"}).json()
    foreign_parent = client.post(f"{API}/families/{second['id']}/categories", params=params, json={"name": "Food"}).json()

    response = client.post(f"{API}/families/{family['id']}/categories", params=params, json={
        "name": "Snacks", "parent_id": foreign_parent["id"]
    })
    assert response.status_code == 404

    parent = client.post(f"{API}/families/{family['id']}/categories", params=params, json={"name": "Food"}).json()
    response = client.post(f"{API}/families/{family['id']}/categories", params=params, json={
        "name": "Snacks", "parent_id": parent["id"]
    })
    assert response.status_code == 200
    assert response.json()["parent_id"] == parent["id"]
