"""End-to-end tests through the HTTP API."""
import json

import pytest


def _headers(principal):
    return {"X-User-Id": str(principal.id)}


@pytest.fixture
def created(client, alice, vendor):
    response = client.post(
        "/api/containers",
        json={
            "vendor_id": vendor.id,
            "container_code": "API-1",
            "city": "Houston",
            "purchase_date": "2025-01-15",
            "rent": "50",
            "contents": [
                {"number": 1, "item": "Engine", "price": 100, "recovery": 10, "cutting": 5, "total": 1},
                {"number": 2, "item": "Door", "price": "200"},
            ],
        },
        headers=_headers(alice),
    )
    assert response.status_code == 201
    return response.json()


def test_missing_principal_is_unauthorized(client):
    assert client.get("/api/containers").status_code == 401
    assert client.get("/api/containers", headers={"X-User-Id": "999"}).status_code == 401


def test_inactive_principal_is_forbidden(client, inactive_user):
    response = client.get("/api/containers", headers={"X-User-Id": str(inactive_user.id)})

    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


def test_create_and_read_container(client, created, alice):
    assert created["grand_total"] == 365.0
    assert created["status"] == "pending"
    assert [c["total"] for c in created["contents"]] == [115.0, 200.0]

    summary = client.get(
        f"/api/containers/{created['id']}", params={"projection": "summary"}, headers=_headers(alice)
    ).json()
    assert "contents" not in summary


def test_list_is_scoped(client, created, bob, manager):
    assert client.get("/api/containers", headers=_headers(bob)).json() == []
    assert len(client.get("/api/containers", headers=_headers(manager)).json()) == 1


def test_error_mapping(client, created, alice, bob, vendor):
    container_id = created["id"]

    not_found = client.get("/api/containers/9999", headers=_headers(alice))
    assert not_found.status_code == 404
    assert not_found.json()["error"] == "NotFound"

    forbidden = client.get(f"/api/containers/{container_id}", headers=_headers(bob))
    assert forbidden.status_code == 403

    invalid = client.put(
        f"/api/containers/{container_id}/contents",
        json={"items": [{"price": "abc"}]},
        headers=_headers(alice),
    )
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "InvalidInput"

    duplicate = client.post(
        "/api/containers",
        json={"vendor_id": vendor.id, "container_code": "API-1"},
        headers=_headers(alice),
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "ConflictingState"


def test_status_transitions(client, created, alice):
    url = f"/api/containers/{created['id']}/status"

    assert client.patch(url, json={"status": "completed"}, headers=_headers(alice)).status_code == 409
    assert client.patch(url, json={"status": "shipped"}, headers=_headers(alice)).json()["status"] == "shipped"
    assert client.patch(url, json={"status": "pending"}, headers=_headers(alice)).status_code == 409


def test_contents_endpoints(client, created, alice):
    container_id = created["id"]

    items = client.put(
        f"/api/containers/{container_id}/contents",
        json={"items": [{"number": 1, "price": 10, "recovery": 1, "cutting": 1}]},
        headers=_headers(alice),
    ).json()
    assert [i["total"] for i in items] == [12.0]

    deleted = client.delete(f"/api/contents/{items[0]['id']}", headers=_headers(alice)).json()
    assert deleted["grand_total"] == 50.0
    assert client.get(f"/api/containers/{container_id}/contents", headers=_headers(alice)).json() == []


def test_full_flow_profit_and_balance(client, created, alice, manager, vendor):
    container_id = created["id"]

    transfer = client.post(
        "/api/transfers",
        json={
            "vendor_id": vendor.id,
            "container_id": container_id,
            "amount": 200,
            "type": "bank",
            "date": "2025-02-01",
            "sender_name": "Hassan",
        },
        headers=_headers(alice),
    )
    assert transfer.status_code == 201
    assert transfer.json()["sender_name"] == "Hassan"

    balance = client.get(f"/api/containers/{container_id}/balance", headers=_headers(alice)).json()
    assert balance["remaining"] == 165.0

    sheet = {"sales": [{"sale_price": 500}], "expenses": [{"category": "PORT", "amount": 50}]}
    url = f"/api/containers/{container_id}/sales"
    assert client.put(url, json=sheet, headers=_headers(manager)).status_code == 409

    for status in ("shipped", "completed"):
        client.patch(f"/api/containers/{container_id}/status", json={"status": status}, headers=_headers(alice))

    assert client.put(url, json=sheet, headers=_headers(alice)).status_code == 403
    ledger = client.put(url, json=sheet, headers=_headers(manager)).json()
    assert ledger["total_sales"] == 500.0

    profit = client.get(f"/api/containers/{container_id}/profit", headers=_headers(alice)).json()
    assert profit["profit_aed"] == -889.55

    assert client.delete(f"/api/containers/{container_id}", headers=_headers(alice)).status_code == 409


def test_transfer_endpoints(client, created, alice, bob, vendor):
    transfer_id = client.post(
        "/api/transfers",
        json={"vendor_id": vendor.id, "container_id": created["id"], "amount": 75, "type": "cash", "date": "2025-02-02"},
        headers=_headers(alice),
    ).json()["id"]

    assert len(client.get("/api/transfers/mine", headers=_headers(alice)).json()) == 1
    assert client.get(f"/api/transfers/{transfer_id}", headers=_headers(bob)).status_code == 403

    listing = client.get(f"/api/containers/{created['id']}/transfers", headers=_headers(alice)).json()
    assert listing["total_amount"] == 75.0

    assert client.delete(f"/api/transfers/{transfer_id}", headers=_headers(alice)).status_code == 204
    assert client.get(f"/api/transfers/{transfer_id}", headers=_headers(alice)).status_code == 404


def test_transfer_rejects_non_positive_amount(client, created, alice, vendor):
    response = client.post(
        "/api/transfers",
        json={"vendor_id": vendor.id, "container_id": created["id"], "amount": 0, "type": "cash", "date": "2025-02-02"},
        headers=_headers(alice),
    )

    assert response.status_code == 400


def test_delete_container(client, created, alice):
    container_id = created["id"]

    assert client.delete(f"/api/containers/{container_id}", headers=_headers(alice)).status_code == 204
    assert client.get(f"/api/containers/{container_id}/contents", headers=_headers(alice)).status_code == 404


def test_create_with_documents(client, alice, vendor):
    payload = {"vendor_id": vendor.id, "container_code": "DOCS-1", "rent": 10}
    response = client.post(
        "/api/containers/with-documents",
        data={"payload": json.dumps(payload)},
        files=[
            ("files", ("bill.pdf", b"bill", "application/pdf")),
            ("files", ("huge.pdf", b"x" * 4096, "application/pdf")),
        ],
        headers=_headers(alice),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["container"]["grand_total"] == 10.0
    assert [d["original_name"] for d in body["documents"]["uploaded"]] == ["bill.pdf"]
    assert [f["original_name"] for f in body["documents"]["failed"]] == ["huge.pdf"]
    assert len(body["container"]["documents"]) == 1


def test_vendor_endpoints(client, alice, bob, manager):
    created = client.post(
        "/api/vendors",
        json={"company_name": "Acme", "representative_name": "Sam", "email": "a@b.c", "phone": "1"},
        headers=_headers(alice),
    )
    assert created.status_code == 201
    assert created.json()["country"] == "USA"

    missing = client.post("/api/vendors", json={"company_name": "X"}, headers=_headers(alice))
    assert missing.status_code == 400

    assert len(client.get("/api/vendors", headers=_headers(bob)).json()) == 0
    assert len(client.get("/api/vendors", headers=_headers(manager)).json()) == 1
    assert client.get(f"/api/vendors/{created.json()['id']}", headers=_headers(bob)).status_code == 404


def test_reports_are_manager_only(client, created, alice, manager):
    assert client.get("/api/reports/dashboard", headers=_headers(alice)).status_code == 403

    dashboard = client.get("/api/reports/dashboard", headers=_headers(manager)).json()
    assert dashboard["total_containers"] == 1
    assert dashboard["profit_margin"] == 0

    assert client.get("/api/reports/revenue", params={"range": "year"}, headers=_headers(manager)).status_code == 200
    assert client.get("/api/reports/revenue", params={"range": "decade"}, headers=_headers(manager)).status_code == 400

    breakdown = client.get("/api/reports/status-breakdown", headers=_headers(manager)).json()
    assert {row["status"] for row in breakdown} == {"pending", "shipped", "completed"}

    report = client.get("/api/reports/users", headers=_headers(manager)).json()
    assert report["summary"]["total_containers"] == 1


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"]["database"]["status"] == "healthy"


def test_sales_sheet_replace_and_read(client, created, alice, manager):
    container_id = created["id"]
    for status in ("shipped", "completed"):
        client.patch(f"/api/containers/{container_id}/status", json={"status": status}, headers=_headers(alice))

    url = f"/api/containers/{container_id}/sales"
    sheet = {
        "sales": [{"number": 1, "sale_price": 300}, {"number": 2, "sale_price": "200"}],
        "expenses": [{"category": "Area Rent", "amount": 40}],
    }
    replaced = client.put(url, json=sheet, headers=_headers(manager))

    assert replaced.status_code == 200
    assert replaced.json()["total_sales"] == 500.0

    ledger = client.get(url, headers=_headers(alice)).json()
    assert [e["category"] for e in ledger["expenses"]] == ["area_rent"]
    assert ledger["total_expenses"] == 40.0
