import pytest
from fastapi.testclient import TestClient

from main import app
from schoolpay.api.deps import get_payroll_service, get_staff_service
from schoolpay.services.payroll import PayrollService
from schoolpay.services.rate_limit import RateLimiter
from schoolpay.services.staff import StaffService

from .conftest import FakePayrollRepo, FakeStaffRepo, make_staff


@pytest.fixture
def repos():
    return FakePayrollRepo(), FakeStaffRepo([make_staff("s1"), make_staff("s2", name="Omar Tazi", rate=6000)])


@pytest.fixture
def client(repos):
    payroll_repo, staff_repo = repos
    payroll_service = PayrollService(payroll_repo, staff_repo, rate_limiter=RateLimiter(3, 3600))
    app.dependency_overrides[get_payroll_service] = lambda: payroll_service
    app.dependency_overrides[get_staff_service] = lambda: StaffService(staff_repo)
    yield TestClient(app)
    app.dependency_overrides.clear()


def generate(client, period="July 2024"):
    return client.post("/api/payroll/generate", json={"period": period}, headers={"X-User-Id": "admin-1"})


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_generate_payroll(client):
    response = generate(client)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert len(body["payslips"]) == 2
    assert body["total_amount"] == pytest.approx(9000 + 5400)


def test_generate_twice_conflicts(client):
    generate(client)
    response = generate(client)
    assert response.status_code == 409
    assert "already generated" in response.json()["detail"]


def test_generate_rate_limited(client):
    for month in ("May 2024", "June 2024", "July 2024"):
        generate(client, month)
    assert generate(client, "August 2024").status_code == 429


def test_generate_without_staff(client):
    for sid in ("s1", "s2"):
        client.delete(f"/api/staff/{sid}")
    response = generate(client)
    assert response.status_code == 422
    assert "No eligible staff" in response.json()["detail"]


def test_edit_item_and_totals(client):
    payroll_id = generate(client).json()["id"]

    response = client.patch(
        f"/api/payroll/{payroll_id}/payslips/s1/items/base-salary",
        json={"type": "earning", "field": "amount", "value": "11000"},
    )
    assert response.status_code == 200
    slip = next(p for p in response.json()["payslips"] if p["staff_id"] == "s1")
    assert slip["net_pay"] == pytest.approx(9900)
    assert response.json()["total_amount"] == pytest.approx(9900 + 5400)


def test_edit_item_rejects_bad_amount(client):
    payroll_id = generate(client).json()["id"]
    response = client.patch(
        f"/api/payroll/{payroll_id}/payslips/s1/items/base-salary",
        json={"type": "earning", "field": "amount", "value": "lots"},
    )
    assert response.status_code == 422


def test_add_and_remove_item(client):
    payroll_id = generate(client).json()["id"]
    response = client.post(
        f"/api/payroll/{payroll_id}/payslips/s2/items", json={"type": "deduction", "label": "Advance"}
    )
    slip = next(p for p in response.json()["payslips"] if p["staff_id"] == "s2")
    added = slip["deductions"][-1]
    assert added["label"] == "Advance"
    assert added["amount"] == 0

    response = client.delete(
        f"/api/payroll/{payroll_id}/payslips/s2/items/{added['id']}", params={"type": "deduction"}
    )
    slip = next(p for p in response.json()["payslips"] if p["staff_id"] == "s2")
    assert [d["id"] for d in slip["deductions"]] == ["withholding"]


def test_confirm_and_summary(client):
    payroll_id = generate(client).json()["id"]
    assert client.post(f"/api/payroll/{payroll_id}/confirm").json()["status"] == "paid"

    summary = client.get(f"/api/payroll/{payroll_id}/summary").json()
    assert summary["staff_count"] == 2
    assert summary["total_net"] == pytest.approx(14400)


def test_missing_payroll_is_404(client):
    assert client.get("/api/payroll/payroll-99").status_code == 404
    assert client.post("/api/payroll/payroll-99/confirm").status_code == 404
    assert client.delete("/api/payroll/payroll-99").status_code == 404


def test_delete_payroll(client):
    payroll_id = generate(client).json()["id"]
    assert client.delete(f"/api/payroll/{payroll_id}").json() == {"message": "Payroll deleted"}
    assert client.get("/api/payroll/").json() == []


def test_staff_endpoints(client):
    created = client.post("/api/staff/", json={"name": "Sara Idrissi", "payment_rate": 8000})
    assert created.status_code == 201
    staff_id = created.json()["id"]
    assert client.get(f"/api/staff/{staff_id}").json()["name"] == "Sara Idrissi"
    assert client.get("/api/staff/nobody").status_code == 404
