import pytest
from datetime import date
from fastapi import status

from app.core.config import settings
from app.schemas.auth import UserRole


@pytest.fixture
def hr_headers(auth_headers):
    return auth_headers(UserRole.HR, sub="hr-1")


def test_generate_payroll(client, hr_headers, make_employee):
    make_employee(basic_salary="5000")

    response = client.post("/api/payroll/generate", headers=hr_headers, json={"month": 6, "year": 2030})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["created"] == 1

    rerun = client.post("/api/payroll/generate", headers=hr_headers, json={"month": 6, "year": 2030})
    assert rerun.json()["created"] == 0
    assert rerun.json()["skipped"] == 1


def test_generate_requires_month_and_year(client, hr_headers):
    response = client.post("/api/payroll/generate", headers=hr_headers, json={})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "Month and year are required"


def test_generate_forbidden_for_managers(client, auth_headers):
    response = client.post(
        "/api/payroll/generate",
        headers=auth_headers(UserRole.MANAGER, sub="mgr"),
        json={"month": 6, "year": 2030}
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_calculate_preview(client, hr_headers):
    response = client.post("/api/payroll/calculate", headers=hr_headers, json={
        "basic_salary": 10000,
        "allowances": 0,
        "date_of_birth": "1960-01-01",
    })
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["gross_salary"] == 10000
    assert data["cpf_employee"] + data["cpf_employer"] > 0
    assert data["income_tax"] == 1500


def test_calculate_preview_for_exempt_employee(client, hr_headers):
    response = client.post("/api/payroll/calculate", headers=hr_headers, json={
        "basic_salary": 5000,
        "allowances": 500,
        "date_of_birth": "1990-06-15",
        "cpf_applicable": False,
    })
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["cpf_employee"] == 0
    assert data["cpf_employer"] == 0
    assert data["net_salary"] == 4675


def test_payslip_access(client, hr_headers, auth_headers, make_employee):
    owner = make_employee(basic_salary="5000")
    other = make_employee(basic_salary="5000")
    client.post("/api/payroll/generate", headers=hr_headers, json={"month": 6, "year": 2030})

    owner_headers = auth_headers(UserRole.STAFF, owner.id, sub="owner")
    mine = client.get("/api/payroll/payslips", headers=owner_headers)
    assert mine.status_code == status.HTTP_200_OK
    assert len(mine.json()) == 1
    payslip_id = mine.json()[0]["id"]
    assert mine.json()[0]["pay_period_start"] == "2030-06-01"

    other_headers = auth_headers(UserRole.STAFF, other.id, sub="other")
    assert client.get(f"/api/payroll/payslips/{payslip_id}", headers=other_headers).status_code == status.HTTP_403_FORBIDDEN
    assert client.get(f"/api/payroll/payslips/{payslip_id}", headers=hr_headers).status_code == status.HTTP_200_OK
    assert client.get("/api/payroll/payslips", headers=other_headers, params={"employee_id": owner.id}).status_code == status.HTTP_403_FORBIDDEN


def test_cron_requires_secret_when_configured(client, make_employee, monkeypatch):
    make_employee(basic_salary="5000")
    monkeypatch.setattr(settings.payroll, "cron_secret", "s3cret")

    assert client.get("/api/payroll/cron").status_code == status.HTTP_401_UNAUTHORIZED

    response = client.get("/api/payroll/cron", headers={"Authorization": "Bearer s3cret"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["created"] == 1
    today = date.today()
    assert f"{today.month:02d}/{today.year}" in response.json()["message"]
