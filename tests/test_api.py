from datetime import date
from decimal import Decimal

import pytest

from apps.companies.models import Membership
from apps.financials.models import Bill
from apps.financials.permissions import CanManagePayroll
from apps.payroll.exceptions import PERMISSION_DENIED_MESSAGE, StoreWriteError
from apps.payroll.models import Employee, PayrollEntry
from apps.payroll.stores import DjangoBillStore

pytestmark = pytest.mark.django_db

EMPLOYEES_URL = "/api/v1/payroll/employees/"
ENTRIES_URL = "/api/v1/payroll/entries/"
BILLS_URL = "/api/v1/financials/bills/"


@pytest.fixture(autouse=True)
def frozen_today(monkeypatch):
    monkeypatch.setattr("django.utils.timezone.localdate", lambda *args, **kwargs: date(2026, 1, 10))


@pytest.fixture
def admin_client(member_factory, api_client_for):
    return api_client_for(member_factory(role=Membership.Roles.ADMIN))


@pytest.fixture
def engineer_client(member_factory, api_client_for):
    return api_client_for(member_factory(role=Membership.Roles.ENGENHARIA))


def _create_employee(client, **overrides):
    payload = {
        "name": "Bruno Costa",
        "recurrence_type": "mensal",
        "monthly_amount": "3000.00",
        "day_of_month": 20,
        "payout_method": "pix",
        "pix_key": "bruno@example.com",
    }
    payload.update(overrides)
    return client.post(EMPLOYEES_URL, payload, format="json")


def test_creating_employee_generates_bills(admin_client):
    response = _create_employee(admin_client)

    assert response.status_code == 201
    employee = Employee.objects.get(pk=response.data["id"])
    bills = Bill.objects.filter(employee=employee).order_by("due_date")
    assert bills.count() == 12
    assert bills.first().due_date == date(2026, 1, 20)
    assert all(bill.obra is None for bill in bills)
    assert response.data["generation"]["created"] == 12


def test_create_reports_partial_write_failure(admin_client, monkeypatch):
    original_create = DjangoBillStore.create

    def flaky_create(self, bill):
        if bill.due_date == date(2026, 3, 20):
            raise StoreWriteError("falha simulada")
        return original_create(self, bill)

    monkeypatch.setattr(DjangoBillStore, "create", flaky_create)

    response = _create_employee(admin_client)

    assert response.status_code == 201
    assert response.data["generation"] == {
        "created": 11,
        "skipped": 0,
        "failed": 1,
        "deleted": 0,
        "errors": ["falha simulada"],
    }
    assert Bill.objects.count() == 11


def test_employee_validation_requires_amount_for_type(admin_client):
    response = _create_employee(admin_client, recurrence_type="quinzenal", first_half_amount="1000.00")
    assert response.status_code == 400
    assert "second_half_amount" in response.data


def test_engineering_role_cannot_create_employee(engineer_client):
    response = _create_employee(engineer_client)

    assert response.status_code == 403
    assert response.data["detail"] == PERMISSION_DENIED_MESSAGE
    assert not Employee.objects.exists()


def test_engineering_role_can_list_employees(engineer_client):
    assert engineer_client.get(EMPLOYEES_URL).status_code == 200


def test_store_permission_error_is_translated(engineer_client, monkeypatch):
    monkeypatch.setattr(CanManagePayroll, "has_permission", lambda self, request, view: True)

    response = _create_employee(engineer_client)

    assert response.status_code == 403
    assert response.data["detail"] == PERMISSION_DENIED_MESSAGE
    assert not Employee.objects.exists()
    assert not Bill.objects.exists()


def test_editing_employee_keeps_paid_bills(admin_client):
    employee_id = _create_employee(admin_client).data["id"]
    january = Bill.objects.get(employee_id=employee_id, due_date=date(2026, 1, 20))
    paid = admin_client.post(f"{BILLS_URL}{january.id}/record-payment/", {"paid_on": "2026-01-20"}, format="json")
    assert paid.status_code == 200

    response = admin_client.patch(
        f"{EMPLOYEES_URL}{employee_id}/", {"monthly_amount": "3500.00"}, format="json"
    )

    assert response.status_code == 200
    bills = Bill.objects.filter(employee_id=employee_id)
    assert bills.count() == 12
    assert bills.get(due_date=date(2026, 1, 20)).amount == Decimal("3000.00")
    assert bills.filter(amount=Decimal("3500.00")).count() == 11
    assert response.data["generation"]["deleted"] == 11
    assert response.data["generation"]["created"] == 11


def test_deleting_employee_keeps_paid_history(admin_client):
    employee_id = _create_employee(admin_client).data["id"]
    january = Bill.objects.get(employee_id=employee_id, due_date=date(2026, 1, 20))
    admin_client.post(f"{BILLS_URL}{january.id}/record-payment/", {"paid_on": "2026-01-20"}, format="json")

    response = admin_client.delete(f"{EMPLOYEES_URL}{employee_id}/")

    assert response.status_code == 204
    remaining = Bill.objects.all()
    assert remaining.count() == 1
    assert remaining.get().status == Bill.Status.PAGO
    assert remaining.get().employee is None


def test_generate_bills_action_with_past_months(admin_client):
    employee_id = _create_employee(admin_client).data["id"]

    response = admin_client.post(
        f"{EMPLOYEES_URL}{employee_id}/generate-bills/", {"months_past": 2}, format="json"
    )

    assert response.status_code == 200
    assert response.data["created"] == 2
    assert response.data["deleted"] == 0
    dates = Bill.objects.filter(employee_id=employee_id).order_by("due_date").values_list("due_date", flat=True)
    assert dates[0] == date(2025, 11, 20)


def test_extend_back_action(admin_client):
    employee_id = _create_employee(admin_client).data["id"]

    response = admin_client.post(f"{EMPLOYEES_URL}{employee_id}/extend-back/")

    assert response.status_code == 200
    assert response.data["created"] == 1
    assert Bill.objects.filter(employee_id=employee_id, due_date=date(2025, 12, 20)).exists()


def test_employee_bills_action(admin_client):
    employee_id = _create_employee(admin_client).data["id"]
    response = admin_client.get(f"{EMPLOYEES_URL}{employee_id}/bills/")
    assert response.status_code == 200
    assert len(response.data) == 12


def test_record_payment_twice_is_rejected(admin_client, company):
    bill = Bill.objects.create(company=company, amount=Decimal("100.00"), due_date=date(2026, 1, 15))
    url = f"{BILLS_URL}{bill.id}/record-payment/"

    assert admin_client.post(url, {"paid_on": "2026-01-15"}, format="json").status_code == 200
    assert admin_client.post(url, {"paid_on": "2026-01-16"}, format="json").status_code == 400


def test_bills_filter_by_missing_obra(admin_client, company, obra):
    Bill.objects.create(company=company, obra=obra, amount=Decimal("100.00"), due_date=date(2026, 1, 15))
    loose = Bill.objects.create(company=company, amount=Decimal("50.00"), due_date=date(2026, 1, 15))

    response = admin_client.get(BILLS_URL, {"obra": "sem-obra"})
    assert [row["id"] for row in response.data] == [str(loose.id)]

    everything = admin_client.get(BILLS_URL)
    assert len(everything.data) == 2


def test_recurring_entries_seed_and_sync(admin_client):
    created = admin_client.post(
        f"{ENTRIES_URL}recurring/",
        {
            "employee_name": "Rita Nunes",
            "amount": "1200.00",
            "reference_date": "2026-01-07",
            "recurrence_type": "mensal",
            "business_day": 5,
        },
        format="json",
    )
    assert created.status_code == 201
    assert len(created.data) == 3

    seeded = admin_client.post(
        f"{ENTRIES_URL}seed/", {"date_from": "2026-01-01", "date_to": "2026-06-30"}, format="json"
    )
    assert seeded.status_code == 200
    assert seeded.data == {"created": 3, "skipped": 3, "failed": 0}
    assert PayrollEntry.objects.count() == 6

    synced = admin_client.post(f"{ENTRIES_URL}sync-bills/", {}, format="json")
    assert synced.data["migrated"] == 6
    assert Bill.objects.filter(type=Bill.Types.FOLHA).count() == 6

    again = admin_client.post(f"{ENTRIES_URL}sync-bills/", {}, format="json")
    assert again.data["migrated"] == 0


def test_weekly_recurring_entries(admin_client):
    response = admin_client.post(
        f"{ENTRIES_URL}recurring/",
        {
            "employee_name": "Rita Nunes",
            "amount": "300.00",
            "reference_date": "2026-01-05",
            "recurrence_type": "semanal",
            "total": 3,
        },
        format="json",
    )
    assert response.status_code == 201
    assert [row["reference_date"] for row in response.data] == ["2026-01-05", "2026-01-12", "2026-01-19"]
    assert {row["recurrence_total"] for row in response.data} == {3}


def test_engineering_role_cannot_seed(engineer_client):
    response = engineer_client.post(
        f"{ENTRIES_URL}seed/", {"date_from": "2026-01-01", "date_to": "2026-06-30"}, format="json"
    )
    assert response.status_code == 403
