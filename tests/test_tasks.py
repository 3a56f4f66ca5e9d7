from datetime import date
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django_celery_beat.models import PeriodicTask

from apps.financials.models import Bill
from apps.financials.tasks import mark_overdue_bills
from apps.payroll.exceptions import StoreWriteError
from apps.payroll.models import Employee, PayrollEntry
from apps.payroll.stores import DjangoBillStore
from apps.payroll.tasks import extend_employee_bills, seed_rolling_horizon

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def frozen_today(monkeypatch):
    monkeypatch.setattr("django.utils.timezone.localdate", lambda *args, **kwargs: date(2026, 1, 10))


def test_mark_overdue_bills(company):
    overdue = Bill.objects.create(company=company, amount=Decimal("10.00"), due_date=date(2026, 1, 5))
    upcoming = Bill.objects.create(company=company, amount=Decimal("10.00"), due_date=date(2026, 1, 15))
    paid = Bill.objects.create(
        company=company,
        amount=Decimal("10.00"),
        due_date=date(2026, 1, 2),
        status=Bill.Status.PAGO,
        paid_on=date(2026, 1, 2),
    )

    assert mark_overdue_bills() == 1

    overdue.refresh_from_db()
    upcoming.refresh_from_db()
    paid.refresh_from_db()
    assert overdue.status == Bill.Status.VENCIDO
    assert upcoming.status == Bill.Status.PENDENTE
    assert paid.status == Bill.Status.PAGO


def test_seed_rolling_horizon_seeds_and_syncs(company, settings):
    settings.PAYROLL_SEED_HORIZON_MONTHS = 2
    PayrollEntry.objects.create(
        company=company,
        employee_name="Rita Nunes",
        amount=Decimal("1200.00"),
        reference_date=date(2026, 1, 7),
        recurrence_type="mensal",
        open_ended=True,
        business_day=5,
        group_id="g1",
        recurrence_index=1,
    )

    totals = seed_rolling_horizon()

    assert totals == {"created": 2, "skipped": 1, "failed": 0, "migrated": 3}
    assert PayrollEntry.objects.filter(group_id="g1").count() == 3
    assert Bill.objects.filter(type=Bill.Types.FOLHA).count() == 3



def test_sync_failure_keeps_seeded_entries(company, settings, monkeypatch):
    settings.PAYROLL_SEED_HORIZON_MONTHS = 2
    PayrollEntry.objects.create(
        company=company,
        employee_name="Rita Nunes",
        amount=Decimal("1200.00"),
        reference_date=date(2026, 1, 7),
        recurrence_type="mensal",
        open_ended=True,
        business_day=5,
        group_id="g1",
        recurrence_index=1,
    )
    original_create = DjangoBillStore.create

    def flaky_create(self, bill):
        if bill.due_date == date(2026, 2, 6):
            raise StoreWriteError("falha simulada")
        return original_create(self, bill)

    monkeypatch.setattr(DjangoBillStore, "create", flaky_create)

    totals = seed_rolling_horizon()

    assert totals == {"created": 2, "skipped": 1, "failed": 1, "migrated": 2}
    assert PayrollEntry.objects.filter(group_id="g1").count() == 3
    assert Bill.objects.filter(type=Bill.Types.FOLHA).count() == 2

def test_extend_employee_bills_tops_up_active_employees(company):
    Employee.objects.create(
        company=company,
        name="Bruno Costa",
        recurrence_type="mensal",
        monthly_amount=Decimal("3000.00"),
    )
    Employee.objects.create(
        company=company,
        name="Inativo",
        recurrence_type="mensal",
        monthly_amount=Decimal("3000.00"),
        is_active=False,
    )

    assert extend_employee_bills() == 12
    assert extend_employee_bills() == 0


def test_seed_command(company):
    PayrollEntry.objects.create(
        company=company,
        employee_name="Rita Nunes",
        amount=Decimal("1200.00"),
        reference_date=date(2026, 1, 5),
        recurrence_type="semanal",
        open_ended=True,
        group_id="w1",
        recurrence_index=1,
    )
    out = StringIO()

    call_command("seed_payroll_recurrences", "--from", "2026-01-01", "--to", "2026-01-31", stdout=out)

    assert PayrollEntry.objects.filter(group_id="w1").count() == 4
    assert "3 lançamento(s) criado(s)" in out.getvalue()


def test_seed_command_rejects_bad_dates(company):
    with pytest.raises(CommandError):
        call_command("seed_payroll_recurrences", "--from", "2026-02-01", "--to", "2026-01-01")
    with pytest.raises(CommandError):
        call_command("seed_payroll_recurrences", "--from", "01/02/2026", "--to", "2026-03-01")


def test_setup_payroll_tasks_is_idempotent():
    call_command("setup_payroll_tasks", "--hour", "2", stdout=StringIO())
    call_command("setup_payroll_tasks", "--hour", "3", stdout=StringIO())

    tasks = set(PeriodicTask.objects.values_list("task", flat=True))
    assert {
        "payroll.seed_open_ended_recurrences",
        "payroll.extend_employee_bills",
        "financials.mark_overdue_bills",
    } <= tasks
    assert PeriodicTask.objects.get(name="Seed Payroll Recurrences").crontab.hour == "3"
