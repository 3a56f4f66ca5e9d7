import uuid
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from rest_framework.test import APIClient

from apps.companies.models import Company, Membership, Obra
from apps.payroll.exceptions import StoreWriteError
from apps.payroll.models import Employee, PayrollEntry
from apps.payroll.types import ExistingRecord


class InMemoryBillStore:
    """BillStore em memória. `fail_on` lista vencimentos cuja gravação falha."""

    def __init__(self, fail_on=()):
        self.bills = []
        self.fail_on = set(fail_on)
        self.read_error = None
        self.write_error = None
        self.deleted = []
        self.reserved = {}

    def add_existing(self, employee, due_date, *, status="pendente", recurrence_index=None):
        bill = SimpleNamespace(
            id=uuid.uuid4(),
            employee_id=employee.id,
            payroll_entry_id=None,
            group_id=str(employee.id),
            due_date=due_date,
            status=status,
            recurrence_index=recurrence_index,
            amount=Decimal("0"),
        )
        self.bills.append(bill)
        return bill

    def list_by_employee(self, employee_id):
        if self.read_error:
            raise self.read_error
        return [
            ExistingRecord(
                id=bill.id,
                group_key=bill.group_id or str(employee_id),
                due_date=bill.due_date,
                status=bill.status,
                recurrence_index=bill.recurrence_index,
            )
            for bill in self.bills
            if bill.employee_id == employee_id
        ]

    def list_by_type(self, bill_type):
        return [bill for bill in self.bills if getattr(bill, "type", "folha") == bill_type]

    def create(self, new_bill):
        if self.write_error:
            raise self.write_error
        if new_bill.due_date in self.fail_on:
            raise StoreWriteError(f"falha simulada em {new_bill.due_date}")
        bill = SimpleNamespace(
            id=uuid.uuid4(),
            employee_id=new_bill.employee_id,
            payroll_entry_id=new_bill.payroll_entry_id,
            group_id=new_bill.group_id,
            due_date=new_bill.due_date,
            status=new_bill.status,
            paid_on=new_bill.paid_on,
            recurrence_index=new_bill.recurrence_index,
            amount=new_bill.amount,
            type=new_bill.type,
            cost_center=new_bill.cost_center,
            payee=new_bill.payout.payee,
        )
        self.bills.append(bill)
        if new_bill.employee_id and new_bill.recurrence_index:
            current = self.reserved.get(new_bill.employee_id, 0)
            self.reserved[new_bill.employee_id] = max(current, new_bill.recurrence_index)
        return bill.id

    def reserved_index(self, employee_id):
        return self.reserved.get(employee_id, 0)

    def delete_unpaid_by_employee(self, employee_id):
        if self.write_error:
            raise self.write_error
        removed = [b for b in self.bills if b.employee_id == employee_id and b.status != "pago"]
        self.deleted.extend(removed)
        self.bills = [b for b in self.bills if b not in removed]
        return len(removed)

    def dates(self, employee=None):
        return sorted(
            bill.due_date
            for bill in self.bills
            if employee is None or bill.employee_id == employee.id
        )


class InMemoryEntryStore:
    def __init__(self, fail_on=()):
        self.entries = []
        self.migrated = {}
        self.fail_on = set(fail_on)

    def add(self, **fields):
        fields.setdefault("amount", Decimal("1000.00"))
        fields.setdefault("employee_name", "Maria Souza")
        fields.setdefault("created_by", "u1")
        entry = PayrollEntry(id=uuid.uuid4(), **fields)
        self.entries.append(entry)
        return entry

    def list_entries(self):
        return list(self.entries)

    def list_recurring(self):
        return [entry for entry in self.entries if entry.recurrence_type]

    def create_entry(self, fields):
        if fields["reference_date"] in self.fail_on:
            raise StoreWriteError(f"falha simulada em {fields['reference_date']}")
        return self.add(**fields).id

    def mark_migrated(self, entry_id, bill_id):
        self.migrated[entry_id] = bill_id
        for entry in self.entries:
            if entry.id == entry_id:
                entry.migrated = True
                entry.bill_id = bill_id

    def group(self, group_id):
        return sorted(
            (entry for entry in self.entries if entry.group_id == group_id),
            key=lambda entry: entry.reference_date,
        )


@pytest.fixture
def bill_store():
    return InMemoryBillStore()


@pytest.fixture
def entry_store():
    return InMemoryEntryStore()


@pytest.fixture
def make_employee():
    def factory(**fields):
        fields.setdefault("name", "João da Silva")
        fields.setdefault("recurrence_type", "mensal")
        fields.setdefault("is_active", True)
        return Employee(id=uuid.uuid4(), **fields)

    return factory


@pytest.fixture
def today():
    return date(2026, 1, 10)


@pytest.fixture
def company(db):
    return Company.objects.create(name="Construtora Horizonte")


@pytest.fixture
def obra(company):
    return Obra.objects.create(company=company, name="Residencial Aurora")


@pytest.fixture
def member_factory(company, django_user_model):
    def factory(role=Membership.Roles.ADMIN, username=None):
        user = django_user_model.objects.create_user(
            username=username or "user-" + str(role), password="senha-forte-123"
        )
        membership = Membership.objects.create(user=user, company=company, role=role)
        return membership

    return factory


@pytest.fixture
def api_client_for(company):
    def factory(membership):
        client = APIClient()
        client.force_authenticate(user=membership.user)
        client.credentials(HTTP_X_COMPANY_ID=str(company.id))
        return client

    return factory
