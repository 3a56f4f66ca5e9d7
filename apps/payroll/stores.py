"""
Persistência usada pela geração de contas da folha.

`BillStore` e `PayrollEntryStore` descrevem o que o reconciliador e o
semeador precisam. As implementações `Django*` gravam via ORM, escopadas a
uma empresa e, opcionalmente, ao vínculo (membership) do usuário que age.
"""

from __future__ import annotations

import logging
from typing import Protocol

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from apps.financials.models import Bill

from .exceptions import StorePermissionDenied, StoreReadError, StoreWriteError
from .models import Employee, PayrollEntry
from .types import Assigned, ExistingRecord, NewBill

logger = logging.getLogger(__name__)


class BillStore(Protocol):
    def list_by_employee(self, employee_id) -> list[ExistingRecord]: ...

    def create(self, bill: NewBill): ...

    def reserved_index(self, employee_id) -> int: ...

    def delete_unpaid_by_employee(self, employee_id) -> int: ...


class PayrollEntryStore(Protocol):
    def list_recurring(self) -> list[PayrollEntry]: ...

    def create_entry(self, fields: dict): ...


class MembershipScopedStore:
    def __init__(self, company, membership=None):
        self.company = company
        self.membership = membership

    def _ensure_can_write(self):
        if self.membership is not None and not self.membership.can_manage_payroll:
            raise StorePermissionDenied()


class DjangoBillStore(MembershipScopedStore):
    def _queryset(self):
        return Bill.objects.filter(company=self.company)

    @staticmethod
    def _to_record(bill: Bill) -> ExistingRecord:
        return ExistingRecord(
            id=bill.id,
            group_key=bill.recurrence_group_id or str(bill.employee_id),
            due_date=bill.due_date,
            status=bill.status,
            recurrence_index=bill.recurrence_index,
        )

    def list_by_employee(self, employee_id) -> list[ExistingRecord]:
        try:
            bills = list(self._queryset().filter(employee_id=employee_id))
        except DatabaseError as exc:
            raise StoreReadError(f"Erro ao buscar contas do funcionário {employee_id}.") from exc
        return [self._to_record(bill) for bill in bills]

    def reserved_index(self, employee_id) -> int:
        """Maior `recurrence_index` já entregue ao funcionário, inclusive de contas excluídas."""
        try:
            value = (
                Employee.objects.filter(pk=employee_id, company=self.company)
                .values_list("last_recurrence_index", flat=True)
                .first()
            )
        except DatabaseError as exc:
            raise StoreReadError(f"Erro ao buscar a numeração do funcionário {employee_id}.") from exc
        return value or 0

    def list_by_type(self, bill_type: str) -> list[Bill]:
        try:
            return list(self._queryset().filter(type=bill_type))
        except DatabaseError as exc:
            raise StoreReadError(f"Erro ao buscar contas do tipo {bill_type}.") from exc

    def create(self, bill: NewBill):
        self._ensure_can_write()
        payout = bill.payout
        instance = Bill(
            company=self.company,
            obra_id=bill.cost_center.obra_id if isinstance(bill.cost_center, Assigned) else None,
            employee_id=bill.employee_id,
            payroll_entry_id=bill.payroll_entry_id,
            type=bill.type,
            description=bill.description,
            amount=bill.amount,
            due_date=bill.due_date,
            paid_on=bill.paid_on,
            status=bill.status,
            payee=payout.payee,
            bank=payout.bank,
            agency=payout.agency,
            account=payout.account,
            pix_key=payout.pix_key,
            payout_method=payout.payout_method,
            recurrence_group_id=bill.group_id,
            recurrence_index=bill.recurrence_index,
            created_by=bill.created_by,
        )
        try:
            with transaction.atomic():
                instance.save()
                if bill.employee_id and bill.recurrence_index:
                    Employee.objects.filter(
                        pk=bill.employee_id,
                        company=self.company,
                        last_recurrence_index__lt=bill.recurrence_index,
                    ).update(last_recurrence_index=bill.recurrence_index)
        except (DatabaseError, ValidationError) as exc:
            raise StoreWriteError(
                f"Erro ao criar conta de {payout.payee or bill.employee_id} em {bill.due_date}."
            ) from exc
        return instance.id

    def delete_unpaid_by_employee(self, employee_id) -> int:
        self._ensure_can_write()
        with transaction.atomic():
            deleted, _ = (
                self._queryset()
                .filter(employee_id=employee_id)
                .exclude(status=Bill.Status.PAGO)
                .delete()
            )
        logger.info("Removidas %s contas não pagas do funcionário %s.", deleted, employee_id)
        return deleted


class DjangoPayrollEntryStore(MembershipScopedStore):
    def _queryset(self):
        return PayrollEntry.objects.filter(company=self.company)

    def list_entries(self) -> list[PayrollEntry]:
        try:
            return list(self._queryset())
        except DatabaseError as exc:
            raise StoreReadError("Erro ao buscar lançamentos da folha.") from exc

    def list_recurring(self) -> list[PayrollEntry]:
        try:
            return list(self._queryset().exclude(recurrence_type=""))
        except DatabaseError as exc:
            raise StoreReadError("Erro ao buscar lançamentos recorrentes da folha.") from exc

    def create_entry(self, fields: dict):
        self._ensure_can_write()
        entry = PayrollEntry(company=self.company, **fields)
        try:
            with transaction.atomic():
                entry.save()
        except (DatabaseError, ValidationError) as exc:
            raise StoreWriteError(
                f"Erro ao criar lançamento de {fields.get('employee_name')} em {fields.get('reference_date')}."
            ) from exc
        return entry.id

    def mark_migrated(self, entry_id, bill_id) -> None:
        self._ensure_can_write()
        self._queryset().filter(pk=entry_id).update(migrated=True, bill_id=bill_id)
