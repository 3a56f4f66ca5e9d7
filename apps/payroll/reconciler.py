"""
Materialização das contas a pagar da folha a partir do cadastro do funcionário.

Fluxo: regra de recorrência -> vencimentos candidatos -> filtro pelo índice
das contas existentes -> criação das que faltam, uma a uma e em ordem de
data para manter `recurrence_index` crescente.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from .exceptions import StoreWriteError
from .index import RecordIndex, build_index
from .recurrence import (
    OneOff,
    add_months,
    clamp,
    compute_due_dates,
    month_start,
    period_days,
)
from .types import DueDate, NewBill, PayoutSnapshot

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    created: int = 0
    skipped: int = 0
    failed: int = 0
    deleted: int = 0
    created_ids: list = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "created": self.created,
            "skipped": self.skipped,
            "failed": self.failed,
            "deleted": self.deleted,
            "errors": list(self.errors),
        }


def payout_snapshot(employee) -> PayoutSnapshot:
    return PayoutSnapshot(
        payee=employee.name,
        bank=employee.bank or "",
        agency=employee.agency or "",
        account=employee.account or "",
        pix_key=employee.pix_key or "",
        payout_method=employee.payout_method or "",
    )


def group_key_for(employee) -> str:
    return str(employee.id)


def reconcile(
    employee,
    candidates: list[DueDate],
    index: RecordIndex,
    persist,
    *,
    created_by: str = "",
) -> ReconcileResult:
    """
    Cria as contas candidatas que ainda não existem no índice.

    Falhas de gravação de um vencimento não interrompem os demais: são
    contadas em `failed` e descritas em `errors`. Qualquer outra exceção
    (inclusive falta de permissão) é propagada.
    """
    result = ReconcileResult()
    group_key = group_key_for(employee)
    snapshot = payout_snapshot(employee)

    for candidate in sorted(candidates, key=lambda item: item.due_date):
        if index.has(group_key, candidate.due_date):
            result.skipped += 1
            continue
        recurrence_index = index.next_index(group_key)
        new_bill = NewBill(
            employee_id=employee.id,
            amount=candidate.amount,
            due_date=candidate.due_date,
            cost_center=employee.cost_center,
            payout=snapshot,
            description=f"Folha - {employee.name}",
            group_id=group_key,
            recurrence_index=recurrence_index,
            created_by=created_by,
        )
        try:
            bill_id = persist(new_bill)
        except StoreWriteError as exc:
            logger.error(
                "Falha ao criar conta da folha de %s em %s.",
                employee.name,
                candidate.due_date,
                exc_info=True,
            )
            result.failed += 1
            result.errors.append(str(exc))
            continue
        index.add(group_key, candidate.due_date, recurrence_index)
        result.created += 1
        result.created_ids.append(bill_id)

    return result


def _today(today: date | None) -> date:
    return today or timezone.localdate()


def _load_index(store, employee):
    existing = store.list_by_employee(employee.id)
    index = build_index(existing)
    index.reserve(group_key_for(employee), store.reserved_index(employee.id))
    return existing, index


def generate_bills(
    employee,
    store,
    *,
    created_by: str = "",
    replace_future: bool = False,
    months_past: int = 0,
    today: date | None = None,
) -> ReconcileResult:
    """
    Gera as contas dos próximos meses (PAYROLL_FORWARD_MONTHS) a partir de hoje.

    `replace_future` remove antes todas as contas não pagas do funcionário e
    recria (uso na edição). Com `months_past` > 0 a geração começa no início
    do mês de X meses atrás e nada é removido, apenas completado, para não
    perder histórico de pagamentos.
    """
    if not employee.is_active:
        return ReconcileResult()

    today = _today(today)
    forward_months = settings.PAYROLL_FORWARD_MONTHS
    include_past = (months_past or 0) > 0
    if include_past:
        months_past = clamp(months_past, 1, settings.PAYROLL_MAX_PAST_MONTHS)
        window_start = month_start(add_months(today, -months_past))
        months = months_past + forward_months
    else:
        window_start = today
        months = forward_months

    candidates = compute_due_dates(employee.schedule(), window_start, months)

    existing, index = _load_index(store, employee)
    deleted = 0
    if replace_future and not include_past:
        deleted = store.delete_unpaid_by_employee(employee.id)
        for record in existing:
            if not record.is_paid:
                index.discard(record.group_key, record.due_date)

    if not candidates:
        logger.debug("Nenhum vencimento para %s (%s).", employee.name, employee.recurrence_type)
        return ReconcileResult(deleted=deleted)

    result = reconcile(
        employee,
        candidates,
        index,
        store.create,
        created_by=created_by,
    )
    result.deleted = deleted
    logger.info(
        "Folha de %s: %s conta(s) criada(s), %s já existente(s), %s falha(s).",
        employee.name,
        result.created,
        result.skipped,
        result.failed,
    )
    return result


def _step_back(earliest: date, interval_days: int, window_start: date, amount) -> list[DueDate]:
    result = []
    if not amount or Decimal(amount) <= 0:
        return result
    current = earliest - timedelta(days=interval_days)
    while current >= window_start:
        result.append(DueDate(current, Decimal(amount)))
        current -= timedelta(days=interval_days)
    return result


def extend_one_period_back(
    employee,
    store,
    *,
    created_by: str = "",
    today: date | None = None,
) -> ReconcileResult:
    """
    Adiciona um mês de lançamentos antes da conta mais antiga existente
    (ou do mês anterior a hoje, se não houver nenhuma).
    """
    schedule = employee.schedule()
    if not employee.is_active or schedule is None or isinstance(schedule, OneOff):
        return ReconcileResult()

    existing, index = _load_index(store, employee)
    if existing:
        earliest = min(record.due_date for record in existing)
        window_start = month_start(add_months(earliest, -1))
    else:
        earliest = None
        window_start = month_start(add_months(_today(today), -1))

    interval = period_days(schedule)
    if interval and earliest is not None:
        # Mantém o passo alinhado com a sequência já existente.
        candidates = _step_back(earliest, interval, window_start, schedule.amount)
    else:
        candidates = compute_due_dates(schedule, window_start, 1)

    if not candidates:
        return ReconcileResult()

    return reconcile(
        employee,
        candidates,
        index,
        store.create,
        created_by=created_by,
    )
