"""
Operações sobre o livro de lançamentos da folha (`PayrollEntry`).

- `create_recurring_entries`: cria de uma vez um grupo semanal/personalizado
  com quantidade definida.
- `start_open_ended_group`: abre um grupo mensal/quinzenal por tempo
  indeterminado, já com o mês de referência e os dois seguintes.
- `sync_entries_to_bills`: copia lançamentos ainda não migrados para as
  contas a pagar.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date, timedelta

from django.utils.crypto import get_random_string

from .exceptions import StoreWriteError
from .recurrence import add_months, clamp, clamp_day_in_month, month_start, nth_business_day, to_local_date
from .types import NewBill, PayoutSnapshot

logger = logging.getLogger(__name__)

MIN_RECURRING_TOTAL = 2
MAX_RECURRING_TOTAL = 60
OPEN_ENDED_INITIAL_MONTHS = 3
DEFAULT_SYNC_LIMIT = 300
MAX_SYNC_LIMIT = 800

# Só o primeiro lançamento do grupo herda os dados de pagamento informados.
FIRST_ONLY_FIELDS = ("amount_paid", "status", "payout_method", "paid_on")


@dataclass
class SyncResult:
    migrated: int = 0
    skipped: int = 0
    failed: int = 0

    def as_dict(self) -> dict:
        return {"migrated": self.migrated, "skipped": self.skipped, "failed": self.failed}


def new_group_id(created_by: str) -> str:
    chars = "abcdefghijklmnopqrstuvwxyz0123456789"
    return f"{created_by or 'user'}_{int(time.time() * 1000)}_{get_random_string(6, chars)}"


def _unpaid(fields: dict) -> dict:
    fields = dict(fields)
    fields.update(amount_paid=0, status="aberto", payout_method="", paid_on=None)
    return fields


def create_recurring_entries(
    store,
    base: dict,
    *,
    recurrence_type: str,
    total: int,
    interval_days: int | None = None,
) -> list:
    """
    Cria `total` lançamentos (2 a 60) espaçados por `interval_days`
    (7 para semanal) a partir de `base["reference_date"]`.
    """
    total = clamp(total or MIN_RECURRING_TOTAL, MIN_RECURRING_TOTAL, MAX_RECURRING_TOTAL)
    if recurrence_type == "semanal":
        step = 7
    else:
        step = max(1, int(interval_days or 1))
    start = to_local_date(base["reference_date"])
    group_id = new_group_id(base.get("created_by", ""))

    ids = []
    for offset in range(total):
        fields = dict(base) if offset == 0 else _unpaid(base)
        fields.update(
            reference_date=start + timedelta(days=offset * step),
            recurrence_type=recurrence_type,
            interval_days=step,
            open_ended=False,
            group_id=group_id,
            recurrence_index=offset + 1,
            recurrence_total=total,
        )
        ids.append(store.create_entry(fields))
    logger.info("Grupo %s criado com %s lançamentos.", group_id, total)
    return ids


def start_open_ended_group(
    store,
    base: dict,
    *,
    recurrence_type: str,
    business_day: int | None = None,
    second_day: int | None = None,
    second_amount=None,
) -> list:
    """
    Abre um grupo mensal ou quinzenal sem término. Cria o mês de referência
    e os dois seguintes; os demais meses ficam a cargo da semeadura periódica.
    """
    business_day = clamp(business_day or 5, 1, 22)
    second_day = clamp(second_day or 20, 1, 31)
    reference = to_local_date(base["reference_date"])
    group_id = new_group_id(base.get("created_by", ""))
    if second_amount is None:
        second_amount = base["amount"]

    dates = []
    for offset in range(OPEN_ENDED_INITIAL_MONTHS):
        current = add_months(month_start(reference), offset)
        dates.append((nth_business_day(current.year, current.month, business_day), base["amount"]))
        if recurrence_type == "quinzenal":
            dates.append((clamp_day_in_month(current.year, current.month, second_day), second_amount))

    ids = []
    for position, (reference_date, amount) in enumerate(dates, start=1):
        fields = dict(base) if reference_date == reference else _unpaid(base)
        fields.update(
            amount=amount,
            reference_date=reference_date,
            recurrence_type=recurrence_type,
            open_ended=True,
            business_day=business_day,
            second_day=second_day,
            group_id=group_id,
            recurrence_index=position,
            recurrence_total=None,
        )
        ids.append(store.create_entry(fields))
    return ids


def _bill_from_entry(entry, created_by: str) -> NewBill:
    is_paid = entry.status == "pago"
    return NewBill(
        amount=entry.amount,
        due_date=to_local_date(entry.reference_date),
        payroll_entry_id=entry.id,
        payout=PayoutSnapshot(
            payee=entry.employee_name,
            bank=entry.bank or "",
            agency=entry.agency or "",
            account=entry.account or "",
            payout_method=entry.payout_method or "",
        ),
        description=entry.employee_name,
        status="pago" if is_paid else "pendente",
        paid_on=(entry.paid_on or to_local_date(entry.reference_date)) if is_paid else None,
        created_by=created_by,
    )


def sync_entries_to_bills(entry_store, bill_store, *, created_by: str = "", limit: int | None = None) -> SyncResult:
    """
    Copia para contas a pagar os lançamentos da folha que ainda não têm conta.

    Os mais recentes vão primeiro. Lançamento marcado como migrado nunca é
    copiado de novo, mesmo que a conta tenha sido excluída depois.
    """
    limit = clamp(limit or DEFAULT_SYNC_LIMIT, 1, MAX_SYNC_LIMIT)
    entries = sorted(
        entry_store.list_entries(),
        key=lambda entry: to_local_date(entry.reference_date),
        reverse=True,
    )
    linked = {
        bill.payroll_entry_id: bill.id
        for bill in bill_store.list_by_type("folha")
        if bill.payroll_entry_id
    }

    result = SyncResult()
    for entry in entries:
        if entry.migrated:
            result.skipped += 1
            continue
        if entry.id in linked:
            entry_store.mark_migrated(entry.id, linked[entry.id])
            result.skipped += 1
            continue

        try:
            bill_id = bill_store.create(_bill_from_entry(entry, created_by))
        except StoreWriteError:
            logger.error(
                "Falha ao copiar o lançamento %s (%s) para contas a pagar.",
                entry.id,
                entry.employee_name,
                exc_info=True,
            )
            result.failed += 1
            continue
        entry_store.mark_migrated(entry.id, bill_id)
        linked[entry.id] = bill_id
        result.migrated += 1
        if result.migrated >= limit:
            break

    logger.info(
        "Sincronização folha -> contas a pagar: %s migrado(s), %s ignorado(s), %s falha(s).",
        result.migrated,
        result.skipped,
        result.failed,
    )
    return result


def rolling_window(today: date, months: int) -> tuple[date, date]:
    """Do início do mês corrente até o fim do mês `months` à frente."""
    start = month_start(today)
    end = add_months(start, months + 1) - timedelta(days=1)
    return start, end
