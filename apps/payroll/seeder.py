"""
Semeadura de recorrências da folha por tempo indeterminado.

Para cada grupo de lançamentos recorrentes sem data de término, garante que
existam os lançamentos do intervalo [date_from, date_to]. Mensal e
quinzenal são varridos mês a mês; semanal e personalizado avançam a partir
da data mais antiga do grupo, mantendo o mesmo passo da sequência original.

Rodar duas vezes o mesmo intervalo não cria duplicatas: os lançamentos
existentes são relidos e indexados a cada execução.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta

from .exceptions import StoreWriteError
from .index import build_index
from .recurrence import (
    add_months,
    business_day_ordinal,
    clamp,
    clamp_day_in_month,
    month_start,
    nth_business_day,
    to_local_date,
)
from .types import ExistingRecord

logger = logging.getLogger(__name__)

MAX_STEPS = 5000
CALENDAR_TYPES = ("mensal", "quinzenal")
STEP_TYPES = ("semanal", "personalizado")


@dataclass
class SeedResult:
    created: int = 0
    skipped: int = 0
    failed: int = 0

    def as_dict(self) -> dict:
        return {"created": self.created, "skipped": self.skipped, "failed": self.failed}


def _normalize(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def hash_string(value: str) -> str:
    """Hash DJB2 (variante xor) em base36. Determinístico entre execuções."""
    h = 5381
    encoded = value.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = _int32(_int32(h << 5) + h) ^ code_unit
    return _base36(h & 0xFFFFFFFF)


def fallback_group_key(entry) -> str | None:
    """
    Chave de grupo para lançamentos recorrentes sem `group_id`.

    Derivada de quem criou, tipo, CPF, nome e categoria. Colisões são
    improváveis mas possíveis.
    """
    tipo = _normalize(entry.recurrence_type)
    if not tipo:
        return None
    created_by = _normalize(entry.created_by) or "user"
    cpf = re.sub(r"\D", "", _normalize(entry.cpf))
    name = _normalize(entry.employee_name).lower()
    category = _normalize(entry.category) or "none"
    seed = f"{created_by}|{tipo}|{cpf}|{name}|{category}"
    return f"auto_{created_by}_{tipo}_{hash_string(seed)[:10]}"


def group_key_of(entry) -> str | None:
    return entry.group_id or fallback_group_key(entry)


def _business_day_for(template) -> int:
    raw = template.business_day or 0
    if raw > 0:
        return clamp(raw, 1, 22)
    reference = to_local_date(template.reference_date)
    ordinal = business_day_ordinal(reference)
    if ordinal:
        return clamp(ordinal, 1, 22)
    return 5


def _second_day_for(template) -> int:
    raw = template.second_day or 0
    if raw > 0:
        return clamp(raw, 1, 31)
    day = to_local_date(template.reference_date).day
    return day if day >= 15 else 20


def _entry_fields(template, group_key: str, index: int, reference_date: date, **extra) -> dict:
    fields = {
        "employee_name": template.employee_name,
        "cpf": template.cpf or "",
        "bank": template.bank or "",
        "agency": template.agency or "",
        "account": template.account or "",
        "amount": template.amount,
        "amount_paid": 0,
        "status": "aberto",
        "payout_method": template.payout_method or "",
        "category": template.category or "",
        "recurrence_type": template.recurrence_type,
        "interval_days": template.interval_days,
        "open_ended": True,
        "group_id": group_key,
        "recurrence_index": index,
        "reference_date": reference_date,
        "created_by": template.created_by or "",
        "notes": template.notes or "",
    }
    fields.update(extra)
    return fields


def _group_entries(entries) -> dict[str, list]:
    groups: dict[str, list] = {}
    for entry in entries:
        if not entry.recurrence_type:
            continue
        key = group_key_of(entry)
        if not key:
            continue
        groups.setdefault(key, []).append(entry)
    return groups


def _desired_calendar_dates(template, year: int, month: int):
    business_day = _business_day_for(template)
    second_day = _second_day_for(template)
    first = nth_business_day(year, month, business_day)
    if template.recurrence_type == "mensal":
        return [first], business_day, second_day
    return [first, clamp_day_in_month(year, month, second_day)], business_day, second_day


def _desired_step_dates(anchor: date, interval_days: int, date_from: date, date_to: date) -> list[date]:
    diff_days = (date_from - anchor).days
    k_start = 0 if diff_days <= 0 else -(-diff_days // interval_days)
    desired = []
    for k in range(k_start, k_start + MAX_STEPS):
        current = anchor + timedelta(days=k * interval_days)
        if current > date_to:
            break
        if current >= date_from:
            desired.append(current)
    return desired


def seed_open_ended_recurrences(store, date_from, date_to) -> SeedResult:
    """Cria os lançamentos que faltam no intervalo para os grupos sem término."""
    result = SeedResult()
    if date_from is None or date_to is None:
        return result
    date_from = to_local_date(date_from)
    date_to = to_local_date(date_to)
    if date_from > date_to:
        return result

    entries = store.list_recurring()
    groups = {
        key: members
        for key, members in _group_entries(entries).items()
        if any(member.open_ended for member in members)
    }
    if not groups:
        return result

    index = build_index(
        ExistingRecord(
            id=entry.id,
            group_key=key,
            due_date=to_local_date(entry.reference_date),
            recurrence_index=entry.recurrence_index,
        )
        for key, members in groups.items()
        for entry in members
    )
    templates = {
        key: max(members, key=lambda entry: to_local_date(entry.reference_date))
        for key, members in groups.items()
    }

    def create(template, key: str, reference_date: date, **extra):
        if index.has(key, reference_date):
            result.skipped += 1
            return
        recurrence_index = index.next_index(key)
        try:
            store.create_entry(_entry_fields(template, key, recurrence_index, reference_date, **extra))
        except StoreWriteError:
            logger.error("Falha ao semear o grupo %s em %s.", key, reference_date, exc_info=True)
            result.failed += 1
            return
        index.add(key, reference_date, recurrence_index)
        result.created += 1

    current = month_start(date_from)
    last = month_start(date_to)
    while current <= last:
        for key, template in templates.items():
            if template.recurrence_type not in CALENDAR_TYPES:
                continue
            desired, business_day, second_day = _desired_calendar_dates(
                template, current.year, current.month
            )
            for reference_date in desired:
                if not date_from <= reference_date <= date_to:
                    continue
                create(
                    template,
                    key,
                    reference_date,
                    business_day=business_day,
                    second_day=second_day,
                )
        current = add_months(current, 1)

    for key, template in templates.items():
        if template.recurrence_type not in STEP_TYPES:
            continue
        if template.recurrence_type == "semanal":
            interval_days = 7
        else:
            interval_days = max(1, template.interval_days or 1)
        anchor = index.min_date(key) or to_local_date(template.reference_date)
        for reference_date in _desired_step_dates(anchor, interval_days, date_from, date_to):
            create(template, key, reference_date, interval_days=interval_days)

    logger.info(
        "Recorrências indeterminadas entre %s e %s: %s criada(s), %s já existente(s), %s falha(s).",
        date_from,
        date_to,
        result.created,
        result.skipped,
        result.failed,
    )
    return result
