"""
Cálculo de vencimentos da folha.

Cada tipo de recorrência tem sua própria regra (`OneOff`, `Monthly`,
`Biweekly`, `Weekly`, `CustomInterval`) com apenas os campos que usa.
`compute_due_dates` é pura: não acessa banco nem altera a regra recebida.

Todas as datas são `datetime.date`; valores `datetime` são convertidos
para a data local antes de qualquer comparação.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from django.utils import timezone

from .types import DueDate

SATURDAY = 5


@dataclass(frozen=True)
class OneOff:
    amount: Decimal
    due_date: date | None = None


@dataclass(frozen=True)
class Monthly:
    amount: Decimal
    day_of_month: int = 20


@dataclass(frozen=True)
class Biweekly:
    first_amount: Decimal
    second_amount: Decimal
    business_day: int = 5
    second_day: int = 20


@dataclass(frozen=True)
class Weekly:
    amount: Decimal
    interval_days: int = 7


@dataclass(frozen=True)
class CustomInterval:
    amount: Decimal
    interval_days: int = 1


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


def to_local_date(value) -> date:
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    return value


def is_business_day(value: date) -> bool:
    return value.weekday() < SATURDAY


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day_in_month(year: int, month: int, day: int) -> date:
    return date(year, month, clamp(day, 1, last_day_of_month(year, month)))


def nth_business_day(year: int, month: int, n: int) -> date:
    """N-ésimo dia útil (seg-sex) do mês; último dia do mês se não houver tantos."""
    target = max(1, int(n or 1))
    count = 0
    for day in range(1, last_day_of_month(year, month) + 1):
        current = date(year, month, day)
        if not is_business_day(current):
            continue
        count += 1
        if count == target:
            return current
    return date(year, month, last_day_of_month(year, month))


def business_day_ordinal(value: date) -> int:
    """Posição de `value` entre os dias úteis do seu mês (0 se não for dia útil)."""
    if not is_business_day(value):
        return 0
    return sum(
        1
        for day in range(1, value.day + 1)
        if is_business_day(date(value.year, value.month, day))
    )


def add_months(original: date, months: int) -> date:
    month = original.month - 1 + months
    year = original.year + month // 12
    month = month % 12 + 1
    day = min(original.day, last_day_of_month(year, month))
    return date(year, month, day)


def iter_months(start: date, months: int):
    """Gera (ano, mês) de `months` meses consecutivos a partir do mês de `start`."""
    for offset in range(months):
        first = add_months(date(start.year, start.month, 1), offset)
        yield first.year, first.month


def month_start(value: date) -> date:
    return date(value.year, value.month, 1)


def _positive(amount) -> bool:
    return amount is not None and Decimal(amount) > 0


def _step(start: date, end: date, interval_days: int, amount) -> list[DueDate]:
    result = []
    current = start
    step = timedelta(days=max(1, int(interval_days)))
    while current < end:
        result.append(DueDate(current, Decimal(amount)))
        current += step
    return result


def compute_due_dates(schedule, window_start, months: int) -> list[DueDate]:
    """Vencimentos (data + valor) que devem existir na janela, em ordem de data."""
    start = to_local_date(window_start)
    result: list[DueDate] = []

    if isinstance(schedule, OneOff):
        due = to_local_date(schedule.due_date) if schedule.due_date else start
        if _positive(schedule.amount) and due >= start:
            result.append(DueDate(due, Decimal(schedule.amount)))
        return result

    if isinstance(schedule, Monthly):
        if not _positive(schedule.amount):
            return result
        for year, month in iter_months(start, months):
            due = clamp_day_in_month(year, month, schedule.day_of_month)
            if due >= start:
                result.append(DueDate(due, Decimal(schedule.amount)))
        return result

    if isinstance(schedule, Biweekly):
        for year, month in iter_months(start, months):
            first = nth_business_day(year, month, schedule.business_day)
            second = clamp_day_in_month(year, month, schedule.second_day)
            if first >= start and _positive(schedule.first_amount):
                result.append(DueDate(first, Decimal(schedule.first_amount)))
            if second >= start and _positive(schedule.second_amount):
                result.append(DueDate(second, Decimal(schedule.second_amount)))
        result.sort(key=lambda item: item.due_date)
        return result

    if isinstance(schedule, (Weekly, CustomInterval)):
        if not _positive(schedule.amount):
            return result
        return _step(start, add_months(start, months), schedule.interval_days, schedule.amount)

    return result


def period_days(schedule) -> int | None:
    """Intervalo fixo em dias das regras por passo; None para as regras de calendário."""
    if isinstance(schedule, (Weekly, CustomInterval)):
        return max(1, int(schedule.interval_days))
    return None
