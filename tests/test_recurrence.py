from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

from apps.payroll.recurrence import (
    Biweekly,
    CustomInterval,
    Monthly,
    OneOff,
    Weekly,
    add_months,
    business_day_ordinal,
    compute_due_dates,
    nth_business_day,
    period_days,
    to_local_date,
)


def _dates(result):
    return [item.due_date for item in result]


def test_monthly_day_20_over_three_months():
    result = compute_due_dates(Monthly(Decimal("3000"), day_of_month=20), date(2026, 1, 10), 3)
    assert _dates(result) == [date(2026, 1, 20), date(2026, 2, 20), date(2026, 3, 20)]
    assert all(item.amount == Decimal("3000") for item in result)


def test_monthly_day_31_is_clamped_to_month_end():
    result = compute_due_dates(Monthly(Decimal("100"), day_of_month=31), date(2026, 1, 1), 3)
    assert _dates(result) == [date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 31)]


def test_monthly_skips_dates_before_window_start():
    result = compute_due_dates(Monthly(Decimal("100"), day_of_month=20), date(2026, 1, 25), 2)
    assert _dates(result) == [date(2026, 2, 20)]


def test_monthly_zero_amount_yields_nothing():
    assert compute_due_dates(Monthly(Decimal("0")), date(2026, 1, 1), 12) == []


def test_nth_business_day_when_month_starts_on_saturday():
    # Agosto/2026 começa num sábado.
    assert nth_business_day(2026, 8, 1) == date(2026, 8, 3)
    assert nth_business_day(2026, 8, 5) == date(2026, 8, 7)


def test_nth_business_day_falls_back_to_last_day():
    # Fevereiro/2026 tem 20 dias úteis.
    assert nth_business_day(2026, 2, 20) == date(2026, 2, 27)
    assert nth_business_day(2026, 2, 22) == date(2026, 2, 28)


def test_business_day_ordinal():
    assert business_day_ordinal(date(2026, 8, 7)) == 5
    assert business_day_ordinal(date(2026, 8, 8)) == 0


def test_biweekly_when_month_starts_on_sunday():
    schedule = Biweekly(Decimal("1000"), Decimal("1500"), business_day=5, second_day=20)
    result = compute_due_dates(schedule, date(2026, 2, 1), 1)
    assert [(item.due_date, item.amount) for item in result] == [
        (date(2026, 2, 6), Decimal("1000")),
        (date(2026, 2, 20), Decimal("1500")),
    ]


def test_biweekly_first_business_day_of_sunday_month():
    schedule = Biweekly(Decimal("1000"), Decimal("1000"), business_day=1, second_day=15)
    result = compute_due_dates(schedule, date(2026, 2, 1), 1)
    assert _dates(result) == [date(2026, 2, 2), date(2026, 2, 15)]


def test_biweekly_drops_zero_half():
    schedule = Biweekly(Decimal("1000"), Decimal("0"), business_day=5, second_day=20)
    result = compute_due_dates(schedule, date(2026, 2, 1), 2)
    assert _dates(result) == [date(2026, 2, 6), date(2026, 3, 6)]


def test_biweekly_second_half_before_first_is_sorted():
    schedule = Biweekly(Decimal("1"), Decimal("2"), business_day=20, second_day=2)
    result = compute_due_dates(schedule, date(2026, 3, 1), 1)
    assert _dates(result) == sorted(_dates(result))


def test_weekly_steps_seven_days_for_one_month():
    result = compute_due_dates(Weekly(Decimal("500")), date(2026, 1, 5), 1)
    assert _dates(result) == [
        date(2026, 1, 5),
        date(2026, 1, 12),
        date(2026, 1, 19),
        date(2026, 1, 26),
        date(2026, 2, 2),
    ]


def test_custom_interval():
    result = compute_due_dates(CustomInterval(Decimal("200"), interval_days=10), date(2026, 1, 1), 1)
    assert _dates(result) == [date(2026, 1, 1), date(2026, 1, 11), date(2026, 1, 21), date(2026, 1, 31)]


def test_one_off_inside_and_before_window():
    inside = compute_due_dates(OneOff(Decimal("750"), date(2026, 3, 5)), date(2026, 1, 1), 12)
    assert _dates(inside) == [date(2026, 3, 5)]
    before = compute_due_dates(OneOff(Decimal("750"), date(2025, 12, 5)), date(2026, 1, 1), 12)
    assert before == []


def test_unknown_schedule_yields_nothing():
    assert compute_due_dates(None, date(2026, 1, 1), 12) == []


def test_schedule_is_not_mutated():
    schedule = Monthly(Decimal("10"), day_of_month=31)
    compute_due_dates(schedule, date(2026, 1, 1), 12)
    assert schedule == Monthly(Decimal("10"), day_of_month=31)


def test_add_months_clamps_day():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)
    assert add_months(date(2026, 3, 1), -1) == date(2026, 2, 1)


def test_to_local_date_uses_project_timezone():
    # 02:00 UTC ainda é o dia anterior em America/Sao_Paulo.
    moment = datetime(2026, 3, 1, 2, 0, tzinfo=dt_timezone.utc)
    assert to_local_date(moment) == date(2026, 2, 28)
    assert to_local_date(date(2026, 3, 1)) == date(2026, 3, 1)


def test_period_days():
    assert period_days(Weekly(Decimal("1"))) == 7
    assert period_days(CustomInterval(Decimal("1"), interval_days=15)) == 15
    assert period_days(Monthly(Decimal("1"))) is None
