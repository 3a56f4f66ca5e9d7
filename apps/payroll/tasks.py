from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.companies.models import Company

from .ledger import rolling_window, sync_entries_to_bills
from .models import Employee
from .reconciler import generate_bills
from .seeder import seed_open_ended_recurrences
from .stores import DjangoBillStore, DjangoPayrollEntryStore

logger = logging.getLogger(__name__)

SYSTEM_USER = "system"


@shared_task(name='payroll.seed_open_ended_recurrences')
def seed_rolling_horizon() -> dict:
    """Seed open-ended payroll groups from the current month up to the horizon, then sync them to bills."""
    date_from, date_to = rolling_window(timezone.localdate(), settings.PAYROLL_SEED_HORIZON_MONTHS)
    totals = {"created": 0, "skipped": 0, "failed": 0, "migrated": 0}
    for company in Company.objects.all():
        entry_store = DjangoPayrollEntryStore(company)
        with transaction.atomic():
            seeded = seed_open_ended_recurrences(entry_store, date_from, date_to)
            synced = sync_entries_to_bills(
                entry_store,
                DjangoBillStore(company),
                created_by=SYSTEM_USER,
                limit=settings.PAYROLL_SYNC_LIMIT,
            )
        totals["created"] += seeded.created
        totals["skipped"] += seeded.skipped
        totals["failed"] += seeded.failed + synced.failed
        totals["migrated"] += synced.migrated
    logger.info("Horizonte da folha até %s: %s", date_to, totals)
    return totals


@shared_task(name='payroll.extend_employee_bills')
def extend_employee_bills() -> int:
    """Top up the forward window of every active employee; existing bills are kept."""
    created = 0
    queryset = Employee.objects.filter(is_active=True).select_related('company', 'obra')
    for employee in queryset:
        result = generate_bills(employee, DjangoBillStore(employee.company), created_by=SYSTEM_USER)
        created += result.created
    return created
