from __future__ import annotations

import logging

from celery import shared_task
from django.utils import timezone

from .models import Bill

logger = logging.getLogger(__name__)


@shared_task(name='financials.mark_overdue_bills')
def mark_overdue_bills() -> int:
    """Flag every pending Bill whose due date has passed as overdue."""
    today = timezone.localdate()
    updated = Bill.objects.filter(
        status=Bill.Status.PENDENTE,
        due_date__lt=today,
    ).update(status=Bill.Status.VENCIDO, updated_at=timezone.now())
    logger.info("%s conta(s) marcada(s) como vencida(s).", updated)
    return updated
