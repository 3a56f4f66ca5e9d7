"""
Semeia os lançamentos das recorrências da folha por tempo indeterminado.

Uso:
    docker-compose exec app python manage.py seed_payroll_recurrences --from 2026-01-01 --to 2026-12-31
    docker-compose exec app python manage.py seed_payroll_recurrences --from 2026-01-01 --to 2026-12-31 --company-id <uuid>
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.companies.models import Company
from apps.payroll.seeder import seed_open_ended_recurrences
from apps.payroll.stores import DjangoPayrollEntryStore


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise CommandError(f"Data inválida: {value}. Use o formato YYYY-MM-DD.")


class Command(BaseCommand):
    help = "Cria os lançamentos que faltam nas recorrências da folha sem data de término."

    def add_arguments(self, parser):
        parser.add_argument("--from", dest="date_from", required=True, help="Data inicial (YYYY-MM-DD).")
        parser.add_argument("--to", dest="date_to", required=True, help="Data final (YYYY-MM-DD).")
        parser.add_argument(
            "--company-id",
            type=str,
            help="ID da empresa. Se não fornecido, semeia todas as empresas.",
        )

    def handle(self, *args, **options):
        date_from = _parse_date(options["date_from"])
        date_to = _parse_date(options["date_to"])
        if date_from > date_to:
            raise CommandError("A data final deve ser igual ou posterior à inicial.")

        company_id = options.get("company_id")
        if company_id:
            companies = Company.objects.filter(id=company_id)
            if not companies.exists():
                raise CommandError(f"Empresa com ID {company_id} não encontrada.")
        else:
            companies = Company.objects.all()

        for company in companies:
            with transaction.atomic():
                result = seed_open_ended_recurrences(DjangoPayrollEntryStore(company), date_from, date_to)
            self.stdout.write(
                self.style.SUCCESS(
                    f"{company.name}: {result.created} lançamento(s) criado(s), {result.skipped} já existente(s), {result.failed} falha(s)."
                )
            )
