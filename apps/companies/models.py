import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class TimeStampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Company(TimeStampedModel):
    """
    Construtora (multi-tenant). Todas as obras, contas e funcionários
    pertencem a uma empresa.
    """

    name = models.CharField(max_length=255)
    cnpj = models.CharField(max_length=255, blank=True)
    email = models.EmailField(max_length=255, blank=True)

    class Meta:
        db_table = "company"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Obra(TimeStampedModel):
    """
    Obra (canteiro/projeto). Funciona como centro de custo das contas a pagar.
    """

    class Status(models.TextChoices):
        PLANEJAMENTO = "planejamento", "Planejamento"
        EM_ANDAMENTO = "em_andamento", "Em andamento"
        PAUSADA = "pausada", "Pausada"
        CONCLUIDA = "concluida", "Concluída"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="obras",
    )
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, editable=False)
    address = models.CharField(max_length=255, blank=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.EM_ANDAMENTO
    )

    class Meta:
        db_table = "obra"
        ordering = ["company__name", "code"]
        unique_together = ("company", "code")

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        if not self.company_id:
            raise ValueError("Company is required for obra creation.")
        if not self.code:
            self.code = self._generate_next_code()
        super().save(*args, **kwargs)

    def _generate_next_code(self) -> str:
        codes = Obra.objects.filter(company=self.company).values_list("code", flat=True)
        numbers = [n for n in (self._extract_number(code) for code in codes) if n is not None]
        next_number = (max(numbers) if numbers else 0) + 1
        return f"OB-{str(next_number).zfill(3)}"

    @staticmethod
    def _extract_number(code: str):
        try:
            return int(str(code).split("-")[-1])
        except (ValueError, AttributeError, IndexError):
            return None


class Membership(TimeStampedModel):
    class Roles(models.TextChoices):
        ADMIN = "admin", "Admin"
        FINANCEIRO = "financeiro", "Financeiro"
        SECRETARIA = "secretaria", "Secretaria"
        ENGENHARIA = "engenharia", "Engenharia"

    # Perfis que podem gerar, editar e excluir lançamentos da folha.
    PAYROLL_ROLES = (Roles.ADMIN, Roles.FINANCEIRO, Roles.SECRETARIA)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    role = models.CharField(max_length=50, choices=Roles.choices)
    obra = models.ForeignKey(
        Obra,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="memberships",
        help_text="Obra à qual o usuário de engenharia está restrito.",
    )

    class Meta:
        db_table = "membership"
        unique_together = ("user", "company")
        ordering = ["company__name", "user__username"]

    def __str__(self):
        return f"{self.user} @ {self.company} ({self.role})"

    def clean(self):
        super().clean()
        if self.obra and self.obra.company_id != self.company_id:
            raise ValidationError({"obra": "Obra must belong to the same company."})

    @property
    def can_manage_payroll(self) -> bool:
        return self.role in self.PAYROLL_ROLES
